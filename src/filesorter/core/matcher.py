"""
Rule Matcher Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module picks the destination rule for a file. Classification is purely
extension based: the first enabled rule (in active-rule order) listing the
file's extension wins. No match means the file is left where it is.

NOTICE: This software is proprietary and confidential.
See LICENSE.txt for full terms and conditions.

Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import os
from typing import Optional, Sequence

from .rules import ActiveConfig, Rule


def extension_of(file_path: str) -> str:
    """
    Get the lowercase extension of a file, including the dot.

    Dotfiles such as ``.bashrc`` have no extension.

    Example:
        >>> extension_of("/tmp/HOLIDAY.JPG")
        '.jpg'
        >>> extension_of("README")
        ''
    """
    return os.path.splitext(os.path.basename(file_path))[1].lower()


def match(file_path: str, active_rules: Sequence[Rule]) -> Optional[Rule]:
    """
    Select the rule a file belongs to.

    Args:
        file_path (str): File path or bare file name
        active_rules (Sequence[Rule]): Rules in priority order

    Returns:
        Rule or None: First enabled rule listing the file's extension
    """
    extension = extension_of(file_path)
    if not extension:
        return None

    for rule in active_rules:
        if rule.enabled and extension in rule.extensions:
            return rule

    return None


class RuleMatcher:
    """
    Matcher bound to one active configuration.

    Attributes:
        active (ActiveConfig): Configuration snapshot and its derived rules
    """

    def __init__(self, active: ActiveConfig):
        self.active = active

    def match(self, file_path: str) -> Optional[Rule]:
        """Match a file, or return None while no base target folder is set."""
        if not self.active.snapshot.base_target_folder:
            return None
        return match(file_path, self.active.rules)
