"""
Rule Model Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module turns a configuration snapshot into the ordered list of matching
rules used by the matcher: enabled built-in rules first, then enabled custom
categories, each group in declaration order. The order is the priority.

NOTICE: This software is proprietary and confidential.
See LICENSE.txt for full terms and conditions.

Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import FrozenSet, Iterable, Optional, Tuple

from ..config import ConfigSnapshot

logger = logging.getLogger(__name__)


class RuleOrigin(str, Enum):
    BUILTIN = "builtin"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Rule:
    """
    A single extension-set to destination-folder mapping.

    Attributes:
        extensions (FrozenSet[str]): Lowercase, dot-prefixed extensions
        target_folder (str): Folder relative to the base target folder
        enabled (bool): Disabled rules never match
        origin (RuleOrigin): Built-in rule or custom category
        category_name (str, optional): Custom category name
        id (str, optional): Custom category id
    """

    extensions: FrozenSet[str]
    target_folder: str
    enabled: bool = True
    origin: RuleOrigin = RuleOrigin.BUILTIN
    category_name: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.origin is RuleOrigin.CUSTOM

    @property
    def label(self) -> str:
        """Human readable destination, e.g. ``Receipts (Finance)``."""
        if self.is_custom:
            return f"{self.category_name} ({self.target_folder})"
        return self.target_folder


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and make sure it starts with a dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    return extension


def normalize_extensions(extensions: Iterable[str]) -> FrozenSet[str]:
    return frozenset(
        ext for ext in (normalize_extension(e) for e in extensions)
        if ext and ext != '.'
    )


def is_safe_target_folder(target_folder: str) -> bool:
    """
    Check that a target folder stays inside the base target folder.

    Empty, absolute and parent-relative (``..``) folders are rejected.
    """
    if not target_folder or not target_folder.strip():
        return False
    if os.path.isabs(target_folder) or PurePath(target_folder).anchor:
        return False
    return '..' not in PurePath(target_folder.replace('\\', '/')).parts


def _make_rule(extensions: Iterable[str], target_folder: str, origin: RuleOrigin,
               category_name: Optional[str] = None, rule_id: Optional[str] = None) -> Rule:
    normalized = normalize_extensions(extensions)

    if not is_safe_target_folder(target_folder):
        if normalized:
            logger.warning(f"Rule for {sorted(normalized)} has an invalid target folder "
                           f"{target_folder!r}; it will not match any file")
        normalized = frozenset()

    return Rule(
        extensions=normalized,
        target_folder=target_folder,
        enabled=True,
        origin=origin,
        category_name=category_name,
        id=rule_id
    )


def build_active_rules(config: ConfigSnapshot) -> Tuple[Rule, ...]:
    """
    Build the ordered list of active rules from a configuration snapshot.

    Args:
        config (ConfigSnapshot): Configuration to derive rules from

    Returns:
        Tuple[Rule, ...]: Enabled built-in rules followed by enabled custom
        categories, in declaration order
    """
    rules = [
        _make_rule(file_rule.extensions, file_rule.target_folder, RuleOrigin.BUILTIN)
        for file_rule in config.file_rules
        if file_rule.enabled
    ]

    rules.extend(
        _make_rule(category.extensions, category.folder_name, RuleOrigin.CUSTOM,
                   category_name=category.name, rule_id=category.id)
        for category in config.custom_categories
        if category.enabled
    )

    return tuple(rules)


@dataclass(frozen=True)
class ActiveConfig:
    """A configuration snapshot together with the rules derived from it."""

    snapshot: ConfigSnapshot
    rules: Tuple[Rule, ...]

    @classmethod
    def from_snapshot(cls, snapshot: ConfigSnapshot) -> "ActiveConfig":
        return cls(snapshot=snapshot, rules=build_active_rules(snapshot))


class ConfigHandle:
    """
    Owner of the active configuration.

    Readers call ``current()`` once per unit of work and keep the returned
    object; writers replace it wholesale with ``swap()``.
    """

    def __init__(self, snapshot: Optional[ConfigSnapshot] = None):
        self._active = ActiveConfig.from_snapshot(snapshot or ConfigSnapshot())
        self._lock = threading.Lock()

    def current(self) -> ActiveConfig:
        return self._active

    def swap(self, snapshot: ConfigSnapshot) -> ActiveConfig:
        """
        Replace the active configuration.

        Returns:
            ActiveConfig: The previously active configuration
        """
        active = ActiveConfig.from_snapshot(snapshot)
        with self._lock:
            previous, self._active = self._active, active
        return previous
