"""
File Mover Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module relocates a file into its category folder. It tries an atomic
rename first and falls back to copy + delete when source and destination sit
on different devices. Failures are returned as outcomes, never raised.

NOTICE: This software is proprietary and confidential. Unauthorized copying,
modification, distribution, or use is strictly prohibited.
See LICENSE.txt for full terms and conditions.

Version: 1.0.0
Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .rules import Rule

logger = logging.getLogger(__name__)


class MoveErrorKind(str, Enum):
    MKDIR = "mkdir"
    RENAME = "rename"
    COPY = "copy"
    # Copy succeeded but the source could not be removed: the file now exists twice
    UNLINK = "unlink"


@dataclass(frozen=True)
class MoveOutcome:
    """
    Result of one attempted move.

    Attributes:
        file_name (str): Base name of the file
        source_dir (str): Folder the file was in
        destination_folder (str): Rule's target folder (relative)
        category_label (str): Display label of the matched rule
        success (bool): Whether the file reached its destination
        destination_path (str): Full destination path
        error_kind (MoveErrorKind, optional): Which step failed
        error_detail (str, optional): Underlying error message
    """

    file_name: str
    source_dir: str
    destination_folder: str
    category_label: str
    success: bool
    destination_path: str = ""
    error_kind: Optional[MoveErrorKind] = None
    error_detail: Optional[str] = None


def _error_message(error: OSError) -> str:
    if error.strerror:
        return f"{error.strerror}: {error.filename}" if error.filename else error.strerror
    return str(error)


class Mover:
    """
    Performs file moves into category folders.

    Destination names are never made unique: an existing file with the same
    name is replaced, as an atomic rename would do.
    """

    def move(self, file_path: str, base_target_folder: str, rule: Rule) -> MoveOutcome:
        """
        Move a file into ``base_target_folder / rule.target_folder``.

        Args:
            file_path (str): File to move
            base_target_folder (str): Base destination directory
            rule (Rule): Matched rule

        Returns:
            MoveOutcome: Success, or the failing step and its error message
        """
        source = Path(file_path)
        destination_dir = Path(base_target_folder) / rule.target_folder
        destination = destination_dir / source.name

        def outcome(success: bool, kind: Optional[MoveErrorKind] = None,
                    detail: Optional[str] = None) -> MoveOutcome:
            return MoveOutcome(
                file_name=source.name,
                source_dir=str(source.parent),
                destination_folder=rule.target_folder,
                category_label=rule.label,
                success=success,
                destination_path=str(destination),
                error_kind=kind,
                error_detail=detail
            )

        # Concurrent creation of the same folder is fine
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug(f"Could not create {destination_dir}: {e}")
            return outcome(False, MoveErrorKind.MKDIR, _error_message(e))

        try:
            os.replace(source, destination)
            return outcome(True)
        except OSError as e:
            if e.errno != errno.EXDEV:
                return outcome(False, MoveErrorKind.RENAME, _error_message(e))
            logger.debug(f"Cross-device move for {source.name}, copying instead")

        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            return outcome(False, MoveErrorKind.COPY, _error_message(e))

        try:
            source.unlink()
        except OSError as e:
            logger.warning(f"{source.name} was copied to {destination_dir} "
                           f"but the original could not be removed")
            return outcome(False, MoveErrorKind.UNLINK, _error_message(e))

        return outcome(True)
