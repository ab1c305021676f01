"""
Configuration Management Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module defines the configuration snapshot exchanged with the sorter and
the JSON settings store that persists it. Snapshots are immutable: every
settings change produces a new snapshot which replaces the previous one.

NOTICE: This software is proprietary and confidential. Unauthorized copying,
modification, distribution, or use is strictly prohibited.
See LICENSE.txt for full terms and conditions.

Version: 1.0.0
Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from jsonschema import validate, ValidationError

from . import __version__

logger = logging.getLogger(__name__)

APP_NAME = "File Sorter"
DEFAULT_THEME = "light"
DEFAULT_SETTLE_DELAY = 1.0

# Built-in categories offered for new configurations
DEFAULT_FILE_RULES = [
    {"enabled": True, "extensions": [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"], "targetFolder": "Images"},
    {"enabled": True, "extensions": [".pdf", ".doc", ".docx", ".txt", ".rtf"], "targetFolder": "Documents"},
    {"enabled": True, "extensions": [".mp4", ".avi", ".mkv", ".mov", ".wmv"], "targetFolder": "Videos"},
    {"enabled": True, "extensions": [".mp3", ".wav", ".flac", ".aac", ".ogg"], "targetFolder": "Music"},
    {"enabled": True, "extensions": [".zip", ".rar", ".7z", ".tar", ".gz"], "targetFolder": "Archives"},
    {"enabled": True, "extensions": [".xls", ".xlsx", ".csv"], "targetFolder": "Spreadsheets"},
    {"enabled": True, "extensions": [".ppt", ".pptx"], "targetFolder": "Presentations"},
]

_RULE_SCHEMA = {
    "type": "object",
    "properties": {
        "enabled": {"type": "boolean"},
        "extensions": {"type": "array", "items": {"type": "string"}},
        "targetFolder": {"type": "string"}
    },
    "required": ["extensions", "targetFolder"]
}

_CATEGORY_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "enabled": {"type": "boolean"},
        "extensions": {"type": "array", "items": {"type": "string"}},
        "folderName": {"type": "string"}
    },
    "required": ["name", "extensions", "folderName"]
}

# JSON schema for exported configuration files
EXPORT_SCHEMA = {
    "type": "object",
    "properties": {
        "version": {"type": "string"},
        "appName": {"type": "string"},
        "exportDate": {"type": "string"},
        "config": {
            "type": "object",
            "properties": {
                "sourceFolder": {"type": "string"},
                "baseTargetFolder": {"type": "string"},
                "fileRules": {"type": "array", "items": _RULE_SCHEMA},
                "customCategories": {"type": "array", "items": _CATEGORY_SCHEMA},
                "sortExistingFiles": {"type": "boolean"},
                "theme": {"type": "string"},
                "autoLaunchEnabled": {"type": "boolean"}
            }
        }
    },
    "required": ["version", "config"]
}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def _as_extensions(value: Any) -> Tuple[str, ...]:
    # Anything but a list of strings matches nothing
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class FileRuleConfig:
    """A built-in category rule as stored in the configuration."""

    extensions: Tuple[str, ...] = ()
    target_folder: str = ""
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileRuleConfig":
        return cls(
            extensions=_as_extensions(data.get("extensions")),
            target_folder=_as_str(data.get("targetFolder")),
            enabled=_as_bool(data.get("enabled"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "extensions": list(self.extensions),
            "targetFolder": self.target_folder
        }


@dataclass(frozen=True)
class CustomCategory:
    """A user-defined category as stored in the configuration."""

    id: str = ""
    name: str = ""
    extensions: Tuple[str, ...] = ()
    folder_name: str = ""
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomCategory":
        raw_id = data.get("id")
        return cls(
            id=str(raw_id) if raw_id is not None else "",
            name=_as_str(data.get("name")),
            extensions=_as_extensions(data.get("extensions")),
            folder_name=_as_str(data.get("folderName")),
            enabled=_as_bool(data.get("enabled"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "extensions": list(self.extensions),
            "folderName": self.folder_name,
            "enabled": self.enabled
        }


@dataclass(frozen=True)
class ConfigSnapshot:
    """
    Immutable configuration snapshot.

    Attributes:
        source_folder (str): Folder to watch, empty when unset
        base_target_folder (str): Folder the category subfolders live in, empty when unset
        file_rules (Tuple[FileRuleConfig]): Built-in rules in priority order
        custom_categories (Tuple[CustomCategory]): Custom categories in priority order
        sort_existing_files (bool): Sweep the source folder once when watching starts
        theme (str): UI theme, stored but unused by the sorter
        auto_launch_enabled (bool): Start-on-boot flag, stored but unused by the sorter
    """

    source_folder: str = ""
    base_target_folder: str = ""
    file_rules: Tuple[FileRuleConfig, ...] = ()
    custom_categories: Tuple[CustomCategory, ...] = ()
    sort_existing_files: bool = False
    theme: str = DEFAULT_THEME
    auto_launch_enabled: bool = False

    @property
    def is_complete(self) -> bool:
        """True when both the source and the base target folder are set."""
        return bool(self.source_folder) and bool(self.base_target_folder)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ConfigSnapshot":
        """
        Build a snapshot from its camelCase JSON form.

        Parsing is lenient: wrong types fall back to defaults and rule entries
        that are not objects are dropped, so a damaged configuration degrades
        to rules that match nothing instead of failing.
        """
        if not isinstance(data, Mapping):
            return cls()

        rules = data.get("fileRules")
        categories = data.get("customCategories")

        return cls(
            source_folder=_as_str(data.get("sourceFolder")),
            base_target_folder=_as_str(data.get("baseTargetFolder")),
            file_rules=tuple(
                FileRuleConfig.from_dict(r) for r in (rules if isinstance(rules, list) else [])
                if isinstance(r, Mapping)
            ),
            custom_categories=tuple(
                CustomCategory.from_dict(c) for c in (categories if isinstance(categories, list) else [])
                if isinstance(c, Mapping)
            ),
            sort_existing_files=_as_bool(data.get("sortExistingFiles")),
            theme=_as_str(data.get("theme")) or DEFAULT_THEME,
            auto_launch_enabled=_as_bool(data.get("autoLaunchEnabled"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceFolder": self.source_folder,
            "baseTargetFolder": self.base_target_folder,
            "fileRules": [r.to_dict() for r in self.file_rules],
            "customCategories": [c.to_dict() for c in self.custom_categories],
            "sortExistingFiles": self.sort_existing_files,
            "theme": self.theme,
            "autoLaunchEnabled": self.auto_launch_enabled
        }

    def scrubbed(self) -> "ConfigSnapshot":
        """Copy without the machine-specific folder paths."""
        return replace(self, source_folder="", base_target_folder="")


def merge_update(previous: ConfigSnapshot, incoming: Mapping[str, Any]) -> ConfigSnapshot:
    """
    Build the snapshot that replaces ``previous`` after a settings change.

    The incoming configuration replaces the previous one wholesale. Only
    ``theme`` and ``sortExistingFiles`` are carried over when the update
    leaves them out.

    Args:
        previous (ConfigSnapshot): Currently active snapshot
        incoming (Mapping): New configuration in camelCase JSON form

    Returns:
        ConfigSnapshot: New snapshot
    """
    data = dict(incoming)
    if not data.get("theme"):
        data["theme"] = previous.theme or DEFAULT_THEME
    if data.get("sortExistingFiles") is None:
        data["sortExistingFiles"] = previous.sort_existing_files
    return ConfigSnapshot.from_dict(data)


def default_config_path() -> Path:
    """Get the default settings file path (~/.filesorter/config.json)."""
    return Path.home() / ".filesorter" / "config.json"


class SettingsStore:
    """
    JSON-backed settings store.

    Holds the persisted configuration snapshot plus an ``app`` section with
    the sorter's own settings (settle delay, move serialization, log folder).

    Attributes:
        config_path (Path): Path to the settings file
        _data (Dict[str, Any]): Loaded settings dictionary
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the settings store.

        Args:
            config_path (str, optional): Settings file. Defaults to ~/.filesorter/config.json
        """
        self.config_path = Path(config_path).expanduser() if config_path else default_config_path()
        self._data: Dict[str, Any] = {}
        self.load()

    def _defaults(self) -> Dict[str, Any]:
        data = ConfigSnapshot(file_rules=tuple(
            FileRuleConfig.from_dict(r) for r in DEFAULT_FILE_RULES
        )).to_dict()
        data["app"] = {
            "settleDelay": DEFAULT_SETTLE_DELAY,
            "serializeMoves": False
        }
        return data

    def load(self) -> None:
        """
        Load settings from disk.

        A missing file yields the defaults. A malformed file is logged and
        also yields the defaults; it is left on disk until the next save.
        """
        if not self.config_path.exists():
            self._data = self._defaults()
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[Config Loading Error]: {e}")
            self._data = self._defaults()
            return

        if not isinstance(data, dict):
            logger.error(f"[Config Loading Error]: {self.config_path} does not contain an object")
            self._data = self._defaults()
            return

        self._data = data

    def save(self) -> None:
        """Write the current settings back to the JSON file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2)
        logger.info(f"Saved configuration to {self.config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key (str): Configuration key (supports nested keys with dot notation)
            default (Any, optional): Default value if key not found

        Example:
            >>> store.get("app.settleDelay")
            1.0
        """
        value: Any = self._data

        for k in key.split('.'):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def update(self, key: str, value: Any) -> None:
        """
        Update configuration value (dot notation for nested keys).

        Example:
            >>> store.update("app.settleDelay", 2.0)
        """
        keys = key.split('.')
        target = self._data

        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    @property
    def snapshot(self) -> ConfigSnapshot:
        """The persisted configuration as an immutable snapshot."""
        return ConfigSnapshot.from_dict(self._data)

    def apply_update(self, incoming: Mapping[str, Any]) -> ConfigSnapshot:
        """
        Replace the stored configuration with ``incoming`` and save it.

        Returns:
            ConfigSnapshot: The snapshot now stored
        """
        snapshot = merge_update(self.snapshot, incoming)
        self._data.update(snapshot.to_dict())
        self.save()
        return snapshot

    @property
    def settle_delay(self) -> float:
        """Seconds to wait after a new file appears before sorting it."""
        value = self.get("app.settleDelay", DEFAULT_SETTLE_DELAY)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            logger.warning(f"Ignoring invalid app.settleDelay: {value!r}")
            return DEFAULT_SETTLE_DELAY
        return float(value)

    @property
    def serialize_moves(self) -> bool:
        """Run sort operations one at a time instead of concurrently."""
        return _as_bool(self.get("app.serializeMoves"))

    @property
    def log_dir(self) -> Path:
        """Folder for the rotating log file."""
        configured = self.get("app.logDir")
        if isinstance(configured, str) and configured:
            return Path(os.path.expanduser(configured))
        return self.config_path.parent / "logs"

    def export_to(self, path: str) -> Dict[str, Any]:
        """
        Export the configuration to a portable JSON file.

        Folder paths are machine-specific and are scrubbed from the export.

        Args:
            path (str): Destination file

        Returns:
            Dict: The exported envelope
        """
        envelope = {
            "version": __version__,
            "appName": APP_NAME,
            "exportDate": datetime.now().isoformat(),
            "config": self.snapshot.scrubbed().to_dict()
        }

        export_path = Path(path).expanduser()
        export_path.parent.mkdir(parents=True, exist_ok=True)
        with open(export_path, 'w', encoding='utf-8') as f:
            json.dump(envelope, f, indent=2)

        logger.info(f"Exported configuration to {export_path}")
        return envelope

    def import_from(self, path: str) -> ConfigSnapshot:
        """
        Import a configuration previously written by ``export_to``.

        Empty folder paths in the file keep this machine's current folders.

        Args:
            path (str): File to import

        Returns:
            ConfigSnapshot: The snapshot now stored

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a valid export
        """
        import_path = Path(path).expanduser()
        if not import_path.is_file():
            raise FileNotFoundError(f"Import file not found: {import_path}")

        try:
            with open(import_path, 'r', encoding='utf-8') as f:
                envelope = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in import file: {e}")

        try:
            validate(instance=envelope, schema=EXPORT_SCHEMA)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration export: {e.message}")

        current = self.snapshot
        incoming = dict(envelope["config"])
        if not incoming.get("sourceFolder"):
            incoming["sourceFolder"] = current.source_folder
        if not incoming.get("baseTargetFolder"):
            incoming["baseTargetFolder"] = current.base_target_folder

        snapshot = self.apply_update(incoming)
        logger.info(f"Imported configuration from {import_path}")
        return snapshot
