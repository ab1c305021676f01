"""
Tests for the configuration module
"""

import json

import pytest

from filesorter import __version__
from filesorter.config import (
    APP_NAME,
    DEFAULT_SETTLE_DELAY,
    ConfigSnapshot,
    CustomCategory,
    FileRuleConfig,
    SettingsStore,
    merge_update,
)


SAMPLE = {
    "sourceFolder": "/home/me/Downloads",
    "baseTargetFolder": "/home/me/Sorted",
    "fileRules": [{"enabled": True, "extensions": [".txt"], "targetFolder": "Documents"}],
    "customCategories": [
        {"id": "42", "name": "Books", "extensions": [".epub"], "folderName": "Library", "enabled": True}
    ],
    "sortExistingFiles": True,
    "theme": "dark",
    "autoLaunchEnabled": False,
}


class TestConfigSnapshot:
    """Test cases for ConfigSnapshot"""

    def test_defaults(self):
        snapshot = ConfigSnapshot()

        assert snapshot.source_folder == ""
        assert snapshot.base_target_folder == ""
        assert snapshot.file_rules == ()
        assert snapshot.theme == "light"
        assert not snapshot.is_complete

    def test_from_dict(self):
        snapshot = ConfigSnapshot.from_dict(SAMPLE)

        assert snapshot.is_complete
        assert snapshot.file_rules == (FileRuleConfig((".txt",), "Documents", True),)
        assert snapshot.custom_categories == (CustomCategory("42", "Books", (".epub",), "Library", True),)
        assert snapshot.sort_existing_files is True
        assert snapshot.to_dict() == SAMPLE

    def test_lenient_parsing(self):
        snapshot = ConfigSnapshot.from_dict({
            "sourceFolder": 12,
            "fileRules": "nope",
            "customCategories": [None, {"name": "X", "extensions": [1, ".x"]}],
            "sortExistingFiles": "yes",
        })

        assert snapshot.source_folder == ""
        assert snapshot.file_rules == ()
        assert snapshot.custom_categories[0].extensions == (".x",)
        assert snapshot.custom_categories[0].enabled is False
        assert snapshot.sort_existing_files is False

    def test_non_mapping_gives_defaults(self):
        assert ConfigSnapshot.from_dict(None) == ConfigSnapshot()
        assert ConfigSnapshot.from_dict(["a"]) == ConfigSnapshot()

    def test_snapshot_is_immutable(self):
        snapshot = ConfigSnapshot.from_dict(SAMPLE)

        with pytest.raises(AttributeError):
            snapshot.source_folder = "/elsewhere"

    def test_scrubbed(self):
        scrubbed = ConfigSnapshot.from_dict(SAMPLE).scrubbed()

        assert scrubbed.source_folder == ""
        assert scrubbed.base_target_folder == ""
        assert scrubbed.file_rules


class TestMergeUpdate:
    """Test cases for merge_update"""

    def test_update_replaces_rules_wholesale(self):
        previous = ConfigSnapshot.from_dict(SAMPLE)

        updated = merge_update(previous, {"sourceFolder": "/a", "baseTargetFolder": "/b", "fileRules": []})

        assert updated.file_rules == ()
        assert updated.custom_categories == ()

    def test_missing_theme_and_flag_are_filled(self):
        previous = ConfigSnapshot.from_dict(SAMPLE)

        updated = merge_update(previous, {"sourceFolder": "/a"})

        assert updated.theme == "dark"
        assert updated.sort_existing_files is True

    def test_explicit_values_win(self):
        previous = ConfigSnapshot.from_dict(SAMPLE)

        updated = merge_update(previous, {"theme": "light", "sortExistingFiles": False})

        assert updated.theme == "light"
        assert updated.sort_existing_files is False


class TestSettingsStore:
    """Test cases for SettingsStore"""

    def test_missing_file_gives_defaults(self, tmp_path):
        store = SettingsStore(str(tmp_path / "config.json"))

        assert store.snapshot.source_folder == ""
        assert [r.target_folder for r in store.snapshot.file_rules][:2] == ["Images", "Documents"]
        assert store.settle_delay == DEFAULT_SETTLE_DELAY
        assert store.serialize_moves is False
        assert store.log_dir == tmp_path / "logs"

    def test_malformed_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        store = SettingsStore(str(path))

        assert store.snapshot.source_folder == ""
        assert store.snapshot.file_rules

    def test_apply_update_persists(self, tmp_path):
        path = tmp_path / "config.json"
        store = SettingsStore(str(path))

        store.apply_update(SAMPLE)
        reloaded = SettingsStore(str(path))

        assert reloaded.snapshot == ConfigSnapshot.from_dict(SAMPLE)
        assert reloaded.settle_delay == DEFAULT_SETTLE_DELAY

    def test_dot_notation(self, tmp_path):
        store = SettingsStore(str(tmp_path / "config.json"))

        store.update("app.settleDelay", 2.5)
        store.update("app.serializeMoves", True)

        assert store.get("app.settleDelay") == 2.5
        assert store.settle_delay == 2.5
        assert store.serialize_moves is True
        assert store.get("app.missing", "fallback") == "fallback"

    def test_invalid_settle_delay_falls_back(self, tmp_path):
        store = SettingsStore(str(tmp_path / "config.json"))

        store.update("app.settleDelay", -3)

        assert store.settle_delay == DEFAULT_SETTLE_DELAY

    def test_export_scrubs_folders(self, tmp_path):
        store = SettingsStore(str(tmp_path / "config.json"))
        store.apply_update(SAMPLE)
        export_path = tmp_path / "export.json"

        store.export_to(str(export_path))
        envelope = json.loads(export_path.read_text())

        assert envelope["version"] == __version__
        assert envelope["appName"] == APP_NAME
        assert envelope["exportDate"]
        assert envelope["config"]["sourceFolder"] == ""
        assert envelope["config"]["baseTargetFolder"] == ""
        assert envelope["config"]["customCategories"] == SAMPLE["customCategories"]

    def test_import_keeps_local_folders(self, tmp_path):
        exporter = SettingsStore(str(tmp_path / "other.json"))
        exporter.apply_update(dict(SAMPLE, theme="dark"))
        exporter.export_to(str(tmp_path / "export.json"))

        store = SettingsStore(str(tmp_path / "config.json"))
        store.apply_update({"sourceFolder": "/local/in", "baseTargetFolder": "/local/out"})
        snapshot = store.import_from(str(tmp_path / "export.json"))

        assert snapshot.source_folder == "/local/in"
        assert snapshot.base_target_folder == "/local/out"
        assert snapshot.custom_categories[0].name == "Books"
        assert SettingsStore(str(tmp_path / "config.json")).snapshot == snapshot

    def test_import_rejects_invalid_envelope(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"config": {"fileRules": [{"extensions": ".txt"}]}}))
        store = SettingsStore(str(tmp_path / "config.json"))

        with pytest.raises(ValueError):
            store.import_from(str(path))

    def test_import_rejects_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")
        store = SettingsStore(str(tmp_path / "config.json"))

        with pytest.raises(ValueError):
            store.import_from(str(path))

    def test_import_missing_file(self, tmp_path):
        store = SettingsStore(str(tmp_path / "config.json"))

        with pytest.raises(FileNotFoundError):
            store.import_from(str(tmp_path / "missing.json"))
