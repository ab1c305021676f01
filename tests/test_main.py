"""
Tests for the command line front-end
"""

import json

import pytest

from filesorter import main as cli
from filesorter.config import SettingsStore


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "settings" / "config.json")


def run(config_path, *args):
    return cli.main(["--config", config_path, *args])


class TestCli:
    """Test cases for CLI commands"""

    def test_set_persists_folders(self, config_path, folders):
        source, target = folders

        assert run(config_path, "set", "--source", str(source), "--target", str(target), "--sort-existing") == 0

        snapshot = SettingsStore(config_path).snapshot
        assert snapshot.source_folder == str(source)
        assert snapshot.base_target_folder == str(target)
        assert snapshot.sort_existing_files is True
        assert snapshot.file_rules

    def test_sort_moves_existing_files(self, config_path, folders, capsys):
        source, target = folders
        (source / "photo.PNG").write_text("img")
        (source / "unknown.xyz").write_text("?")
        run(config_path, "set", "--source", str(source), "--target", str(target))

        assert run(config_path, "sort") == 0

        assert (target / "Images" / "photo.PNG").exists()
        assert (source / "unknown.xyz").exists()
        assert "Moved: 1" in capsys.readouterr().out

    def test_sort_requires_folders(self, config_path, capsys):
        assert run(config_path, "sort") == 1
        assert "must be set" in capsys.readouterr().out

    def test_watch_requires_folders(self, config_path):
        assert run(config_path, "watch") == 1

    def test_rules_lists_priority_order(self, config_path, capsys):
        assert run(config_path, "rules") == 0

        out = capsys.readouterr().out
        assert out.index("Images") < out.index("Documents")

    def test_export_and_import(self, config_path, folders, tmp_path):
        source, target = folders
        run(config_path, "set", "--source", str(source), "--target", str(target))
        export_path = tmp_path / "export.json"

        assert run(config_path, "export", str(export_path)) == 0
        assert json.loads(export_path.read_text())["config"]["sourceFolder"] == ""

        other_path = str(tmp_path / "other" / "config.json")
        assert run(other_path, "import", str(export_path)) == 0
        assert SettingsStore(other_path).snapshot.file_rules == SettingsStore(config_path).snapshot.file_rules

    def test_import_failure_returns_error(self, config_path, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("[]")

        assert run(config_path, "import", str(bad)) == 1
        assert "Import failed" in capsys.readouterr().err

    def test_set_app_options(self, config_path, tmp_path):
        log_dir = str(tmp_path / "logs")

        assert run(config_path, "set", "--settle-delay", "2.5", "--serialize-moves", "--log-dir", log_dir) == 0

        store = SettingsStore(config_path)
        assert store.settle_delay == 2.5
        assert store.serialize_moves is True
        assert str(store.log_dir) == log_dir
        assert store.snapshot.file_rules

    def test_set_keeps_unspecified_options(self, config_path, folders):
        source, target = folders
        run(config_path, "set", "--settle-delay", "0.5")

        run(config_path, "set", "--source", str(source), "--target", str(target))

        assert SettingsStore(config_path).settle_delay == 0.5

    def test_set_rejects_negative_settle_delay(self, config_path, capsys):
        assert run(config_path, "set", "--settle-delay", "-1") == 1
        assert "must not be negative" in capsys.readouterr().err
