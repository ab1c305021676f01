"""
Shared fixtures for File Sorter tests
"""

import pytest


@pytest.fixture
def folders(tmp_path):
    """Source and target folders inside a temp directory."""
    source = tmp_path / "inbox"
    target = tmp_path / "sorted"
    source.mkdir()
    target.mkdir()
    return source, target


@pytest.fixture
def events():
    """Collects move results and error reports."""
    class Events:
        def __init__(self):
            self.moved = []
            self.errors = []

        def on_move_result(self, result):
            self.moved.append(result)

        def on_error(self, report):
            self.errors.append(report)

    return Events()
