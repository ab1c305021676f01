"""
File Watcher Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module monitors the source folder for new files using the watchdog
library. Only files directly inside the folder are reported; hidden files
are filtered out here and never reach the sorter.

NOTICE: This software is proprietary and confidential.
See LICENSE.txt for full terms and conditions.

Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import os
from pathlib import Path
from typing import Callable, Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileSystemEvent

from ..utils.logger import get_logger

logger = get_logger(__name__)


class FileEventHandler(FileSystemEventHandler):
    """
    Event handler reporting files that appear in the watched folder.

    Files created in the folder and files moved into it both count as added.

    Attributes:
        folder (Path): Watched folder
        callback (Callable): Called with the file path of each added file
    """

    def __init__(self, folder: str, callback: Callable[[str], None]):
        super().__init__()
        self.folder = Path(folder).resolve()
        self.callback = callback

    def _should_process(self, path: str) -> bool:
        """
        Determine if a file should be reported.

        Args:
            path (str): File path

        Returns:
            bool: True for non-hidden files directly inside the watched folder
        """
        file_path = Path(os.fsdecode(path))

        # Ignore hidden files (starting with .)
        if file_path.name.startswith('.'):
            return False

        try:
            if file_path.parent.resolve() != self.folder:
                return False
        except OSError:
            return False

        return not file_path.is_dir()

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory and self._should_process(event.src_path):
            self._process_file(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        dest_path = getattr(event, 'dest_path', '')
        if not event.is_directory and dest_path and self._should_process(dest_path):
            self._process_file(os.fsdecode(dest_path))

    def _process_file(self, file_path: str):
        try:
            self.callback(file_path)
        except Exception as e:
            logger.error(f"[File Watcher Error]: failed to dispatch {file_path}: {e}", exc_info=True)


class FolderWatcher:
    """
    Watches a single folder (non-recursively) for added files.

    Attributes:
        folder (Path): Directory to watch
        callback (Callable): Function called with each added file path
        observer: Running watchdog observer, None while stopped
    """

    def __init__(self, folder: str, callback: Callable[[str], None],
                 observer_factory: Optional[Callable[[], object]] = None):
        """
        Initialize folder watcher.

        Args:
            folder (str): Directory path to watch
            callback (Callable): Function to call with file path when detected
            observer_factory (Callable, optional): Builds the observer. Defaults to
                watchdog's native ``Observer``
        """
        self.folder = Path(folder).expanduser()
        self.callback = callback
        self.observer_factory = observer_factory or Observer
        self.observer = None

    @property
    def is_running(self) -> bool:
        return self.observer is not None

    def start(self):
        """
        Start watching the folder.

        Raises:
            FileNotFoundError: If the folder does not exist
            OSError: If the observer cannot be started
        """
        if self.is_running:
            logger.debug(f"Watcher already running on {self.folder}")
            return

        if not self.folder.is_dir():
            raise FileNotFoundError(f"Folder not found: {self.folder}")

        handler = FileEventHandler(str(self.folder), self.callback)
        observer = self.observer_factory()
        observer.schedule(handler, str(self.folder), recursive=False)
        observer.start()

        self.observer = observer
        logger.watcher_started(str(self.folder))

    def stop(self):
        """Stop watching. Files already dispatched are not affected."""
        if not self.is_running:
            return

        observer, self.observer = self.observer, None
        observer.stop()
        observer.join()
        logger.watcher_stopped(str(self.folder))
