"""
Sort Orchestrator Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module coordinates matching and moving for single files and for bulk
sweeps of the source folder, owns the active configuration and drives the
folder watcher. Results and errors are pushed to subscriber callbacks; the
sorter never depends on whoever displays them.

NOTICE: This software is proprietary and confidential. Unauthorized copying,
modification, distribution, or use is strictly prohibited.
See LICENSE.txt for full terms and conditions.

Version: 1.0.0
Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Set, Union

from ..config import ConfigSnapshot, DEFAULT_SETTLE_DELAY, merge_update
from ..utils.logger import get_logger
from .matcher import RuleMatcher
from .mover import Mover, MoveOutcome
from .rules import ConfigHandle
from .watcher import FolderWatcher

logger = get_logger(__name__)


class SorterState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"


@dataclass(frozen=True)
class MoveResult:
    """Event emitted after a file was moved."""

    file_name: str
    source_dir_name: str
    target_folder: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fileName': self.file_name,
            'from': self.source_dir_name,
            'to': self.target_folder,
            'category': self.category
        }


@dataclass(frozen=True)
class ErrorReport:
    """Event emitted when sorting or watching fails."""

    context: str
    message: str


@dataclass
class SweepSummary:
    """Counts from one pass over the source folder."""

    folder: str
    moved: int = 0
    failed: int = 0
    skipped: int = 0


MoveResultCallback = Callable[[MoveResult], None]
ErrorCallback = Callable[[ErrorReport], None]
WatcherFactory = Callable[[str, Callable[[str], None]], Any]


def _default_watcher_factory(folder: str, callback: Callable[[str], None]) -> FolderWatcher:
    return FolderWatcher(folder, callback)


class Sorter:
    """
    Sorts files from the source folder into category folders.

    Each file is one unit of work: the unit reads the active configuration
    once, matches, moves and reports. Units started by separate notifications
    may run concurrently unless ``serialize_moves`` is set.

    Attributes:
        settle_delay (float): Seconds to wait after a notification before sorting
        mover (Mover): Performs the moves
        on_move_result (Callable, optional): Receives a MoveResult per moved file
        on_error (Callable, optional): Receives an ErrorReport per failure
    """

    def __init__(self, config: Optional[ConfigSnapshot] = None,
                 settle_delay: float = DEFAULT_SETTLE_DELAY,
                 serialize_moves: bool = False,
                 on_move_result: Optional[MoveResultCallback] = None,
                 on_error: Optional[ErrorCallback] = None,
                 mover: Optional[Mover] = None,
                 watcher_factory: Optional[WatcherFactory] = None):
        """
        Initialize the sorter. Watching does not start until ``start()`` or
        ``apply_config()`` is called.

        Args:
            config (ConfigSnapshot, optional): Initial configuration
            settle_delay (float): Delay before sorting a newly added file; 0 sorts inline
            serialize_moves (bool): Run units of work one at a time
            on_move_result (Callable, optional): Move result subscriber
            on_error (Callable, optional): Error subscriber
            mover (Mover, optional): Mover implementation
            watcher_factory (Callable, optional): Builds a watcher for (folder, callback)
        """
        if settle_delay < 0:
            raise ValueError("settle_delay must not be negative")

        self.settle_delay = settle_delay
        self.mover = mover or Mover()
        self.on_move_result = on_move_result
        self.on_error = on_error
        self.watcher_factory = watcher_factory or _default_watcher_factory

        self._config = ConfigHandle(config)
        self._watcher = None
        self._lifecycle_lock = threading.RLock()
        self._move_lock = threading.Lock() if serialize_moves else None
        self._timers: Set[threading.Timer] = set()
        self._timers_lock = threading.Lock()

    @property
    def config(self) -> ConfigSnapshot:
        """The active configuration snapshot."""
        return self._config.current().snapshot

    @property
    def state(self) -> SorterState:
        return SorterState.WATCHING if self._watcher is not None else SorterState.IDLE

    @property
    def pending_count(self) -> int:
        """Number of files still waiting out their settle delay."""
        with self._timers_lock:
            return len(self._timers)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def apply_config(self, config: Union[ConfigSnapshot, Mapping[str, Any]]) -> ConfigSnapshot:
        """
        Replace the active configuration and restart watching.

        A mapping is treated as a settings update and default-filled from the
        current snapshot. Units already running keep the snapshot they started
        with.

        Args:
            config: New snapshot, or configuration in camelCase JSON form

        Returns:
            ConfigSnapshot: The snapshot now active
        """
        if isinstance(config, ConfigSnapshot):
            snapshot = config
        else:
            snapshot = merge_update(self.config, config)

        with self._lifecycle_lock:
            self._config.swap(snapshot)
            self._stop_watcher()
            if snapshot.is_complete:
                self.start()
            else:
                logger.info("Cannot start file watcher: missing configuration")

        return snapshot

    def start(self) -> bool:
        """
        Start watching the configured source folder.

        Returns:
            bool: True if the sorter is now watching
        """
        snapshot = self.config
        if not snapshot.is_complete:
            logger.info("Cannot start file watcher: missing configuration")
            return False

        with self._lifecycle_lock:
            self._stop_watcher()
            try:
                watcher = self.watcher_factory(snapshot.source_folder, self.handle_new_file)
                watcher.start()
            except Exception as e:
                self._report("File Watcher", e)
                return False
            self._watcher = watcher

        if snapshot.sort_existing_files:
            self.sort_existing(snapshot.source_folder)

        return True

    def stop(self, wait: bool = False):
        """
        Stop watching. Files already dispatched still get sorted.

        Args:
            wait (bool): Block until files still in their settle delay are sorted
        """
        with self._lifecycle_lock:
            self._stop_watcher()

        if wait:
            self.wait_pending()

    def wait_pending(self, timeout: Optional[float] = None):
        """Wait for every settling file to be sorted."""
        with self._timers_lock:
            pending = list(self._timers)
        for timer in pending:
            timer.join(timeout)

    def _stop_watcher(self):
        if self._watcher is None:
            return

        watcher, self._watcher = self._watcher, None
        try:
            watcher.stop()
        except Exception as e:
            self._report("File Watcher", e)

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def handle_new_file(self, file_path: str):
        """
        Handle a watcher notification for a newly added file.

        Sorting happens after the settle delay so the producing application
        can finish writing.

        Args:
            file_path (str): Path of the added file
        """
        if not self.config.is_complete:
            return

        if self.settle_delay <= 0:
            self._sort_settled(file_path)
            return

        timer = threading.Timer(self.settle_delay, self._sort_settled, args=(file_path,))
        timer.daemon = True
        with self._timers_lock:
            self._timers.add(timer)
        timer.start()

    def _sort_settled(self, file_path: str):
        try:
            # Temporary downloads often disappear before the delay ends
            if not os.path.lexists(file_path):
                logger.debug(f"Skipping {file_path}: no longer exists")
                return

            self.sort_file(file_path)
        finally:
            with self._timers_lock:
                self._timers.discard(threading.current_thread())

    def sort_file(self, file_path: str) -> Optional[MoveOutcome]:
        """
        Classify and move one file.

        Args:
            file_path (str): File to sort

        Returns:
            MoveOutcome or None: None when no rule matched or no base target
            folder is configured
        """
        if self._move_lock is None:
            return self._sort_file(file_path)
        with self._move_lock:
            return self._sort_file(file_path)

    def _sort_file(self, file_path: str) -> Optional[MoveOutcome]:
        active = self._config.current()
        base_target_folder = active.snapshot.base_target_folder
        file_name = os.path.basename(file_path)
        context = f"File Sorting ({file_name})"

        if not base_target_folder:
            return None

        try:
            rule = RuleMatcher(active).match(file_path)
            if rule is None:
                logger.debug(f"No rule for {file_name}, leaving it in place")
                return None

            outcome = self.mover.move(file_path, base_target_folder, rule)
        except Exception as e:
            self._report(context, e, exc_info=True)
            return MoveOutcome(
                file_name=file_name,
                source_dir=os.path.dirname(file_path),
                destination_folder="",
                category_label="",
                success=False,
                error_detail=str(e)
            )

        if outcome.success:
            logger.file_moved(file_name, file_path, outcome.destination_path, rule.label)
            self._emit(self.on_move_result, MoveResult(
                file_name=file_name,
                source_dir_name=os.path.basename(os.path.dirname(os.path.abspath(file_path))),
                target_folder=rule.target_folder,
                category=rule.category_name if rule.is_custom else None
            ))
        else:
            kind = outcome.error_kind.value if outcome.error_kind else None
            logger.move_failed(file_name, kind, outcome.error_detail or "")
            self._emit(self.on_error, ErrorReport(context, outcome.error_detail or "Unknown error occurred"))

        return outcome

    def sort_existing(self, source_folder: Optional[str] = None) -> SweepSummary:
        """
        Sort every file already in the source folder (non-recursive).

        A failure on one file does not stop the sweep.

        Args:
            source_folder (str, optional): Folder to sweep. Defaults to the configured source folder

        Returns:
            SweepSummary: Moved, failed and skipped counts
        """
        snapshot = self.config
        folder = source_folder or snapshot.source_folder
        summary = SweepSummary(folder=folder or "")

        if not folder or not snapshot.base_target_folder:
            logger.info("Cannot sort existing files: missing configuration")
            return summary

        try:
            with os.scandir(folder) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self._report("Existing Files Sorting", e)
            return summary

        for entry in entries:
            try:
                if entry.is_dir():
                    continue
            except OSError:
                summary.skipped += 1
                continue

            outcome = self.sort_file(entry.path)
            if outcome is None:
                summary.skipped += 1
            elif outcome.success:
                summary.moved += 1
            else:
                summary.failed += 1

        logger.sweep_completed(folder, summary.moved, summary.failed, summary.skipped)
        return summary

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _report(self, context: str, error: Exception, exc_info: bool = False):
        message = str(error) or type(error).__name__
        logger.error(f"[{context} Error]: {message}", exc_info=exc_info, context=context)
        self._emit(self.on_error, ErrorReport(context, message))

    def _emit(self, callback: Optional[Callable[[Any], None]], payload: Any):
        if callback is None:
            return
        try:
            callback(payload)
        except Exception:
            logger.error(f"Event listener failed for {payload}", exc_info=True)
