"""
File Sorter - Main Entry Point

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This is the command line entry point. It loads the settings store, wires the
sorter to console output and runs the requested command.

NOTICE: This software is proprietary and confidential. Unauthorized copying,
modification, distribution, or use is strictly prohibited.
See LICENSE.txt for full terms and conditions.

Version: 1.0.0
Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import argparse
import sys
import time
from typing import List, Optional

from .config import SettingsStore
from .core.rules import build_active_rules
from .core.sorter import Sorter, MoveResult, ErrorReport
from .utils.logger import setup_logging


class FileSorterApp:
    """
    Command line application.

    Attributes:
        store (SettingsStore): Persisted settings
        sorter (Sorter): Sorter configured from the store
    """

    def __init__(self, config_path: Optional[str] = None, verbose: bool = False,
                 configure_logging: bool = True):
        self.store = SettingsStore(config_path)

        if configure_logging:
            setup_logging(self.store.log_dir, verbose=verbose)

        self.sorter = Sorter(
            config=self.store.snapshot,
            settle_delay=self.store.settle_delay,
            serialize_moves=self.store.serialize_moves,
            on_move_result=self._on_move_result,
            on_error=self._on_error
        )

    def _on_move_result(self, result: MoveResult):
        target = f"{result.category} ({result.target_folder})" if result.category else result.target_folder
        print(f"✅ Moved {result.file_name} from {result.source_dir_name} to {target}")

    def _on_error(self, report: ErrorReport):
        print(f"❌ {report.context}: {report.message}", file=sys.stderr)

    def watch(self) -> int:
        """Watch the source folder until interrupted."""
        snapshot = self.store.snapshot
        if not snapshot.is_complete:
            print("⚠️  Source and target folders must be set first (use the 'set' command)")
            return 1

        if not self.sorter.start():
            return 1

        print(f"👀 Watching {snapshot.source_folder}")
        print(f"   Sorting into {snapshot.base_target_folder}")
        print("\nPress Ctrl+C to stop\n")

        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            print("\n⏹️  Stopping watcher...")
            self.sorter.stop(wait=True)

        return 0

    def sort(self) -> int:
        """Sort the files already in the source folder once."""
        snapshot = self.store.snapshot
        if not snapshot.is_complete:
            print("⚠️  Source and target folders must be set first (use the 'set' command)")
            return 1

        print(f"🔍 Sorting existing files in {snapshot.source_folder}")
        summary = self.sorter.sort_existing()
        print(f"\nMoved: {summary.moved}  Failed: {summary.failed}  Left in place: {summary.skipped}")
        return 1 if summary.failed else 0

    def show_rules(self) -> int:
        """Print the active rules in priority order."""
        rules = build_active_rules(self.store.snapshot)
        if not rules:
            print("No active rules")
            return 0

        print("Active rules (first match wins):")
        for i, rule in enumerate(rules, 1):
            extensions = ', '.join(sorted(rule.extensions)) or '(matches nothing)'
            print(f"  {i}. {rule.label:<30} {extensions}")
        return 0

    def set_folders(self, source: Optional[str], target: Optional[str],
                    sort_existing: Optional[bool], settle_delay: Optional[float] = None,
                    serialize_moves: Optional[bool] = None, log_dir: Optional[str] = None) -> int:
        """Update folder and app settings, keeping everything else."""
        if settle_delay is not None and settle_delay < 0:
            print("❌ --settle-delay must not be negative", file=sys.stderr)
            return 1

        if settle_delay is not None:
            self.store.update("app.settleDelay", settle_delay)
        if serialize_moves is not None:
            self.store.update("app.serializeMoves", serialize_moves)
        if log_dir is not None:
            self.store.update("app.logDir", log_dir)

        data = self.store.snapshot.to_dict()
        if source is not None:
            data['sourceFolder'] = source
        if target is not None:
            data['baseTargetFolder'] = target
        if sort_existing is not None:
            data['sortExistingFiles'] = sort_existing

        snapshot = self.store.apply_update(data)
        print(f"Source folder: {snapshot.source_folder or '(unset)'}")
        print(f"Target folder: {snapshot.base_target_folder or '(unset)'}")
        print(f"Sort existing files on start: {'yes' if snapshot.sort_existing_files else 'no'}")
        print(f"Settle delay: {self.store.settle_delay}s")
        print(f"Serialize moves: {'yes' if self.store.serialize_moves else 'no'}")
        return 0

    def export_config(self, path: str) -> int:
        self.store.export_to(path)
        print(f"✅ Configuration exported to {path}")
        return 0

    def import_config(self, path: str) -> int:
        try:
            self.store.import_from(path)
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ Import failed: {e}", file=sys.stderr)
            return 1
        print(f"✅ Configuration imported from {path}")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-sorter",
        description="File Sorter - files new arrivals into category folders by extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s set --source ~/Downloads --target ~/Sorted
  %(prog)s watch              # Watch the source folder for new files
  %(prog)s sort               # Sort files already in the source folder
  %(prog)s rules              # Show active rules
  %(prog)s export rules.json  # Export configuration (without folder paths)
        """
    )

    parser.add_argument('--config', metavar='PATH', help='Settings file (default: ~/.filesorter/config.json)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('watch', help='Watch the source folder for new files')
    sub.add_parser('sort', help='Sort the files already in the source folder')
    sub.add_parser('rules', help='Show active rules in priority order')

    set_parser = sub.add_parser('set', help='Set folders and sorter options')
    set_parser.add_argument('--source', help='Folder to watch')
    set_parser.add_argument('--target', help='Base folder for category subfolders')
    set_parser.add_argument('--sort-existing', dest='sort_existing', action='store_true', default=None,
                            help='Sort files already present when watching starts')
    set_parser.add_argument('--no-sort-existing', dest='sort_existing', action='store_false',
                            help='Only sort files that appear after watching starts')
    set_parser.add_argument('--settle-delay', type=float, metavar='SECONDS',
                            help='Wait this long after a file appears before sorting it')
    set_parser.add_argument('--serialize-moves', dest='serialize_moves', action='store_true', default=None,
                            help='Sort files one at a time')
    set_parser.add_argument('--no-serialize-moves', dest='serialize_moves', action='store_false',
                            help='Allow files to be sorted concurrently')
    set_parser.add_argument('--log-dir', metavar='PATH', help='Folder for the log file')

    export_parser = sub.add_parser('export', help='Export configuration to a file')
    export_parser.add_argument('path')

    import_parser = sub.add_parser('import', help='Import configuration from a file')
    import_parser.add_argument('path')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    app = FileSorterApp(config_path=args.config, verbose=args.verbose)

    if args.command == 'watch':
        return app.watch()
    elif args.command == 'sort':
        return app.sort()
    elif args.command == 'rules':
        return app.show_rules()
    elif args.command == 'set':
        return app.set_folders(args.source, args.target, args.sort_existing,
                               settle_delay=args.settle_delay,
                               serialize_moves=args.serialize_moves,
                               log_dir=args.log_dir)
    elif args.command == 'export':
        return app.export_config(args.path)
    elif args.command == 'import':
        return app.import_config(args.path)

    return 1


if __name__ == "__main__":
    sys.exit(main())
