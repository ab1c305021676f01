"""Core modules for file sorting."""

from .rules import Rule, RuleOrigin, build_active_rules
from .matcher import match, extension_of, RuleMatcher
from .mover import Mover, MoveOutcome, MoveErrorKind
from .watcher import FolderWatcher
from .sorter import Sorter, SorterState, MoveResult, ErrorReport, SweepSummary

__all__ = [
    'Rule',
    'RuleOrigin',
    'build_active_rules',
    'match',
    'extension_of',
    'RuleMatcher',
    'Mover',
    'MoveOutcome',
    'MoveErrorKind',
    'FolderWatcher',
    'Sorter',
    'SorterState',
    'MoveResult',
    'ErrorReport',
    'SweepSummary'
]
