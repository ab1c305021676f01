"""
File Sorter - watches a folder and files new arrivals into category folders
by extension.
"""

__version__ = "1.0.0"

from .config import ConfigSnapshot, SettingsStore
from .core.sorter import Sorter, SorterState, MoveResult, ErrorReport

__all__ = [
    'ConfigSnapshot',
    'SettingsStore',
    'Sorter',
    'SorterState',
    'MoveResult',
    'ErrorReport',
    '__version__'
]
