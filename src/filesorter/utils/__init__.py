"""Utility modules for File Sorter."""

from .logger import get_logger, setup_logging, SorterLogger

__all__ = ['get_logger', 'setup_logging', 'SorterLogger']
