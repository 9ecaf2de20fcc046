"""In-memory word index over files and watched directories.

This module provides:
- WordIndex: Thread-safe bidirectional word <-> file map
- IndexManager: Adds, removes and searches files and directory trees
- DirectoryWatcher: Real-time directory watcher for automatic updates
- TextExtractor: Decides what is text and splits it into words
"""

from .extract import TextExtractor
from .manager import IndexManager, IndexStats
from .service import IndexService
from .watcher import DirectoryWatcher, FileEvent
from .words import WordIndex

__all__ = [
    "DirectoryWatcher",
    "FileEvent",
    "IndexManager",
    "IndexService",
    "IndexStats",
    "TextExtractor",
    "WordIndex",
]
