"""File Indexer - Live-updating word index over files and directories.

Features:
- Thread-safe inverted index from words to files
- Concurrent directory indexing with a bounded worker pool
- Real-time updates from watched directories via watchfiles

Usage:
    file-indexer                       # Start the interactive shell
    file-indexer search <word> <paths> # Index once and search
"""

from .cli import main

__all__ = ["main"]
