"""The capability contract shared by the indexer and its consumers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterator


class IndexService(Protocol):
    """
    Indexes text files by the words they contain.

    IndexManager is the production implementation. DirectoryWatcher only
    depends on this protocol, so tests can hand it a double.
    """

    def add_file(self, path: Path) -> bool:
        """Index one file. Returns False if it was not indexed."""
        ...

    def add_directory(self, root: Path, recursive: bool = True) -> int:
        """Index the files under a directory. Returns how many were added."""
        ...

    def find_files_with_word(self, word: str) -> list[Path]:
        """Return the files containing a word."""
        ...

    def get_indexed_files(self) -> Iterator[Path]:
        """Enumerate the currently indexed files."""
        ...

    def remove_file(self, path: Path) -> bool:
        """Drop one file. Returns False if it was not indexed."""
        ...

    def remove_directory(self, root: Path) -> int:
        """Drop the indexed files under a directory. Returns how many."""
        ...

    def clear_index(self) -> None:
        """Drop everything."""
        ...
