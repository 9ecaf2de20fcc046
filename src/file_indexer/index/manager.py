"""IndexManager - Central interface for the word index.

Provides:
- add_file() / add_directory(): Index single files or whole trees
- find_files_with_word(): Look up files by word
- remove_file() / remove_directory(): Drop files from the index
- start_watcher() / stop_watcher(): Keep watched trees in sync

Thread Safety:
- All shared state lives in WordIndex, which locks internally
- Bulk operations fan out over a bounded ThreadPoolExecutor and tally
  results in the calling thread
- Directory watchers run in their own threads (see watcher.py)
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import get_max_workers
from .extract import TextExtractor
from .words import WordIndex

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from .watcher import DirectoryWatcher

logger = logging.getLogger(__name__)

# Version-control metadata directory, never indexed
VCS_DIR = ".git"


@dataclass
class IndexStats:
    """Statistics about the word index."""

    file_count: int
    word_count: int
    watched_roots: int


def normalize_path(path: Path | str) -> Path:
    """
    Return the absolute identity used for a file or root.

    Only the parent directory is resolved. A symlink entry keeps its own
    name, so a file found through root/link.txt stays under root.
    """
    path = Path(os.path.abspath(Path(path).expanduser()))
    if not path.name:
        return path
    try:
        return path.parent.resolve() / path.name
    except (OSError, RuntimeError):
        # Symlink loops; keep the lexical absolute path
        return path


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def iter_directory_files(root: Path, recursive: bool) -> Iterator[Path]:
    """
    Yield candidate files under root.

    Direct children only unless recursive. Anything with a ".git" path
    segment is skipped, including everything below a root that itself
    lives inside a .git directory.
    """
    if VCS_DIR in root.parts:
        return

    if not recursive:
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    if entry.name == VCS_DIR:
                        continue
                    try:
                        if entry.is_file():
                            yield Path(entry.path)
                    except OSError:
                        continue
        except OSError as e:
            logger.debug("Cannot list %s: %s", root, e)
        return

    def on_error(e: OSError) -> None:
        logger.debug("Cannot walk %s: %s", e.filename, e)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = [d for d in dirnames if d != VCS_DIR]
        for name in filenames:
            if name != VCS_DIR:
                yield Path(dirpath) / name


class IndexManager:
    """
    Maintains an in-memory word index over files and directories.

    Usage:
        manager = IndexManager()
        manager.add_directory(Path("~/notes"), recursive=True)
        manager.find_files_with_word("todo")
        manager.start_watcher(Path("~/notes"))
        # ... later ...
        manager.close()
    """

    def __init__(
        self,
        word_index: WordIndex | None = None,
        extractor: TextExtractor | None = None,
        max_workers: int | None = None,
    ):
        """
        Initialize the IndexManager.

        Args:
            word_index: Index to populate (a fresh one if None)
            extractor: Text classifier/tokenizer (default config if None)
            max_workers: Pool size for bulk work (uses config if None)
        """
        self._words = word_index if word_index is not None else WordIndex()
        self._extractor = extractor or TextExtractor()
        self.max_workers = max_workers or get_max_workers()
        self._watcher: DirectoryWatcher | None = None
        self._watcher_lock = threading.Lock()

    @property
    def word_index(self) -> WordIndex:
        return self._words

    # ─────────────────────────────────────────────────────────────────
    # Indexing
    # ─────────────────────────────────────────────────────────────────

    def add_file(self, path: Path | str) -> bool:
        """
        Index a single file.

        Args:
            path: File to index

        Returns:
            True if the file was indexed, False if it is missing, not a
            regular file, not text, or contains no words
        """
        path = normalize_path(path)

        try:
            if not path.is_file():
                logger.debug("Skipping non-existent or non-regular: %s", path)
                return False
        except OSError as e:
            logger.debug("Cannot stat %s: %s", path, e)
            return False

        if not self._extractor.is_indexable(path):
            return False

        words = set(self._extractor.extract_words(path))
        if not words:
            logger.debug("Skipping file with no extractable words: %s", path)
            return False

        self._words.add_words(words, path)
        logger.debug("Indexed %s (%d words)", path, len(words))
        return True

    def add_directory(self, root: Path | str, recursive: bool = True) -> int:
        """
        Index every candidate file under a directory.

        Files are indexed concurrently; one failing file never aborts the
        rest.

        Args:
            root: Directory to scan
            recursive: Descend into subdirectories (direct children only
                       if False)

        Returns:
            Number of files successfully indexed (0 if root is not a
            directory)
        """
        root = normalize_path(root)
        if not _is_dir(root):
            logger.debug("Not a directory: %s", root)
            return 0

        logger.debug("Scanning %s (recursive: %s)", root, recursive)
        added, total = self._run_bulk(
            self.add_file, iter_directory_files(root, recursive)
        )
        logger.info("Indexed %d of %d files under %s", added, total, root)
        return added

    def _run_bulk(
        self,
        operation: Callable[[Path], bool],
        paths: Iterable[Path],
    ) -> tuple[int, int]:
        """
        Apply operation to every path on the worker pool.

        Results are tallied here, in the calling thread, as futures
        complete.

        Returns:
            (successes, attempted)
        """
        succeeded = 0
        with ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="file-indexer",
        ) as pool:
            futures = {pool.submit(operation, path): path for path in paths}
            for future in as_completed(futures):
                try:
                    if future.result():
                        succeeded += 1
                except Exception as e:  # Broad: isolate per-file failures
                    path = futures[future]
                    logger.warning("Error processing %s: %s", path, e)
        return succeeded, len(futures)

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    def find_files_with_word(self, word: str) -> list[Path]:
        """Return the files containing a word, sorted by path."""
        return sorted(self._words.find_files_with_word(word))

    def get_indexed_files(self) -> Iterator[Path]:
        """
        Enumerate indexed files.

        The current file set is read when iteration starts, so every call
        reflects the index at that moment.
        """
        yield from sorted(self._words.get_all_files())

    def get_stats(self) -> IndexStats:
        """
        Get index statistics.

        Returns:
            IndexStats with file, word and watched-root counts
        """
        return IndexStats(
            file_count=self._words.file_count,
            word_count=self._words.word_count,
            watched_roots=len(self.watched_directories),
        )

    # ─────────────────────────────────────────────────────────────────
    # Removal
    # ─────────────────────────────────────────────────────────────────

    def remove_file(self, path: Path | str) -> bool:
        """Drop a file from the index. Returns False if it was not indexed."""
        return self._words.remove_file(normalize_path(path))

    def remove_directory(self, root: Path | str) -> int:
        """
        Drop every indexed file under a directory.

        Args:
            root: Directory whose subtree should be removed

        Returns:
            Number of files removed (0 if root is not a directory)
        """
        root = normalize_path(root)
        if not _is_dir(root):
            logger.debug("Not a directory: %s", root)
            return 0

        targets = [
            path
            for path in self._words.get_all_files()
            if path.is_relative_to(root)
        ]
        removed, _ = self._run_bulk(self._words.remove_file, targets)
        logger.info("Removed %d files under %s", removed, root)
        return removed

    def clear_index(self) -> None:
        """Drop every file and word."""
        self._words.clear()
        logger.info("Index cleared")

    # ─────────────────────────────────────────────────────────────────
    # Directory Watcher Methods
    # ─────────────────────────────────────────────────────────────────

    @property
    def watcher(self) -> DirectoryWatcher:
        """The directory watcher feeding this index (created on demand)."""
        with self._watcher_lock:
            if self._watcher is None:
                from .watcher import DirectoryWatcher

                self._watcher = DirectoryWatcher(
                    self, max_workers=self.max_workers
                )
            return self._watcher

    def start_watcher(self, root: Path | str) -> bool:
        """
        Watch a directory and keep the index in sync with it.

        Existing files are not indexed; call add_directory() for that.

        Returns:
            True if the directory is being watched
        """
        return self.watcher.watch(root)

    def stop_watcher(self, root: Path | str) -> bool:
        """Stop watching a directory. Returns False if it was not watched."""
        if self._watcher is None:
            return False
        return self._watcher.unwatch(root)

    def stop_all_watchers(self) -> None:
        """Stop every directory watcher."""
        if self._watcher is not None:
            self._watcher.stop_all()

    @property
    def watched_directories(self) -> set[Path]:
        if self._watcher is None:
            return set()
        return self._watcher.watched_directories

    def close(self) -> None:
        """Stop all watchers and release their dispatch threads."""
        with self._watcher_lock:
            watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.close()
