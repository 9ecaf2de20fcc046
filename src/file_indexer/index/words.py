"""Thread-safe bidirectional word <-> file index.

Two maps are kept in lockstep:
- word -> set of files containing it
- file -> set of words it contributes

Thread Safety:
- A single threading.Lock guards both maps
- Every mutation updates both maps before releasing the lock, so no
  reader can observe one side without the other
- Reads return copies taken under the lock
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class WordIndex:
    """
    Inverted index from lowercase words to file paths.

    Usage:
        index = WordIndex()
        index.add_words(["Hello", "world"], Path("/tmp/a.txt"))
        index.find_files_with_word("HELLO")  # {Path("/tmp/a.txt")}
    """

    def __init__(self) -> None:
        self._word_to_files: dict[str, set[Path]] = {}
        self._file_to_words: dict[Path, set[str]] = {}
        self._lock = threading.Lock()

    def _insert(self, word: str, file: Path) -> None:
        # Caller holds self._lock
        self._word_to_files.setdefault(word, set()).add(file)
        self._file_to_words.setdefault(file, set()).add(word)

    def add_word(self, word: str, file: Path) -> None:
        """Associate a word with a file. Re-adding a pair is a no-op."""
        word = word.lower()
        if not word:
            return
        with self._lock:
            self._insert(word, file)

    def add_words(self, words: Iterable[str], file: Path) -> None:
        """
        Associate every word with a file.

        The words are normalized before the lock is taken and inserted in
        a single critical section.
        """
        normalized = {word.lower() for word in words}
        normalized.discard("")
        if not normalized:
            return
        with self._lock:
            for word in normalized:
                self._insert(word, file)

    def find_files_with_word(self, word: str) -> set[Path]:
        """Return a snapshot of the files containing the word."""
        with self._lock:
            return set(self._word_to_files.get(word.lower(), ()))

    def get_all_files(self) -> set[Path]:
        """Return a snapshot of every indexed file."""
        with self._lock:
            return set(self._file_to_words)

    def remove_file(self, file: Path) -> bool:
        """
        Remove a file and every association it has.

        Words left without any file are pruned.

        Returns:
            True if the file was indexed, False otherwise
        """
        with self._lock:
            words = self._file_to_words.pop(file, None)
            if words is None:
                return False
            for word in words:
                files = self._word_to_files.get(word)
                if files is None:
                    continue
                files.discard(file)
                if not files:
                    del self._word_to_files[word]
            return True

    def contains_file(self, file: Path) -> bool:
        with self._lock:
            return file in self._file_to_words

    def clear(self) -> None:
        """Empty both maps."""
        with self._lock:
            self._word_to_files.clear()
            self._file_to_words.clear()

    @property
    def file_count(self) -> int:
        with self._lock:
            return len(self._file_to_words)

    @property
    def word_count(self) -> int:
        with self._lock:
            return len(self._word_to_files)

    def __len__(self) -> int:
        return self.file_count
