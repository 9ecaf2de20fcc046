"""Tests for the bidirectional WordIndex."""

from __future__ import annotations

import threading
from pathlib import Path

from file_indexer.index.words import WordIndex

FILE_A = Path("/data/a.txt")
FILE_B = Path("/data/b.txt")


def assert_consistent(index: WordIndex) -> None:
    """Every forward pair has its reverse pair and vice versa."""
    for word, files in index._word_to_files.items():
        assert files, f"empty file set kept for {word!r}"
        for file in files:
            assert word in index._file_to_words[file]
    for file, words in index._file_to_words.items():
        assert words
        for word in words:
            assert file in index._word_to_files[word]


class TestAddWord:
    """Tests for inserting word-file pairs."""

    def test_added_word_is_findable(self, word_index: WordIndex):
        word_index.add_word("hello", FILE_A)

        assert word_index.find_files_with_word("hello") == {FILE_A}
        assert FILE_A in word_index.get_all_files()

    def test_lookup_is_case_insensitive(self, word_index: WordIndex):
        word_index.add_word("Test", FILE_A)

        assert word_index.find_files_with_word("test") == {FILE_A}
        assert word_index.find_files_with_word("TEST") == {FILE_A}

    def test_adding_twice_is_idempotent(self, word_index: WordIndex):
        word_index.add_word("hello", FILE_A)
        word_index.add_word("hello", FILE_A)

        assert word_index.find_files_with_word("hello") == {FILE_A}
        assert word_index.word_count == 1
        assert word_index.file_count == 1

    def test_empty_word_is_ignored(self, word_index: WordIndex):
        word_index.add_word("", FILE_A)

        assert word_index.get_all_files() == set()

    def test_add_words_indexes_every_word(self, word_index: WordIndex):
        word_index.add_words(["alpha", "Beta", "alpha"], FILE_A)
        word_index.add_words(["beta"], FILE_B)

        assert word_index.find_files_with_word("alpha") == {FILE_A}
        assert word_index.find_files_with_word("beta") == {FILE_A, FILE_B}
        assert word_index.word_count == 2
        assert_consistent(word_index)


class TestQueries:
    """Tests for lookups and snapshots."""

    def test_unknown_word_returns_empty_set(self, word_index: WordIndex):
        assert word_index.find_files_with_word("missing") == set()

    def test_results_are_snapshots(self, word_index: WordIndex):
        word_index.add_word("hello", FILE_A)
        files = word_index.find_files_with_word("hello")
        all_files = word_index.get_all_files()

        word_index.add_word("hello", FILE_B)
        word_index.remove_file(FILE_A)

        assert files == {FILE_A}
        assert all_files == {FILE_A}

    def test_contains_file(self, word_index: WordIndex):
        word_index.add_word("hello", FILE_A)

        assert word_index.contains_file(FILE_A) is True
        assert word_index.contains_file(FILE_B) is False


class TestRemoveFile:
    """Tests for file removal and pruning."""

    def test_remove_prunes_unique_words(self, word_index: WordIndex):
        word_index.add_words(["shared", "only_a"], FILE_A)
        word_index.add_words(["shared"], FILE_B)

        assert word_index.remove_file(FILE_A) is True

        assert word_index.find_files_with_word("only_a") == set()
        assert word_index.find_files_with_word("shared") == {FILE_B}
        assert "only_a" not in word_index._word_to_files
        assert word_index.contains_file(FILE_A) is False
        assert_consistent(word_index)

    def test_remove_absent_file_returns_false(self, word_index: WordIndex):
        assert word_index.remove_file(FILE_A) is False

    def test_clear_empties_both_maps(self, word_index: WordIndex):
        word_index.add_words(["alpha", "beta"], FILE_A)
        word_index.add_words(["gamma"], FILE_B)

        word_index.clear()

        assert word_index.get_all_files() == set()
        for word in ("alpha", "beta", "gamma"):
            assert word_index.find_files_with_word(word) == set()
        assert len(word_index) == 0


class TestConcurrency:
    """Tests for concurrent mutation."""

    def test_concurrent_adds_and_removes_stay_consistent(
        self, word_index: WordIndex
    ):
        files = [Path(f"/data/{i}.txt") for i in range(20)]
        words = [f"word{i}" for i in range(30)] + ["shared"]
        barrier = threading.Barrier(len(files))

        def worker(file: Path, index: int) -> None:
            barrier.wait()
            for round_ in range(20):
                word_index.add_words(words, file)
                if (index + round_) % 3 == 0:
                    word_index.remove_file(file)
            word_index.add_words(["shared"], file)

        threads = [
            threading.Thread(target=worker, args=(file, i))
            for i, file in enumerate(files)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert word_index.find_files_with_word("shared") == set(files)
        assert word_index.get_all_files() == set(files)
        assert_consistent(word_index)
