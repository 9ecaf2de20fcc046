"""Shared pytest fixtures for file-indexer tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from file_indexer.index.manager import IndexManager
from file_indexer.index.words import WordIndex


@pytest.fixture
def word_index() -> WordIndex:
    """Return an empty word index."""
    return WordIndex()


@pytest.fixture
def manager():
    """IndexManager with a small pool; watchers are stopped afterwards."""
    manager = IndexManager(max_workers=4)
    yield manager
    manager.close()


@pytest.fixture
def text_tree(tmp_path: Path) -> dict[str, Path]:
    """
    Create a small directory tree.

    Layout:
        file1.txt             "This is a test file with some words"
        file2.txt             "...different content with some common words"
        image.png             text content, but not a text extension
        subdir/subfile.txt    "This is a file in a subdirectory"
        .git/config.txt       text under version-control metadata
    """
    root = tmp_path / "tree"
    root.mkdir()

    file1 = root / "file1.txt"
    file1.write_text("This is a test file with some words")

    file2 = root / "file2.txt"
    file2.write_text(
        "This file has different content with some common words"
    )

    image = root / "image.png"
    image.write_text("This is not a text file based on extension")

    subdir = root / "subdir"
    subdir.mkdir()
    subfile = subdir / "subfile.txt"
    subfile.write_text("This is a file in a subdirectory")

    git_dir = root / ".git"
    git_dir.mkdir()
    git_file = git_dir / "config.txt"
    git_file.write_text("gitsecret metadata")

    return {
        "root": root.resolve(),
        "file1": file1.resolve(),
        "file2": file2.resolve(),
        "image": image.resolve(),
        "subdir": subdir.resolve(),
        "subfile": subfile.resolve(),
        "git_file": git_file.resolve(),
    }
