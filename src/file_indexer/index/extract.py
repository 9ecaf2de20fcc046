"""Word extraction from text files.

Decides which files are worth indexing and turns their content into
lowercase words:
- Known text extensions are always eligible
- Files without an extension are eligible when small (1 MiB by default)
- Read failures yield no words instead of raising
- HTML markup is stripped before tokenizing
"""

from __future__ import annotations

import logging
import re
import warnings
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import get_max_untyped_size

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"\w+")

TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "java", "kt", "kts", "gradle", "xml", "json",
        "properties", "yaml", "yml", "js", "ts", "html", "css", "scss",
        "sass", "less", "py", "rb", "sh", "bash", "zsh", "c", "cpp", "h",
        "hpp", "cs", "go", "rs", "php", "pl", "pm", "t", "sql", "conf",
        "ini", "cfg", "config", "toml", "lock", "gitignore", "dockerignore",
        "editorconfig", "log", "csv", "tsv", "svg", "graphql", "gql",
        "proto", "plist", "swift", "m", "mm",
    }
)  # fmt: skip

MARKUP_EXTENSIONS = frozenset({"html"})


def file_extension(path: Path) -> str:
    """
    Return the text after the last dot of the file name, lowercased.

    Unlike Path.suffix, dotfiles count: ".gitignore" -> "gitignore".
    """
    name = path.name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def _strip_html(html: str) -> str:
    """Convert HTML to plain text, dropping script and style content."""
    try:
        from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
            soup = BeautifulSoup(html, "html.parser")

        for element in soup(["script", "style"]):
            element.decompose()

        return soup.get_text(separator="\n", strip=True)

    except Exception as e:  # Broad: parser errors vary by bs4 version
        logger.debug("HTML stripping failed, indexing raw markup: %s", e)
        return html


class TextExtractor:
    """
    Classifies files and extracts their words.

    Args:
        max_untyped_size: Size limit for files without an extension
            (uses config default if None)
    """

    def __init__(self, max_untyped_size: int | None = None):
        if max_untyped_size is None:
            max_untyped_size = get_max_untyped_size()
        self.max_untyped_size = max_untyped_size

    def is_indexable(self, path: Path) -> bool:
        """Check whether a file looks like text worth indexing."""
        extension = file_extension(path)

        if not extension:
            try:
                size = path.stat().st_size
            except OSError as e:
                logger.debug("Cannot stat %s: %s", path, e)
                return False
            if size < self.max_untyped_size:
                logger.debug(
                    "Treating %s as text (no extension, %d bytes)", path, size
                )
                return True
            return False

        if extension not in TEXT_EXTENSIONS:
            logger.debug("Skipping non-text file: %s", path)
            return False
        return True

    def extract_words(self, path: Path) -> Iterator[str]:
        """
        Yield the lowercase words of a file.

        Yields nothing if the file cannot be read.
        """
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Error reading %s: %s", path, e)
            return

        if file_extension(path) in MARKUP_EXTENSIONS:
            content = _strip_html(content)

        for match in WORD_PATTERN.finditer(content):
            yield match.group().lower()


def is_indexable(path: Path) -> bool:
    """Check a path with a default-configured extractor."""
    return TextExtractor().is_indexable(path)


def extract_words(path: Path) -> Iterator[str]:
    """Extract words with a default-configured extractor."""
    return TextExtractor().extract_words(path)
