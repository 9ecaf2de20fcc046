"""Command-line interface for file-indexer.

Provides commands for:
- shell: Interactive indexing shell (default)
- search: Index paths once and print the files containing a word

Usage:
    file-indexer                         # Start the interactive shell
    file-indexer shell --verbose         # Shell with debug logging
    file-indexer search todo ~/notes -r  # One-shot search
"""

import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, TextIO

import cyclopts

from .index import IndexManager
from .index.manager import iter_directory_files, normalize_path

app = cyclopts.App(
    name="file-indexer",
    help="Live-updating word index over files and watched directories.",
)

HELP_TEXT = """\
Available commands:
  add <file_path>           - Add a file to the index
  add <directory_path>      - Add the files directly inside a directory
  add -r <directory_path>   - Add a directory to the index recursively
  remove <path>             - Remove a file or directory from the index
  search <word>             - Search for files containing a word
  list                      - List all indexed files
  watch <directory_path>    - Watch a directory for changes
  unwatch <directory_path>  - Stop watching a directory
  stats                     - Show index statistics
  clear                     - Clear the index
  help                      - Show this help message
  exit, quit                - Exit the application"""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _format_time(seconds: float) -> str:
    """Format duration for display."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.1f}s"


def _count_candidates(directory: Path) -> int:
    root = normalize_path(directory)
    return sum(1 for _ in iter_directory_files(root, recursive=True))


class FileIndexerShell:
    """
    Interactive shell over an IndexManager.

    Each input line is one command; see HELP_TEXT.
    """

    def __init__(self, manager: IndexManager, out: TextIO | None = None):
        self.manager = manager
        self.out = out or sys.stdout
        self._commands: dict[str, Callable[[str], None]] = {
            "add": self._add,
            "remove": self._remove,
            "search": self._search,
            "list": self._list,
            "watch": self._watch,
            "unwatch": self._unwatch,
            "stats": self._stats,
            "clear": self._clear,
            "help": self._help,
        }

    def _print(self, message: str = "") -> None:
        print(message, file=self.out)

    def run(self, read_line: Callable[[str], str] = input) -> None:
        """Read and execute commands until exit or end of input."""
        self._print("Welcome to File Indexer!")
        self._print("Type 'help' for available commands.")
        try:
            while True:
                try:
                    line = read_line("> ")
                except (EOFError, KeyboardInterrupt):
                    self._print()
                    break
                if not self.handle(line):
                    break
        finally:
            self.manager.close()

    def handle(self, line: str) -> bool:
        """
        Execute one command line.

        Returns:
            False if the shell should exit, True otherwise
        """
        line = line.strip()
        if not line:
            return True

        command, _, args = line.partition(" ")
        command = command.lower()
        args = args.strip()

        if command in ("exit", "quit"):
            self._print("Goodbye!")
            return False

        handler = self._commands.get(command)
        if handler is None:
            self._print("Unknown command. Type 'help' for available commands.")
            return True

        handler(args)
        return True

    def _add(self, args: str) -> None:
        recursive = args == "-r" or args.startswith("-r ")
        raw_path = args[2:].strip() if recursive else args
        if not raw_path:
            self._print(
                "Usage: add <file_path> or add -r <directory_path>"
            )
            return

        path = Path(raw_path).expanduser()
        if path.is_dir():
            count = self.manager.add_directory(path, recursive=recursive)
            self._print(f"Added {count} files from directory: {raw_path}")
        elif self.manager.add_file(path):
            self._print(f"Added file: {raw_path}")
        else:
            self._print(f"Failed to add file: {raw_path}")

    def _remove(self, args: str) -> None:
        if not args:
            self._print("Usage: remove <path>")
            return

        path = Path(args).expanduser()
        if path.is_dir():
            count = self.manager.remove_directory(path)
            self._print(f"Removed {count} files from directory: {args}")
        elif self.manager.remove_file(path):
            self._print(f"Removed file: {args}")
        else:
            self._print(f"File not indexed: {args}")

    def _search(self, args: str) -> None:
        if not args:
            self._print("Usage: search <word>")
            return

        files = self.manager.find_files_with_word(args)
        if not files:
            self._print(f"No files found containing word: {args}")
            return
        self._print(f"Files containing word '{args}':")
        for file in files:
            self._print(f"  {file}")

    def _list(self, args: str) -> None:
        files = list(self.manager.get_indexed_files())
        if not files:
            self._print("No files are currently indexed.")
            return
        self._print("Indexed files:")
        for file in files:
            self._print(f"  {file}")

    def _watch(self, args: str) -> None:
        if not args:
            self._print("Usage: watch <directory_path>")
            return

        directory = Path(args).expanduser()
        if not directory.is_dir():
            self._print(f"Not a directory: {args}")
            return

        start = time.time()
        if not self.manager.start_watcher(directory):
            self._print(f"Failed to watch directory: {args}")
            return

        file_count = _count_candidates(directory)
        count = self.manager.add_directory(directory, recursive=True)
        elapsed = time.time() - start

        self._print(f"Now watching directory: {args}")
        self._print(
            f"Indexed {count} of {file_count} existing files "
            f"in {_format_time(elapsed)}."
        )
        if count == 0 and file_count > 0:
            self._print(
                "Note: none of the files were recognized as text "
                "or contained extractable words."
            )

    def _unwatch(self, args: str) -> None:
        if not args:
            self._print("Usage: unwatch <directory_path>")
            return

        if self.manager.stop_watcher(Path(args).expanduser()):
            self._print(f"Stopped watching directory: {args}")
        else:
            self._print(f"Not watching directory: {args}")

    def _stats(self, args: str) -> None:
        stats = self.manager.get_stats()
        self._print(f"Files:        {stats.file_count:,}")
        self._print(f"Words:        {stats.word_count:,}")
        self._print(f"Watching:     {stats.watched_roots}")
        for root in sorted(self.manager.watched_directories):
            self._print(f"  {root}")

    def _clear(self, args: str) -> None:
        self.manager.clear_index()
        self._print("Index cleared.")

    def _help(self, args: str) -> None:
        self._print(HELP_TEXT)


def _run_shell(verbose: bool) -> None:
    _configure_logging(verbose)
    FileIndexerShell(IndexManager()).run()


@app.command
def shell(
    verbose: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--verbose", "-v"],
            help="Enable debug logging",
        ),
    ] = False,
) -> None:
    """
    Start the interactive indexing shell.

    This is the default command when no subcommand is specified.
    Watched directories stay in sync until you exit.
    """
    _run_shell(verbose)


@app.command
def search(
    word: str,
    *paths: Path,
    recursive: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--recursive", "-r"],
            help="Descend into subdirectories",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        cyclopts.Parameter(name=["--verbose", "-v"], help="Show progress"),
    ] = False,
) -> None:
    """
    Index the given files and directories, then search them once.

    Exits with status 1 when no file contains the word.
    """
    _configure_logging(verbose)

    manager = IndexManager()
    start = time.time()
    indexed = 0
    for path in paths:
        path = path.expanduser()
        if path.is_dir():
            indexed += manager.add_directory(path, recursive=recursive)
        elif manager.add_file(path):
            indexed += 1
        else:
            print(f"Skipped: {path}", file=sys.stderr)

    if verbose:
        elapsed = time.time() - start
        print(
            f"Indexed {indexed:,} files in {_format_time(elapsed)}",
            file=sys.stderr,
        )

    files = manager.find_files_with_word(word)
    if not files:
        print(f"No files found containing word: {word}", file=sys.stderr)
        sys.exit(1)
    for file in files:
        print(file)


@app.default
def default_handler(
    verbose: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--verbose", "-v"],
            help="Enable debug logging",
        ),
    ] = False,
) -> None:
    """Start the interactive shell (default when no command specified)."""
    _run_shell(verbose)


def main() -> None:
    """Entry point for the CLI."""
    app()
