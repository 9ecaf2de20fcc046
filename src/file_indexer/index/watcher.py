"""Directory watcher for real-time index updates.

Uses watchfiles (Rust-based, efficient) to monitor watched roots:
- Created files → add to index
- Modified files → remove, then re-add (stale words never survive)
- Deleted files → remove from index

Each root gets its own background thread and stop event. Events are
handed to a shared thread pool so a slow file read never holds up
delivery of the next batch.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, watch

from ..config import get_max_workers, get_stop_timeout, get_watch_debounce_ms
from .manager import normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .service import IndexService

logger = logging.getLogger(__name__)

# How long watchfiles blocks before yielding an empty batch; bounds how
# quickly watch() learns that the OS subscription is live
SUBSCRIBE_POLL_MS = 100


class FileEvent(Enum):
    """Kind of change reported for a path."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    OTHER = "other"

    @classmethod
    def from_change(cls, change: Change) -> FileEvent:
        return _CHANGE_EVENTS.get(change, cls.OTHER)


_CHANGE_EVENTS = {
    Change.added: FileEvent.CREATED,
    Change.modified: FileEvent.MODIFIED,
    Change.deleted: FileEvent.DELETED,
}


def coalesce_changes(
    changes: Iterable[tuple[Change, str]],
) -> dict[Path, FileEvent]:
    """
    Collapse one watchfiles batch into a single event per path.

    watchfiles reports a batch as an unordered set, so a path with more
    than one kind (e.g. deleted + added by an editor's atomic save) becomes
    MODIFIED: remove-then-add leaves the right state whether or not the
    file still exists.
    """
    kinds: dict[Path, set[FileEvent]] = {}
    for change, raw_path in changes:
        path = normalize_path(raw_path)
        kinds.setdefault(path, set()).add(FileEvent.from_change(change))

    return {
        path: next(iter(events)) if len(events) == 1 else FileEvent.MODIFIED
        for path, events in kinds.items()
    }


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class _PathLocks:
    """Per-path mutexes, dropped once no thread holds or waits on them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Path, _LockEntry] = {}

    @contextmanager
    def hold(self, path: Path) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(path, _LockEntry())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[path]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


@dataclass
class _RootWatch:
    """Subscription handle for one watched root."""

    root: Path
    stop_event: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None
    pending: set[Future] = field(default_factory=set)
    pending_lock: threading.Lock = field(default_factory=threading.Lock)
    # Set once the subscription is live or has failed
    ready: threading.Event = field(default_factory=threading.Event)
    error: BaseException | None = None


class DirectoryWatcher:
    """
    Watches directories for changes and updates the index.

    Usage:
        watcher = DirectoryWatcher(manager)
        watcher.watch(Path("~/notes"))
        # ... later ...
        watcher.close()
    """

    def __init__(
        self,
        service: IndexService,
        debounce_ms: int | None = None,
        max_workers: int | None = None,
        stop_timeout: float | None = None,
    ):
        """
        Initialize the watcher.

        Args:
            service: Index to keep in sync
            debounce_ms: Milliseconds to group changes (config if None)
            max_workers: Event dispatch pool size (config if None)
            stop_timeout: Seconds to wait for a watch thread on unwatch
                          (config if None)
        """
        self._service = service
        self.debounce_ms = (
            debounce_ms if debounce_ms is not None else get_watch_debounce_ms()
        )
        self.stop_timeout = (
            stop_timeout if stop_timeout is not None else get_stop_timeout()
        )

        self._watches: dict[Path, _RootWatch] = {}
        self._lock = threading.Lock()
        # Serializes watch() calls while a subscription is being confirmed
        self._subscribe_lock = threading.Lock()
        self._closed = False

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or get_max_workers(),
            thread_name_prefix="DirectoryWatcher-dispatch",
        )
        self._path_locks = _PathLocks()

    def __enter__(self) -> DirectoryWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ─────────────────────────────────────────────────────────────────
    # Subscriptions
    # ─────────────────────────────────────────────────────────────────

    def watch(self, root: Path | str) -> bool:
        """
        Start watching a directory tree.

        Blocks until the OS subscription is live (at most stop_timeout
        seconds); events are then handled in the background.

        Returns:
            True if the root is now watched (including when it already
            was), False if it is not a directory, the subscription failed,
            or the watcher is closed
        """
        root = normalize_path(root)

        with self._subscribe_lock:
            with self._lock:
                if self._closed:
                    logger.warning("Watcher is closed, not watching %s", root)
                    return False
                if root in self._watches:
                    logger.info("Already watching directory: %s", root)
                    return True

            try:
                is_dir = root.is_dir()
            except OSError as e:
                logger.warning("Cannot watch %s: %s", root, e)
                return False
            if not is_dir:
                logger.warning("Cannot watch %s: not a directory", root)
                return False

            handle = _RootWatch(root=root)
            handle.thread = threading.Thread(
                target=self._watch_loop,
                args=(handle,),
                name=f"DirectoryWatcher[{root.name}]",
                daemon=True,
            )
            try:
                handle.thread.start()
            except RuntimeError as e:
                logger.error("Failed to watch directory %s: %s", root, e)
                return False

            if not handle.ready.wait(self.stop_timeout):
                logger.warning(
                    "Subscription for %s not confirmed after %.1fs",
                    root,
                    self.stop_timeout,
                )

            with self._lock:
                # A failure recorded after this check deregisters itself
                if handle.error is not None:
                    logger.error(
                        "Failed to watch directory %s: %s", root, handle.error
                    )
                    return False
                if self._closed:
                    handle.stop_event.set()
                    logger.warning("Watcher closed while subscribing %s", root)
                    return False
                self._watches[root] = handle

        logger.info("Started watching directory: %s", root)
        return True

    def unwatch(self, root: Path | str) -> bool:
        """
        Stop watching a directory tree.

        No event for this root is dispatched after this returns; events
        already being applied are allowed to finish first.

        Returns:
            True if the root was watched, False otherwise
        """
        root = normalize_path(root)

        with self._lock:
            handle = self._watches.pop(root, None)
        if handle is None:
            return False

        handle.stop_event.set()
        thread = handle.thread
        if (
            thread is not None
            and thread.is_alive()
            and thread is not threading.current_thread()
        ):
            thread.join(timeout=self.stop_timeout)
            if thread.is_alive():
                logger.warning(
                    "Watch thread for %s still running after %.1fs",
                    root,
                    self.stop_timeout,
                )

        # stop_event is set, so _submit adds nothing past this snapshot
        with handle.pending_lock:
            in_flight = list(handle.pending)
        wait(in_flight)

        logger.info("Stopped watching directory: %s", root)
        return True

    def stop_all(self) -> None:
        """Stop watching every directory."""
        with self._lock:
            roots = list(self._watches)
        for root in roots:
            self.unwatch(root)

    def close(self) -> None:
        """Stop all watches and shut down the dispatch pool."""
        with self._lock:
            self._closed = True
        self.stop_all()
        self._executor.shutdown(wait=True)

    @property
    def watched_directories(self) -> set[Path]:
        with self._lock:
            return set(self._watches)

    def is_watching(self, root: Path | str) -> bool:
        with self._lock:
            return normalize_path(root) in self._watches

    # ─────────────────────────────────────────────────────────────────
    # Event loop and dispatch
    # ─────────────────────────────────────────────────────────────────

    def _watch_loop(self, handle: _RootWatch) -> None:
        """Main watch loop (runs in the root's background thread)."""
        root = handle.root
        logger.debug("Starting watch loop on %s", root)

        try:
            for changes in watch(
                root,
                stop_event=handle.stop_event,
                debounce=self.debounce_ms,
                recursive=True,
                raise_interrupt=False,
                yield_on_timeout=True,
                rust_timeout=SUBSCRIBE_POLL_MS,
            ):
                # First yield, even an empty one, means the OS accepted us
                handle.ready.set()
                if handle.stop_event.is_set():
                    break

                for path, event in coalesce_changes(changes).items():
                    # Security: only act on paths inside the watched root
                    if not path.is_relative_to(root):
                        logger.warning(
                            "Ignoring path outside watched root: %s", path
                        )
                        continue
                    self._submit(handle, event, path)

        except Exception as e:  # Broad: OS limits, permissions, root removed
            handle.error = e
            logger.error("Watcher for %s failed: %s", root, e)
            with self._lock:
                if self._watches.get(root) is handle:
                    del self._watches[root]

        finally:
            handle.ready.set()

        logger.debug("Watch loop on %s exited", root)

    def _submit(self, handle: _RootWatch, event: FileEvent, path: Path) -> None:
        with handle.pending_lock:
            if handle.stop_event.is_set():
                return
            try:
                future = self._executor.submit(self.dispatch, event, path)
            except RuntimeError:
                logger.debug("Dispatch pool shut down, dropping %s", path)
                return
            handle.pending.add(future)

        def done(f: Future) -> None:
            with handle.pending_lock:
                handle.pending.discard(f)

        future.add_done_callback(done)

    def dispatch(self, event: FileEvent, path: Path) -> None:
        """
        Apply one change event to the index.

        Events for the same path are applied one at a time, so a
        modification's remove-then-add is never split by another watcher
        event for that path.
        """
        with self._path_locks.hold(path):
            try:
                if event is FileEvent.CREATED:
                    logger.info("File created: %s", path)
                    self._service.add_file(path)
                elif event is FileEvent.MODIFIED:
                    logger.info("File modified: %s", path)
                    self._service.remove_file(path)
                    self._service.add_file(path)
                elif event is FileEvent.DELETED:
                    logger.info("File deleted: %s", path)
                    self._service.remove_file(path)
                else:
                    logger.info("Unknown event for file: %s", path)
            except Exception as e:  # Broad: index service error
                logger.error(
                    "Error handling %s event for %s: %s", event.value, path, e
                )
