"""Configuration for the file indexer.

All settings are read from environment variables at call time so tests
can override them with monkeypatch.
"""

import logging
import os

logger = logging.getLogger(__name__)

# Files without an extension are treated as text below this size (1 MiB)
DEFAULT_MAX_UNTYPED_SIZE = 1024 * 1024

DEFAULT_WATCH_DEBOUNCE_MS = 300

DEFAULT_STOP_TIMEOUT = 5.0


def _int_from_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", name, value, default)
        return default


def get_max_workers() -> int:
    """
    Get the size of the worker pool used for bulk indexing.

    Set FILE_INDEXER_MAX_WORKERS to customize.
    Defaults to the number of available processors.

    Returns:
        Worker count, at least 1.
    """
    default = os.cpu_count() or 1
    return max(1, _int_from_env("FILE_INDEXER_MAX_WORKERS", default))


def get_max_untyped_size() -> int:
    """
    Get the size limit for files without an extension.

    Files with no extension are indexed only when smaller than this.
    Set FILE_INDEXER_MAX_UNTYPED_SIZE to customize (bytes).
    Defaults to 1 MiB.

    Returns:
        Size threshold in bytes.
    """
    return _int_from_env(
        "FILE_INDEXER_MAX_UNTYPED_SIZE", DEFAULT_MAX_UNTYPED_SIZE
    )


def get_watch_debounce_ms() -> int:
    """
    Get the debounce window for directory change notifications.

    Set FILE_INDEXER_WATCH_DEBOUNCE_MS to customize.
    Defaults to 300 milliseconds.

    Returns:
        Debounce window in milliseconds.
    """
    return _int_from_env(
        "FILE_INDEXER_WATCH_DEBOUNCE_MS", DEFAULT_WATCH_DEBOUNCE_MS
    )


def get_stop_timeout() -> float:
    """
    Get how long unwatch waits for a watcher thread to exit.

    Set FILE_INDEXER_STOP_TIMEOUT to customize (seconds).
    Defaults to 5 seconds.

    Returns:
        Timeout in seconds.
    """
    value = os.environ.get("FILE_INDEXER_STOP_TIMEOUT")
    if value is None:
        return DEFAULT_STOP_TIMEOUT
    try:
        return float(value)
    except ValueError:
        logger.warning(
            "Ignoring invalid FILE_INDEXER_STOP_TIMEOUT=%r, using %s",
            value,
            DEFAULT_STOP_TIMEOUT,
        )
        return DEFAULT_STOP_TIMEOUT
