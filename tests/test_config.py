"""Tests for environment-variable configuration."""

from __future__ import annotations

import pytest

from file_indexer import config


class TestDefaults:
    """Defaults apply when no variable is set."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "FILE_INDEXER_MAX_WORKERS",
            "FILE_INDEXER_MAX_UNTYPED_SIZE",
            "FILE_INDEXER_WATCH_DEBOUNCE_MS",
            "FILE_INDEXER_STOP_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_max_untyped_size_is_one_mebibyte(self):
        assert config.get_max_untyped_size() == 1024 * 1024

    def test_max_workers_is_at_least_one(self):
        assert config.get_max_workers() >= 1

    def test_watch_settings(self):
        assert config.get_watch_debounce_ms() == 300
        assert config.get_stop_timeout() == 5.0


class TestOverrides:
    """Environment variables override defaults."""

    def test_overrides_are_read(self, monkeypatch):
        monkeypatch.setenv("FILE_INDEXER_MAX_WORKERS", "7")
        monkeypatch.setenv("FILE_INDEXER_WATCH_DEBOUNCE_MS", "20")
        monkeypatch.setenv("FILE_INDEXER_STOP_TIMEOUT", "0.5")

        assert config.get_max_workers() == 7
        assert config.get_watch_debounce_ms() == 20
        assert config.get_stop_timeout() == 0.5

    def test_worker_count_is_clamped(self, monkeypatch):
        monkeypatch.setenv("FILE_INDEXER_MAX_WORKERS", "0")
        assert config.get_max_workers() == 1

    @pytest.mark.parametrize(
        "name, getter, default",
        [
            ("FILE_INDEXER_MAX_UNTYPED_SIZE", "get_max_untyped_size", 1048576),
            ("FILE_INDEXER_WATCH_DEBOUNCE_MS", "get_watch_debounce_ms", 300),
            ("FILE_INDEXER_STOP_TIMEOUT", "get_stop_timeout", 5.0),
        ],
    )
    def test_invalid_values_fall_back(self, monkeypatch, name, getter, default):
        monkeypatch.setenv(name, "not-a-number")
        assert getattr(config, getter)() == default
