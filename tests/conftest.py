"""
Shared pytest fixtures and configuration for binrunner tests.

This module provides:
- A recording host helper that captures task messages per severity
- A temporary bin directory and a script writer
- A buffered output sink with bounded waits for the drain thread
- Settings cache isolation

Usage:
    def test_something(runner, helper, write_script):
        write_script("job.sh", "exit 0")
        ...
"""

import os
import sys
import threading
import time
from pathlib import Path
from typing import Callable

import pytest

# Ensure binrunner package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from binrunner.core.logging import configure_logging
from binrunner.core.settings import RunnerSettings, clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Recording helpers
# =============================================================================


class RecordingHelper:
    """TaskHelper that keeps every message, by severity."""

    def __init__(self) -> None:
        self.messages: dict[str, list[str]] = {
            "debug": [],
            "info": [],
            "warning": [],
            "error": [],
        }

    def log_debug(self, message: str) -> None:
        self.messages["debug"].append(message)

    def log_info(self, message: str) -> None:
        self.messages["info"].append(message)

    def log_warning(self, message: str) -> None:
        self.messages["warning"].append(message)

    def log_error(self, message: str) -> None:
        self.messages["error"].append(message)

    @property
    def errors(self) -> list[str]:
        return self.messages["error"]

    @property
    def warnings(self) -> list[str]:
        return self.messages["warning"]

    @property
    def infos(self) -> list[str]:
        return self.messages["info"]

    def clear(self) -> None:
        for lines in self.messages.values():
            lines.clear()


class LineCollector:
    """Thread-safe line sink for the output drain."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self.lines.append(line)

    def wait_for(self, count: int, timeout: float = 5.0) -> list[str]:
        """Wait until at least ``count`` lines arrived (or timeout)."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.lines) >= count:
                    return list(self.lines)
            time.sleep(0.01)
        with self._lock:
            return list(self.lines)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep runner diagnostics out of test output unless a test asks."""
    configure_logging(level="WARNING", force=True)


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Settings are cached per process; start every test from scratch."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def helper() -> RecordingHelper:
    return RecordingHelper()


@pytest.fixture
def collector() -> LineCollector:
    return LineCollector()


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def settings(bin_dir: Path) -> RunnerSettings:
    return RunnerSettings(bin_dir=bin_dir)


@pytest.fixture
def write_script(bin_dir: Path) -> Callable[..., Path]:
    """Factory writing an executable sh script into the bin directory."""

    def _write(name: str, body: str, mode: int | None = None) -> Path:
        path = bin_dir / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(mode if mode is not None else 0o755)
        return path

    return _write


@pytest.fixture
def is_root() -> bool:
    """Root can read files regardless of mode bits."""
    return hasattr(os, "geteuid") and os.geteuid() == 0
