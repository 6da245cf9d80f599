"""
Pytest configuration and shared fixtures for layeredconf tests.

This module provides reusable fixtures and test doubles used across
the test suite.
"""

from __future__ import annotations

from datetime import datetime, timedelta
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from layeredconf.logging import SilentLogger, set_global_logger
from layeredconf.overlay import materialize


class FakeClock:
    """Settable clock for cache expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.messages.append(("warning", prefix, message))

    def text(self, level: str | None = None) -> str:
        return "\n".join(m for lvl, _, m in self.messages if level in (None, lvl))


class RecordingOverlay:
    """Overlay double that applies fixed values and records every call."""

    def __init__(self, values: dict[str, Any], exclusions: tuple[str, ...] = ()) -> None:
        self.values = values
        self.exclusions = set(exclusions)
        self.map_calls = 0
        self.object_calls = 0

    def merge_map(self, config: dict[str, Any]) -> None:
        self.map_calls += 1
        config.update(self.values)

    def merge_object(self, config: dict[str, Any], shape: type) -> Any:
        self.object_calls += 1
        config.update(self.values)
        return materialize(config, shape)

    def is_exclusion_config_file(self, name: str) -> bool:
        return name in self.exclusions


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Keep the global logger silent between tests."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def external_dir(tmp_path: Path) -> Path:
    """Provide an empty externalized config directory."""
    path = tmp_path / "external"
    path.mkdir()
    return path


@pytest.fixture
def bundle_dir(tmp_path: Path) -> Path:
    """Provide an empty bundle root with a config/ folder."""
    path = tmp_path / "bundle"
    (path / "config").mkdir(parents=True)
    return path


@pytest.fixture
def write_config():
    """
    Factory fixture for writing config files.

    The format follows the extension: .json files are dumped as JSON,
    everything else as YAML. Strings are written verbatim.

    Usage:
        path = write_config(external_dir / "server.yml", {"port": 8080})
    """

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        elif path.suffix == ".json":
            path.write_text(json.dumps(data), encoding="utf-8")
        else:
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(data, f)
        return path

    return _write


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock set to mid-afternoon."""
    return FakeClock(datetime(2025, 3, 14, 15, 0, 0))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Provide a logger that records messages."""
    return RecordingLogger()


@pytest.fixture
def make_overlay():
    """
    Factory fixture for recording overlay doubles.

    Usage:
        overlay = make_overlay({"a": 1}, exclusions=("audit",))
    """
    return RecordingOverlay
