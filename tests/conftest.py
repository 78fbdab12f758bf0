"""Shared test fixtures."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

import pytest

from samwise.config import AppConfig, ConfigStore
from samwise.events import EventBus


@pytest.fixture
def event_bus() -> EventBus:
    """Fresh event bus for each test."""
    bus = EventBus()
    yield bus
    bus.clear()


@pytest.fixture
def config() -> AppConfig:
    """Default config for testing."""
    return AppConfig()


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigStore:
    """Config store backed by a file in tmp_path."""
    return ConfigStore(tmp_path / "config" / "config.json")


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing an executable shell script into tmp_path/bin."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        path = bin_dir / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
