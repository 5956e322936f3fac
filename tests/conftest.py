"""Pytest configuration and shared fixtures for repository test runs."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Callable, Sequence

import pytest

from core.config import RelayscopeConfig
from core.constants import RELAY_HEADER_LINE
from core.logging_config import configure_logging


def pytest_sessionstart() -> None:
    """Route structured logs to stderr at debug level during tests."""
    configure_logging("DEBUG")


@pytest.fixture
def config(tmp_path: Path) -> RelayscopeConfig:
    """Config whose data root lives under the test's tmp directory."""
    return replace(RelayscopeConfig.from_env(), data_root=tmp_path / "data")


@pytest.fixture
def write_snapshot(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a snapshot CSV with the standard header."""

    def _write(
        name: str,
        lines: Sequence[str],
        header: str = RELAY_HEADER_LINE,
    ) -> Path:
        snapshot_path = tmp_path / "snapshots" / name
        snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        snapshot_path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
        return snapshot_path

    return _write
