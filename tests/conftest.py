"""Shared test fixtures and marker registration."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest

from rom_sync._models import LocalFile

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

OWNER = "tester"


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


class StepClock:
    """Deterministic clock advancing by ``step`` on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def clock() -> StepClock:
    return StepClock(datetime(2024, 1, 17, 12, 30, tzinfo=timezone.utc))


@pytest.fixture
def roms_root(tmp_path: Path) -> Path:
    root = tmp_path / "roms"
    root.mkdir()
    return root


@pytest.fixture
def make_file(roms_root: Path) -> Callable[..., LocalFile]:
    """Create a file under ``roms_root`` and return its scanned record.

    ``mtime`` (a UTC datetime) pins the modification time when given.
    """

    def _make(rel: str, content: bytes = b"data", mtime: datetime | None = None) -> LocalFile:
        path = roms_root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(path, (ts, ts))
        return LocalFile.from_path(path, root=roms_root)

    return _make
