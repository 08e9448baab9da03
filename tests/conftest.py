"""Shared fixtures for calendarseal tests."""

from collections.abc import Generator
from datetime import datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

import pytest

from calendarseal.calendar.models import Window
from calendarseal.config_loader import Config

TEST_KEY_HEX = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"


def pytest_configure(config: Any) -> None:
    """Register test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: End-to-end tests across modules")


def _make_ics(*vevents: str) -> str:
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//calendarseal tests//EN"]
    for body in vevents:
        lines.append("BEGIN:VEVENT")
        lines.extend(line.strip() for line in body.strip().splitlines() if line.strip())
        lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def make_ics() -> Callable[..., str]:
    """Build a minimal VCALENDAR (CRLF line endings) from VEVENT bodies."""
    return _make_ics


@pytest.fixture
def reference_zone() -> ZoneInfo:
    """Deterministic reference zone, independent of the host's local zone."""
    return ZoneInfo("America/Los_Angeles")


@pytest.fixture
def now(reference_zone: ZoneInfo) -> datetime:
    """Fixed 'current' time: Monday 2025-06-23 08:30 America/Los_Angeles."""
    return datetime(2025, 6, 23, 8, 30, tzinfo=reference_zone)


@pytest.fixture
def window(now: datetime) -> Window:
    return Window.forward(now, 7)


@pytest.fixture
def key_hex() -> str:
    return TEST_KEY_HEX


@pytest.fixture
def config(tmp_path: Any, key_hex: str) -> Config:
    return Config(
        feeds=["https://example.com/one.ics"],
        key_hex=key_hex,
        output_path=str(tmp_path / "docs" / "cal.aes"),
        timezone="America/Los_Angeles",
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Remove calendarseal environment variables so host settings never leak in."""
    for name in ("CAL_KEY", "CALENDARSEAL_TEST_TIME", "CALENDARSEAL_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    for name in ("OUTPUT", "WINDOW_DAYS", "TIMEZONE", "LOG_LEVEL"):
        monkeypatch.delenv(f"CALENDARSEAL_{name}", raising=False)
    for index in range(1, 10):
        monkeypatch.delenv(f"CALENDAR_{index}", raising=False)
    yield
