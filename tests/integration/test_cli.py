"""Tests for the calendarseal command line."""

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable

import pytest

from calendarseal.__main__ import main

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, Any, None]:
    root = logging.getLogger()
    package = logging.getLogger("calendarseal")
    saved = (root.level, package.level)
    yield
    root.setLevel(saved[0])
    package.setLevel(saved[1])


@pytest.fixture
def feed_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    make_ics: Callable[..., str],
    key_hex: str,
) -> Path:
    """Point CALENDAR_1 at a local feed and pin the clock; returns the feed path."""
    feed = tmp_path / "team.ics"
    feed.write_text(
        make_ics(
            """
            UID:standup
            SUMMARY:Standup
            DTSTART;TZID=America/Los_Angeles:20250624T090000
            DTEND;TZID=America/Los_Angeles:20250624T091500
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CALENDAR_1", str(feed))
    monkeypatch.setenv("CAL_KEY", key_hex)
    monkeypatch.setenv("CALENDARSEAL_TEST_TIME", "2025-06-23T08:30:00-07:00")
    return feed


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_main_when_configured_then_builds_and_decrypts(
    feed_env: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    output = tmp_path / "site" / "cal.aes"

    status = _run(["--output", str(output), "--timezone", "America/Los_Angeles"])

    assert status == 0
    assert output.exists()
    assert f"Successfully encrypted and saved 1 events to {output}" in caplog.text
    assert capsys.readouterr().out == ""

    assert _run(["decrypt", str(output)]) == 0
    document = json.loads(capsys.readouterr().out)
    assert document["events"] == [
        {
            "title": "Standup",
            "start": "2025-06-24T09:00:00-07:00",
            "end": "2025-06-24T09:15:00-07:00",
        }
    ]
    assert document["dateCreated"] == "2025-06-23T08:30:00-07:00"


def test_main_when_days_option_then_window_shortened(
    feed_env: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    output = tmp_path / "cal.aes"

    # Standup starts 24.5 hours after the pinned clock
    status = _run(["--output", str(output), "--days", "1", "--timezone", "UTC"])

    assert status == 0
    assert "saved 0 events" in caplog.text


def test_main_when_key_missing_then_exit_code_two(
    feed_env: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("CAL_KEY")

    assert _run(["--output", str(tmp_path / "cal.aes")]) == 2
    assert not (tmp_path / "cal.aes").exists()


def test_main_when_feed_unreadable_then_exit_code_one(
    feed_env: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    feed_env.unlink()

    assert _run(["--output", str(tmp_path / "cal.aes"), "--timezone", "UTC"]) == 1
    assert "FeedFetchError" in caplog.text


def test_main_when_decrypting_with_wrong_artifact_then_exit_code_one(
    feed_env: Path, tmp_path: Path
) -> None:
    bogus = tmp_path / "bogus.aes"
    bogus.write_bytes(b"not an artifact")

    assert _run(["decrypt", str(bogus)]) == 1


def test_main_when_days_not_positive_then_argparse_error(feed_env: Path) -> None:
    assert _run(["--days", "0"]) == 2


def test_main_when_decrypt_config_option_then_key_read_from_file(
    feed_env: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    key_hex: str,
) -> None:
    output = tmp_path / "cal.aes"
    assert _run(["--output", str(output)]) == 0
    capsys.readouterr()

    key_file = tmp_path / "key.yaml"
    key_file.write_text(f"key: '{key_hex}'\n", encoding="utf-8")
    monkeypatch.delenv("CAL_KEY")

    assert _run(["decrypt", str(output), "--config", str(key_file)]) == 0
    assert json.loads(capsys.readouterr().out)["events"][0]["title"] == "Standup"
