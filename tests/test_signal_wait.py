from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from app_packager.api.exceptions import SignalWaitExhaustedError
from app_packager.core.signal_wait import BoundedWait

from conftest import no_sleep


def test_max_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedWait(max_attempts=0)


def test_until_reports_successful_attempt() -> None:
    checks = iter([False, False, True])
    wait = BoundedWait(poll_interval=0, max_attempts=5, sleep=no_sleep)

    assert asyncio.run(wait.until(lambda: next(checks))) == 3


def test_until_sleeps_before_every_check() -> None:
    slept = []

    async def record_sleep(seconds: float) -> None:
        slept.append(seconds)

    wait = BoundedWait(poll_interval=0.5, max_attempts=4, sleep=record_sleep)

    assert asyncio.run(wait.until(lambda: False)) == 0
    assert slept == [0.5, 0.5, 0.5, 0.5]


def test_file_appearing_during_wait(tmp_path: Path) -> None:
    signal = tmp_path / "dependent_image.txt"
    calls = []

    async def create_on_second_sleep(seconds: float) -> None:
        calls.append(seconds)
        if len(calls) == 2:
            signal.write_text("redis:7\n")

    wait = BoundedWait(poll_interval=0, max_attempts=3, sleep=create_on_second_sleep)

    assert asyncio.run(wait.for_file(signal)) is True


def test_missing_file_is_soft_by_default(tmp_path: Path) -> None:
    wait = BoundedWait(poll_interval=0, max_attempts=2, sleep=no_sleep)

    assert asyncio.run(wait.for_file(tmp_path / "never")) is False


def test_strict_wait_raises(tmp_path: Path) -> None:
    wait = BoundedWait(poll_interval=0, max_attempts=2, sleep=no_sleep)

    with pytest.raises(SignalWaitExhaustedError) as excinfo:
        asyncio.run(wait.for_file(tmp_path / "never", strict=True))
    assert excinfo.value.attempts == 2
