from datetime import datetime, timedelta, timezone

import pytest

from dagpack.staleness import (
    DEFAULT_STALE_AFTER_SECONDS,
    is_stale,
    raw_status_age,
    status_age,
)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_status_age_is_none_without_timestamp() -> None:
    assert status_age(None, T0) is None


def test_status_age_is_not_clamped_when_clock_runs_behind() -> None:
    assert status_age(T0, T0 - timedelta(seconds=5)) == -5.0


def test_default_threshold_is_sixty_seconds() -> None:
    assert DEFAULT_STALE_AFTER_SECONDS == 60.0


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (timedelta(seconds=0), False),
        (timedelta(seconds=59, milliseconds=999), False),
        (timedelta(seconds=60), True),
        (timedelta(minutes=10), True),
        (timedelta(seconds=-30), False),
    ],
)
def test_staleness_boundary(elapsed: timedelta, expected: bool) -> None:
    assert is_stale(status_age(T0, T0 + elapsed)) is expected


def test_missing_timestamp_is_never_stale() -> None:
    assert is_stale(None) is False
    assert is_stale(None, 0.0) is False


def test_custom_threshold() -> None:
    assert is_stale(10.0, 10.0) is True
    assert is_stale(9.5, 10.0) is False


def test_raw_status_age_reads_status_line() -> None:
    raw = "flowchart LR\n%% Status: 2026-03-01T12:00:00Z\n"

    assert raw_status_age(raw, T0 + timedelta(seconds=90)) == 90.0
    assert raw_status_age("flowchart LR\n", T0) is None
