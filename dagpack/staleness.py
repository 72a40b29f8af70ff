"""Status age and staleness evaluation.

A missing or unparseable status timestamp is not stale: staleness only
describes a timestamp that is present and old.
"""

from __future__ import annotations

from datetime import datetime, timezone

from dagpack.snapshot import parse_timestamp

DEFAULT_STALE_AFTER_SECONDS = 60.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def status_age(timestamp: datetime | None, now: datetime) -> float | None:
    """Seconds elapsed from ``timestamp`` to ``now``; negative when clocks disagree."""
    if timestamp is None:
        return None
    return (now - timestamp).total_seconds()


def is_stale(age: float | None, threshold_seconds: float = DEFAULT_STALE_AFTER_SECONDS) -> bool:
    return age is not None and age >= threshold_seconds


def raw_status_age(raw: str, now: datetime | None = None) -> float | None:
    """Age of the status declared in raw resource text."""
    return status_age(parse_timestamp(raw), now if now is not None else utc_now())
