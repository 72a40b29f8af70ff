"""Progress view derived from resolved block states."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import math
from typing import Any

from dagpack.render.diagram import resolve_blocks
from dagpack.snapshot import parse_timestamp
from dagpack.staleness import DEFAULT_STALE_AFTER_SECONDS, is_stale, status_age, utc_now


@dataclass(frozen=True, slots=True)
class ProgressReport:
    completed: int
    total: int
    stale: bool
    age_seconds: float | None

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        # Half-up rounding, so 2 of 8 reads as 25 and 1 of 8 as 13.
        return int(math.floor(self.completed * 100 / self.total + 0.5))

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
            "stale": self.stale,
            "age_seconds": self.age_seconds,
        }


def compute_progress(
    raw: str,
    *,
    now: datetime | None = None,
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
) -> ProgressReport:
    """Finished (Success or Failed) blocks over all resolved blocks."""
    blocks = resolve_blocks(raw)
    age = status_age(parse_timestamp(raw), now if now is not None else utc_now())
    return ProgressReport(
        completed=sum(1 for block in blocks.values() if block.state.is_terminal),
        total=len(blocks),
        stale=is_stale(age, stale_after_seconds),
        age_seconds=age,
    )


def render_progress_bar(report: ProgressReport, *, width: int = 30) -> str:
    width = max(1, width)
    filled = report.percentage * width // 100
    bar = "#" * filled + "." * (width - filled)
    suffix = " (stale)" if report.stale else ""
    return f"[{bar}] {report.percentage:3d}% {report.completed}/{report.total}{suffix}"


def format_runtime(seconds: int | None) -> str:
    if seconds is None:
        return "-"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"
