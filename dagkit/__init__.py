"""Stable public API surface for DagKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from dagpack.config import WatchConfig
from dagpack.core import Block, BlockState, Snapshot
from dagpack.diff import SnapshotDiff, diff_snapshots
from dagpack.exceptions import DagKitError, WatchConfigError
from dagpack.manager import DiagramManager, create_manager
from dagpack.poller import CycleResult, FetchError
from dagpack.render import ThemeConfig, compute_progress, resolve_blocks, style_diagram
from dagpack.snapshot import (
    extract_diagram_body,
    parse_blocks,
    parse_snapshot,
    parse_timestamp,
)
from dagpack.staleness import is_stale, raw_status_age, status_age

__version__ = "0.1.0"

ChannelName = Literal["redraw", "update"]


def snapshot_is_stale(
    snapshot: Snapshot,
    *,
    now: datetime,
    stale_after_seconds: float = 60.0,
) -> bool:
    """Whether a parsed snapshot's status declaration is at least ``stale_after_seconds`` old."""
    return is_stale(status_age(snapshot.timestamp, now), stale_after_seconds)


__all__ = [
    "__version__",
    "ChannelName",
    "Block",
    "BlockState",
    "Snapshot",
    "SnapshotDiff",
    "CycleResult",
    "DiagramManager",
    "WatchConfig",
    "ThemeConfig",
    "DagKitError",
    "WatchConfigError",
    "FetchError",
    "create_manager",
    "parse_snapshot",
    "parse_timestamp",
    "parse_blocks",
    "extract_diagram_body",
    "diff_snapshots",
    "status_age",
    "raw_status_age",
    "is_stale",
    "snapshot_is_stale",
    "resolve_blocks",
    "compute_progress",
    "style_diagram",
]
