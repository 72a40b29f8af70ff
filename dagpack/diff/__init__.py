"""Change detection subsystem for DagKit."""

from dagpack.diff.engine import diff_snapshots
from dagpack.diff.formatting import render_block_changes, render_diff_summary
from dagpack.diff.models import CHANNELS, BlockChange, Channel, SnapshotDiff

__all__ = [
    "CHANNELS",
    "Channel",
    "BlockChange",
    "SnapshotDiff",
    "diff_snapshots",
    "render_block_changes",
    "render_diff_summary",
]
