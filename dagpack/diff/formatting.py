"""CLI-friendly rendering for snapshot diffs."""

from __future__ import annotations

from dagpack.diff.models import SnapshotDiff


def render_diff_summary(diff: SnapshotDiff) -> str:
    channels = ",".join(diff.channels()) or "none"
    summary = diff.summary()
    return (
        f"channels={channels} diagram={_flag(diff.diagram_changed)} "
        f"state={summary['state']} runtime={summary['runtime']} "
        f"timestamp={_flag(diff.timestamp_changed)}"
    )


def render_block_changes(diff: SnapshotDiff, *, max_changes: int = 8) -> str:
    if not diff.changes:
        return "no block changes"

    lines: list[str] = []
    for change in diff.changes[:max_changes]:
        lines.append(f"  {change.block_id}.{change.field}: {change.previous} -> {change.current}")
    if len(diff.changes) > max_changes:
        lines.append("  ... additional changes omitted")
    return "\n".join(lines)


def _flag(value: bool) -> str:
    return "changed" if value else "same"
