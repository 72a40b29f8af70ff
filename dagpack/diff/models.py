"""Data models for snapshot change detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Channel = Literal["redraw", "update"]
BlockField = Literal["state", "runtime"]

CHANNELS: tuple[Channel, ...] = ("redraw", "update")


@dataclass(frozen=True, slots=True)
class BlockChange:
    """A single per-block delta; ``"<MISSING>"`` marks an absent block."""

    block_id: str
    field: BlockField
    previous: Any
    current: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_id": self.block_id,
            "field": self.field,
            "previous": self.previous,
            "current": self.current,
        }


@dataclass(frozen=True, slots=True)
class SnapshotDiff:
    """Three-tier comparison of two consecutive snapshots."""

    initial: bool
    diagram_changed: bool
    state_changed: bool
    timestamp_changed: bool
    runtime_changed: bool
    changes: tuple[BlockChange, ...] = field(default_factory=tuple)

    @property
    def redraw(self) -> bool:
        return self.diagram_changed or self.state_changed or self.timestamp_changed

    @property
    def update(self) -> bool:
        return self.runtime_changed

    @property
    def identical(self) -> bool:
        return not self.redraw and not self.update

    def channels(self) -> tuple[Channel, ...]:
        """Channels to fire, redraw always ahead of update."""
        fired: list[Channel] = []
        if self.redraw:
            fired.append("redraw")
        if self.update:
            fired.append("update")
        return tuple(fired)

    def summary(self) -> dict[str, int]:
        counts = {"state": 0, "runtime": 0}
        for change in self.changes:
            counts[change.field] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial": self.initial,
            "diagram_changed": self.diagram_changed,
            "state_changed": self.state_changed,
            "timestamp_changed": self.timestamp_changed,
            "runtime_changed": self.runtime_changed,
            "channels": list(self.channels()),
            "summary": self.summary(),
            "changes": [change.to_dict() for change in self.changes],
        }
