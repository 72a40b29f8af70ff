"""Core data models for DagKit blocks and status snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from dagpack.core.types import BlockState


@dataclass(frozen=True, slots=True)
class Block:
    """One node of the workflow graph with its reported state."""

    id: str
    state: BlockState = BlockState.WAITING
    runtime: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.state, BlockState):
            raise ValueError(f"Unsupported block state: {self.state!r}")
        if self.runtime is not None and self.runtime < 0:
            raise ValueError(f"Block runtime must be non-negative: {self.runtime}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.value,
            "runtime": self.runtime,
        }


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable result of parsing one fetch of the status resource."""

    diagram_text: str
    blocks: Mapping[str, Block] = field(default_factory=dict)
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        # Freeze the mapping so a retained snapshot cannot be edited in place.
        object.__setattr__(self, "blocks", MappingProxyType(dict(self.blocks)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "diagram_text": self.diagram_text,
            "timestamp": self.timestamp.isoformat() if self.timestamp is not None else None,
            "blocks": {
                block_id: self.blocks[block_id].to_dict() for block_id in sorted(self.blocks)
            },
        }
