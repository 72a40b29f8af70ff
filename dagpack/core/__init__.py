"""Core models for DagKit snapshots."""

from dagpack.core.models import Block, Snapshot
from dagpack.core.types import BlockState

__all__ = [
    "Block",
    "Snapshot",
    "BlockState",
]
