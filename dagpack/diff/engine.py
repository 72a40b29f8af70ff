"""Three-tier change detection between consecutive snapshots."""

from __future__ import annotations

from typing import Any

from dagpack.core.models import Block, Snapshot
from dagpack.core.types import BlockState
from dagpack.diff.models import BlockChange, BlockField, SnapshotDiff

_MISSING = object()


def diff_snapshots(previous: Snapshot | None, current: Snapshot) -> SnapshotDiff:
    """Compare diagram text, block state and block runtime independently.

    With no previous snapshot every axis counts as changed. A block present on
    only one side is a change on both the state and the runtime axis.
    """
    if previous is None:
        return SnapshotDiff(
            initial=True,
            diagram_changed=True,
            state_changed=True,
            timestamp_changed=True,
            runtime_changed=True,
            changes=tuple(
                change
                for block_id in sorted(current.blocks)
                for change in _diff_block(block_id, None, current.blocks[block_id])
            ),
        )

    changes: list[BlockChange] = []
    for block_id in sorted(set(previous.blocks) | set(current.blocks)):
        changes.extend(
            _diff_block(block_id, previous.blocks.get(block_id), current.blocks.get(block_id))
        )

    return SnapshotDiff(
        initial=False,
        diagram_changed=previous.diagram_text != current.diagram_text,
        state_changed=any(change.field == "state" for change in changes),
        timestamp_changed=previous.timestamp != current.timestamp,
        runtime_changed=any(change.field == "runtime" for change in changes),
        changes=tuple(changes),
    )


def _diff_block(
    block_id: str,
    previous: Block | None,
    current: Block | None,
) -> list[BlockChange]:
    changes: list[BlockChange] = []
    field_names: tuple[BlockField, ...] = ("state", "runtime")
    for field_name in field_names:
        left = _field_value(previous, field_name)
        right = _field_value(current, field_name)
        if left is not _MISSING and right is not _MISSING and left == right:
            continue
        changes.append(
            BlockChange(
                block_id=block_id,
                field=field_name,
                previous=_render_value(left),
                current=_render_value(right),
            )
        )
    return changes


def _field_value(block: Block | None, field_name: BlockField) -> Any:
    if block is None:
        return _MISSING
    if field_name == "state":
        return block.state
    return block.runtime


def _render_value(value: Any) -> Any:
    if value is _MISSING:
        return "<MISSING>"
    if isinstance(value, BlockState):
        return value.value
    return value
