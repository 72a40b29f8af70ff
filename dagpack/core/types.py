"""Type definitions for DagKit core models."""

from __future__ import annotations

from enum import Enum


class BlockState(str, Enum):
    """Execution state of a workflow block."""

    WAITING = "Waiting"
    RUNNING = "Running"
    SUCCESS = "Success"
    FAILED = "Failed"

    @classmethod
    def parse(cls, token: str) -> "BlockState | None":
        """Return the state named by ``token`` or ``None`` for unknown tokens."""
        for state in cls:
            if state.value == token:
                return state
        return None

    @property
    def is_terminal(self) -> bool:
        return self in (BlockState.SUCCESS, BlockState.FAILED)
