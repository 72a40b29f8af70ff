"""Pure parse functions turning resource text into a ``Snapshot``."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from dagpack.core.models import Block, Snapshot
from dagpack.snapshot.grammar import (
    STATUS_KEY,
    is_comment_line,
    iter_comment_lines,
    match_block_line,
    match_status_line,
)


def parse_timestamp(raw: str) -> datetime | None:
    """Return the instant declared by the ``Status`` line, or ``None``.

    A missing status line and an unparseable value both yield ``None``. When
    the line is repeated, the last one wins.
    """
    timestamp: datetime | None = None
    for line in iter_comment_lines(raw):
        if line.key == STATUS_KEY:
            timestamp = match_status_line(line)
    return timestamp


def parse_blocks(raw: str) -> Mapping[str, Block]:
    """Return the blocks declared in status comments, last occurrence winning.

    Blocks that are never mentioned are absent; callers apply their own default.
    """
    blocks: dict[str, Block] = {}
    for line in iter_comment_lines(raw):
        block = match_block_line(line)
        if block is None:
            continue
        blocks[block.id] = block
    return blocks


def extract_diagram_body(raw: str) -> str:
    """Strip comment lines and surrounding whitespace from the resource text.

    Theme front matter is not a comment and passes through untouched, so
    extracting an already extracted body returns it unchanged.
    """
    kept = [line for line in raw.splitlines() if not is_comment_line(line)]
    return "\n".join(kept).strip()


def parse_snapshot(raw: str) -> Snapshot:
    return Snapshot(
        diagram_text=extract_diagram_body(raw),
        blocks=parse_blocks(raw),
        timestamp=parse_timestamp(raw),
    )
