"""Line grammar for status comments embedded in a diagram resource.

Status lines are Mermaid comments::

    %% Status: 2026-03-01T12:00:00Z
    %% Load: Success (12s)
    %% Train: Running (5s)
    %% Report: Waiting

Every line is first tokenized into a ``CommentLine`` (marker, key, value) and
then matched against the status or block production. Lines that fail a
production are rejected as a whole; nothing is coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import re
from typing import Iterator

from dagpack.core.models import Block
from dagpack.core.types import BlockState

COMMENT_MARKER = "%%"
STATUS_KEY = "Status"
THEME_PREAMBLE = "---\nconfig:"

_COMMENT_LINE_RE = re.compile(r"^%%\s+(?P<key>\w+):[ \t]*(?P<value>.*?)\s*$", re.ASCII)
_BLOCK_VALUE_RE = re.compile(
    r"^(?P<state>\w+)(?:[ \t]+\((?P<seconds>[0-9]{1,9})s\))?$",
    re.ASCII,
)


@dataclass(frozen=True, slots=True)
class CommentLine:
    """A ``%% <key>: <value>`` line, before any production is applied."""

    key: str
    value: str


def is_comment_line(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_MARKER)


def iter_comment_lines(raw: str) -> Iterator[CommentLine]:
    """Yield every keyed comment line in document order."""
    for line in raw.splitlines():
        if not is_comment_line(line):
            continue
        match = _COMMENT_LINE_RE.match(line.strip())
        if match is None:
            continue
        yield CommentLine(key=match.group("key"), value=match.group("value"))


def match_status_line(line: CommentLine) -> datetime | None:
    """Return the declared status instant, or ``None`` if the line is not a valid one."""
    if line.key != STATUS_KEY:
        return None
    return parse_instant(line.value)


def match_block_line(line: CommentLine) -> Block | None:
    """Return the block declared by ``line``, or ``None`` if it does not match."""
    if line.key == STATUS_KEY:
        return None
    match = _BLOCK_VALUE_RE.match(line.value)
    if match is None:
        return None
    state = BlockState.parse(match.group("state"))
    if state is None:
        return None
    seconds = match.group("seconds")
    return Block(
        id=line.key,
        state=state,
        runtime=int(seconds) if seconds is not None else None,
    )


def parse_instant(value: str) -> datetime | None:
    """Parse an ISO-8601 instant; values without an offset are local time."""
    candidate = value.strip()
    if not candidate:
        return None
    if candidate[-1] in "zZ":
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
    except (ValueError, OverflowError, OSError):
        return None
    return parsed
