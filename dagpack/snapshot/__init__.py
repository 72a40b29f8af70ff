"""Status resource parsing for DagKit."""

from dagpack.snapshot.grammar import (
    COMMENT_MARKER,
    STATUS_KEY,
    THEME_PREAMBLE,
    CommentLine,
    iter_comment_lines,
    match_block_line,
    match_status_line,
    parse_instant,
)
from dagpack.snapshot.parser import (
    extract_diagram_body,
    parse_blocks,
    parse_snapshot,
    parse_timestamp,
)

__all__ = [
    "COMMENT_MARKER",
    "STATUS_KEY",
    "THEME_PREAMBLE",
    "CommentLine",
    "iter_comment_lines",
    "match_block_line",
    "match_status_line",
    "parse_instant",
    "extract_diagram_body",
    "parse_blocks",
    "parse_snapshot",
    "parse_timestamp",
]
