from datetime import datetime, timedelta, timezone

import pytest

from dagpack.core import Block, BlockState
from dagpack.snapshot import (
    extract_diagram_body,
    iter_comment_lines,
    parse_blocks,
    parse_snapshot,
    parse_timestamp,
)

RESOURCE = """flowchart LR
    Read[Read input] --> Transform(Transform)
    Transform --> Write[Write output]

%% Status: 2026-03-01T12:00:00Z
%% Read: Success (12s)
%% Transform: Running (5s)
%% Write: Waiting
"""


def test_parse_timestamp_reads_status_line_as_utc_instant() -> None:
    assert parse_timestamp(RESOURCE) == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_timestamp_accepts_explicit_offset() -> None:
    raw = "graph TD\n%% Status: 2026-03-01T14:00:00+02:00\n"

    parsed = parse_timestamp(raw)

    assert parsed == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(hours=2)


def test_parse_timestamp_without_offset_is_timezone_aware() -> None:
    parsed = parse_timestamp("%% Status: 2026-03-01T12:00:00\n")

    assert parsed is not None
    assert parsed.tzinfo is not None


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "flowchart LR\n    A[One]\n",
        "%% Status: not-a-date\n",
        "%% Status:\n",
        "%% Status: 2026-13-45T99:00:00Z\n",
    ],
)
def test_parse_timestamp_fails_softly(raw: str) -> None:
    assert parse_timestamp(raw) is None


def test_parse_timestamp_last_status_line_wins() -> None:
    raw = "%% Status: 2026-03-01T12:00:00Z\n%% Status: 2026-03-01T12:05:00Z\n"

    assert parse_timestamp(raw) == datetime(2026, 3, 1, 12, 5, tzinfo=timezone.utc)


def test_parse_blocks_reads_state_and_runtime() -> None:
    blocks = parse_blocks(RESOURCE)

    assert blocks == {
        "Read": Block(id="Read", state=BlockState.SUCCESS, runtime=12),
        "Transform": Block(id="Transform", state=BlockState.RUNNING, runtime=5),
        "Write": Block(id="Write", state=BlockState.WAITING, runtime=None),
    }


def test_parse_blocks_last_occurrence_wins() -> None:
    raw = "%% Read: Running (5s)\n%% Read: Success (12s)\n"

    assert parse_blocks(raw)["Read"] == Block(id="Read", state=BlockState.SUCCESS, runtime=12)


@pytest.mark.parametrize(
    "line",
    [
        "%% Read: Done (5s)",
        "%% Read: running (5s)",
        "%% Read: Running (5.5s)",
        "%% Read: Running (-3s)",
        "%% Read: Running (abc)",
        "%% Read: Running 5s",
        "%% Read: Running (5s) extra",
        "%%Read: Running (5s)",
        "Read: Running (5s)",
        "%% Read: Running (1234567890s)",
        "%% Read: Running (" + "9" * 5000 + "s)",
        "%% Lëse: Running (5s)",
    ],
)
def test_parse_blocks_rejects_malformed_lines(line: str) -> None:
    assert parse_blocks(line + "\n") == {}


def test_parse_blocks_malformed_repeat_does_not_override_valid_line() -> None:
    raw = "%% Read: Success (12s)\n%% Read: Finished (13s)\n"

    assert parse_blocks(raw)["Read"].state is BlockState.SUCCESS


def test_parse_blocks_never_treats_status_as_block() -> None:
    assert "Status" not in parse_blocks(RESOURCE)


def test_parse_blocks_leaves_unmentioned_nodes_absent() -> None:
    raw = "flowchart LR\n    A[One] --> B[Two]\n%% A: Success (1s)\n"

    blocks = parse_blocks(raw)

    assert set(blocks) == {"A"}


def test_iter_comment_lines_tolerates_crlf_and_indentation() -> None:
    raw = "flowchart LR\r\n  %% Read: Success (2s)\r\n%% Status: 2026-03-01T12:00:00Z\r\n"

    keys = [line.key for line in iter_comment_lines(raw)]

    assert keys == ["Read", "Status"]
    assert parse_blocks(raw)["Read"].runtime == 2


def test_extract_diagram_body_strips_comments_and_trims() -> None:
    body = extract_diagram_body(RESOURCE)

    assert body == (
        "flowchart LR\n"
        "    Read[Read input] --> Transform(Transform)\n"
        "    Transform --> Write[Write output]"
    )
    assert "%%" not in body


@pytest.mark.parametrize(
    "raw",
    [
        RESOURCE,
        "",
        "\n\n  %% Status: 2026-03-01T12:00:00Z\n",
        "  %% leading comment\nflowchart TD\n  A[x]\n",
        "---\nconfig:\n  theme: 'base'\n---\n\nflowchart TD\n  A[x]\n%% A: Running\n",
        "flowchart TD\r\n  A[x]\r\n%%{init: {}}%%\r\n",
    ],
)
def test_extract_diagram_body_is_idempotent(raw: str) -> None:
    once = extract_diagram_body(raw)

    assert extract_diagram_body(once) == once


def test_extract_diagram_body_keeps_theme_preamble() -> None:
    raw = "---\nconfig:\n  theme: 'base'\n---\n\nflowchart TD\n  A[x]\n"

    assert extract_diagram_body(raw).startswith("---\nconfig:")


def test_parse_snapshot_is_deterministic_and_read_only() -> None:
    first = parse_snapshot(RESOURCE)
    second = parse_snapshot(RESOURCE)

    assert first == second
    assert first.timestamp == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    with pytest.raises(TypeError):
        first.blocks["Read"] = Block(id="Read")  # type: ignore[index]


def test_snapshot_to_dict_is_json_ready() -> None:
    payload = parse_snapshot(RESOURCE).to_dict()

    assert payload["timestamp"] == "2026-03-01T12:00:00+00:00"
    assert payload["blocks"]["Transform"] == {
        "id": "Transform",
        "state": "Running",
        "runtime": 5,
    }
