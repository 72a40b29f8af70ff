import asyncio
from datetime import datetime, timezone
import inspect
from pathlib import Path

import dagkit


def test_public_api_symbol_list_is_explicit_and_stable() -> None:
    assert dagkit.__all__ == [
        "__version__",
        "ChannelName",
        "Block",
        "BlockState",
        "Snapshot",
        "SnapshotDiff",
        "CycleResult",
        "DiagramManager",
        "WatchConfig",
        "ThemeConfig",
        "DagKitError",
        "WatchConfigError",
        "FetchError",
        "create_manager",
        "parse_snapshot",
        "parse_timestamp",
        "parse_blocks",
        "extract_diagram_body",
        "diff_snapshots",
        "status_age",
        "raw_status_age",
        "is_stale",
        "snapshot_is_stale",
        "resolve_blocks",
        "compute_progress",
        "style_diagram",
    ]
    for name in dagkit.__all__:
        assert hasattr(dagkit, name), name


def test_create_manager_signature() -> None:
    signature = inspect.signature(dagkit.create_manager)
    parameters = list(signature.parameters.values())

    assert [parameter.name for parameter in parameters] == [
        "resource_url",
        "interval_seconds",
        "config",
        "fetch_text",
    ]
    assert parameters[0].kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
    assert parameters[1].kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
    assert parameters[2].kind is inspect.Parameter.KEYWORD_ONLY
    assert dagkit.create_manager.__doc__ is not None


def test_watch_workflow_works_via_public_api_only(tmp_path: Path) -> None:
    resource = tmp_path / "status.mmd"
    resource.write_text(
        "flowchart LR\n  A[One] --> B[Two]\n%% Status: 2026-03-01T12:00:00Z\n%% A: Success (2s)\n",
        encoding="utf-8",
    )
    manager = dagkit.create_manager(
        str(resource),
        config=dagkit.WatchConfig(interval_seconds=0.05),
    )
    redraws: list[str] = []
    manager.on_redraw(redraws.append)

    asyncio.run(manager.poll_once())

    assert len(redraws) == 1
    snapshot = dagkit.parse_snapshot(redraws[0])
    assert snapshot == manager.last_snapshot
    assert snapshot.blocks["A"].state is dagkit.BlockState.SUCCESS
    assert dagkit.resolve_blocks(redraws[0])["B"].state is dagkit.BlockState.WAITING
    assert dagkit.compute_progress(redraws[0], now=snapshot.timestamp).percentage == 50
    assert dagkit.snapshot_is_stale(
        snapshot,
        now=datetime(2026, 3, 1, 12, 1, tzinfo=timezone.utc),
    )
    assert not dagkit.snapshot_is_stale(
        snapshot,
        now=datetime(2026, 3, 1, 12, 0, 59, tzinfo=timezone.utc),
    )


def test_error_hierarchy() -> None:
    assert issubclass(dagkit.WatchConfigError, dagkit.DagKitError)
    assert issubclass(dagkit.WatchConfigError, ValueError)
    assert issubclass(dagkit.FetchError, dagkit.DagKitError)
