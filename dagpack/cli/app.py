import asyncio
from dataclasses import dataclass
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version as package_version
import json
from pathlib import Path
from typing import Any

import typer

from dagpack.config import WatchConfig
from dagpack.core import Snapshot
from dagpack.diff import diff_snapshots, render_diff_summary
from dagpack.exceptions import WatchConfigError
from dagpack.manager import create_manager
from dagpack.poller import FetchError, ResourceFetcher
from dagpack.render import (
    compute_progress,
    format_runtime,
    render_progress_bar,
    resolve_blocks,
    style_diagram,
)
from dagpack.snapshot import parse_blocks, parse_snapshot
from dagpack.staleness import status_age, utc_now

app = typer.Typer(help="DagKit CLI")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("dagkit")
    except PackageNotFoundError:
        from dagkit import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show DagKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _report_failure(
    command: str,
    message: str,
    *,
    json_output: bool,
    resource: str,
    code: int,
) -> None:
    text = f"{command} failed: {message}"
    if json_output:
        _echo_json(
            {
                "status": "error",
                "exit_code": code,
                "message": text,
                "resource": resource,
            }
        )
    else:
        _echo(text, err=True)


def _resolve_config(
    command: str,
    resource: str,
    *,
    json_output: bool,
    **overrides: Any,
) -> WatchConfig:
    try:
        return WatchConfig.from_env(**overrides)
    except WatchConfigError as error:
        _report_failure(command, str(error), json_output=json_output, resource=resource, code=2)
        raise typer.Exit(code=2) from error


def _fetch_once(command: str, resource: str, config: WatchConfig, *, json_output: bool) -> str:
    fetcher = ResourceFetcher(timeout_seconds=config.fetch_timeout_seconds)
    try:
        return asyncio.run(fetcher(resource))
    except FetchError as error:
        _report_failure(command, str(error), json_output=json_output, resource=resource, code=1)
        raise typer.Exit(code=1) from error


def _status_payload(raw: str, config: WatchConfig, now: datetime) -> dict[str, Any]:
    snapshot = parse_snapshot(raw)
    progress = compute_progress(raw, now=now, stale_after_seconds=config.stale_after_seconds)
    return {
        "timestamp": snapshot.timestamp.isoformat() if snapshot.timestamp is not None else None,
        "age_seconds": status_age(snapshot.timestamp, now),
        "stale": progress.stale,
        "progress": progress.to_dict(),
        "blocks": [block.to_dict() for block in resolve_blocks(raw).values()],
    }


def _render_status_view(raw: str, config: WatchConfig, now: datetime) -> str:
    snapshot = parse_snapshot(raw)
    progress = compute_progress(raw, now=now, stale_after_seconds=config.stale_after_seconds)

    if snapshot.timestamp is None:
        header = "status: no timestamp"
    else:
        freshness = "stale" if progress.stale else "fresh"
        header = (
            f"status: {snapshot.timestamp.isoformat()} "
            f"age={progress.age_seconds:.1f}s {freshness}"
        )

    lines = [header, render_progress_bar(progress)]
    blocks = list(resolve_blocks(raw).values())
    width = max((len(block.id) for block in blocks), default=0)
    for block in blocks:
        lines.append(
            f"  {block.id:<{width}}  {block.state.value:<7}  {format_runtime(block.runtime)}"
        )
    return "\n".join(lines)


def _render_runtime_view(raw: str) -> str:
    lines = ["runtime:"]
    for block_id, block in sorted(parse_blocks(raw).items()):
        if block.runtime is None:
            continue
        lines.append(f"  {block_id} {format_runtime(block.runtime)}")
    return "\n".join(lines)


@app.command()
def status(
    resource: str = typer.Argument(..., help="URL or path of the status resource."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable status output.",
    ),
    stale_after: float | None = typer.Option(
        None,
        "--stale-after",
        help="Seconds after which the status declaration counts as stale.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Fetch timeout in seconds.",
    ),
) -> None:
    """Fetch the status resource once and print block states."""
    config = _resolve_config(
        "status",
        resource,
        json_output=json_output,
        stale_after_seconds=stale_after,
        fetch_timeout_seconds=timeout,
    )
    raw = _fetch_once("status", resource, config, json_output=json_output)
    now = utc_now()

    if json_output:
        _echo_json(
            {
                **_status_payload(raw, config, now),
                "status": "ok",
                "exit_code": 0,
                "resource": resource,
            }
        )
        return

    _echo(_render_status_view(raw, config, now))


@app.command()
def render(
    resource: str = typer.Argument(..., help="URL or path of the status resource."),
    out: Path | None = typer.Option(
        None,
        "--out",
        help="Write the styled Mermaid text here instead of stdout.",
    ),
    stale_after: float | None = typer.Option(
        None,
        "--stale-after",
        help="Seconds after which the status declaration counts as stale.",
    ),
) -> None:
    """Print Mermaid text styled by block state, ready for the layout engine."""
    config = _resolve_config("render", resource, json_output=False, stale_after_seconds=stale_after)
    raw = _fetch_once("render", resource, config, json_output=False)
    styled = style_diagram(raw, stale_after_seconds=config.stale_after_seconds)

    if out is None:
        typer.echo(styled, color=False)
        return

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(styled + "\n", encoding="utf-8")
    _echo(f"rendered: {out}")


@app.command()
def watch(
    resource: str = typer.Argument(..., help="URL or path of the status resource."),
    interval: float | None = typer.Option(
        None,
        "--interval",
        help="Polling interval in seconds.",
    ),
    stale_after: float | None = typer.Option(
        None,
        "--stale-after",
        help="Seconds after which the status declaration counts as stale.",
    ),
    max_cycles: int | None = typer.Option(
        None,
        "--max-cycles",
        min=1,
        help="Stop after this many poll cycles (default: run until interrupted).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit one JSON event per notification.",
    ),
) -> None:
    """Poll the status resource and print redraw and runtime updates."""
    config = _resolve_config(
        "watch",
        resource,
        json_output=json_output,
        interval_seconds=interval,
        stale_after_seconds=stale_after,
    )

    try:
        metrics = asyncio.run(
            _watch(resource, config, max_cycles=max_cycles, json_output=json_output)
        )
    except KeyboardInterrupt:
        _echo("watch stopped")
        return

    if json_output:
        _echo_json({"event": "summary", "status": "ok", "exit_code": 0, "metrics": metrics})
        return
    _echo(
        "watch stopped: "
        f"cycles={metrics['cycles_completed']} "
        f"fetch_failures={metrics['fetch_failures']} "
        f"redraws={metrics['redraws']} updates={metrics['updates']}"
    )


async def _watch(
    resource: str,
    config: WatchConfig,
    *,
    max_cycles: int | None,
    json_output: bool,
) -> dict[str, Any]:
    manager = create_manager(resource, config=config)
    previous_snapshot: Snapshot | None = None

    def on_redraw(raw: str) -> None:
        nonlocal previous_snapshot
        now = utc_now()
        if json_output:
            _echo_json({"event": "redraw", **_status_payload(raw, config, now)})
            return
        snapshot = parse_snapshot(raw)
        diff = diff_snapshots(previous_snapshot, snapshot)
        previous_snapshot = snapshot
        _echo(f"redraw: {render_diff_summary(diff)}")
        _echo(_render_status_view(raw, config, now))

    def on_update(raw: str) -> None:
        if json_output:
            runtimes = {block_id: block.runtime for block_id, block in parse_blocks(raw).items()}
            _echo_json({"event": "update", "runtimes": runtimes})
            return
        _echo(_render_runtime_view(raw))

    manager.on_redraw(on_redraw)
    manager.on_update(on_update)

    poll_step = min(0.05, config.interval_seconds)
    async with manager:
        while max_cycles is None or manager.metrics_payload()["cycles_attempted"] < max_cycles:
            await asyncio.sleep(poll_step)
    return manager.metrics_payload()


def main() -> None:
    app()
