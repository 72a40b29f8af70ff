from datetime import datetime, timezone
import importlib.util
import json
from pathlib import Path
import subprocess
import sys
from types import ModuleType

import requests
from typer.testing import CliRunner

from dagpack.cli.app import app
from dagpack.snapshot import parse_snapshot

APP_PATH = Path(__file__).resolve().parents[1] / "examples" / "apps" / "simulate_pipeline.py"


def _load_example() -> ModuleType:
    spec = importlib.util.spec_from_file_location("simulate_pipeline", APP_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_simulator_writes_a_watchable_status_resource(tmp_path: Path) -> None:
    out_path = tmp_path / "runs" / "pipeline.mmd"

    result = subprocess.run(
        [
            sys.executable,
            str(APP_PATH),
            "--out",
            str(out_path),
            "--ticks",
            "2",
            "--tick-seconds",
            "0",
        ],
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr

    runner = CliRunner()
    status = runner.invoke(app, ["status", str(out_path), "--json"])
    assert status.exit_code == 0, status.output
    payload = json.loads(status.stdout)
    assert [(block["id"], block["state"]) for block in payload["blocks"]] == [
        ("Fetch", "Success"),
        ("Clean", "Running"),
        ("Train", "Waiting"),
        ("Report", "Waiting"),
    ]
    assert payload["progress"]["percentage"] == 25


def test_render_status_advances_one_block_per_tick() -> None:
    module = _load_example()
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    snapshot = parse_snapshot(module.render_status(3, now=now))

    assert snapshot.timestamp == now
    assert [block.state.value for block in snapshot.blocks.values()] == [
        "Success",
        "Success",
        "Success",
        "Running",
    ]
    assert snapshot.blocks["Clean"].runtime == 6


def test_served_status_resource_is_not_cacheable(tmp_path: Path) -> None:
    module = _load_example()
    (tmp_path / "pipeline.mmd").write_text(module.render_status(0), encoding="utf-8")
    server = module.serve_directory(tmp_path)
    host, port = server.server_address

    try:
        response = requests.get(f"http://{host}:{port}/pipeline.mmd", timeout=5)
    finally:
        server.shutdown()
        server.server_close()

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-store"
    assert "%% Fetch: Running (0s)" in response.text
