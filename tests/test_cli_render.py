from pathlib import Path

from typer.testing import CliRunner

from dagpack.cli.app import app

PIPELINE = Path(__file__).resolve().parents[1] / "examples" / "diagrams" / "pipeline.mmd"


def test_render_prints_styled_mermaid() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["render", str(PIPELINE)])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("---\nconfig:\n")
    assert "Fetch[Fetch sources]:::success" in result.stdout
    assert "Stats[Summary stats]:::failed" in result.stdout
    assert "%% Status:" not in result.stdout
    # The sample status is long past, so the stale palette applies.
    assert "<img" not in result.stdout
    assert "classDef default fill:#f3f4f6" in result.stdout


def test_render_fresh_status_adds_spinner(tmp_path: Path) -> None:
    resource = tmp_path / "status.mmd"
    resource.write_text(
        "flowchart LR\n  Train(Train model)\n%% Status: 2026-03-01T12:00:00Z\n%% Train: Running (5s)\n",
        encoding="utf-8",
    )
    runner = CliRunner()

    result = runner.invoke(app, ["render", str(resource), "--stale-after", "1e12"])

    assert result.exit_code == 0, result.output
    assert "Train(<img src='data:image/svg+xml;base64," in result.stdout


def test_render_out_writes_file(tmp_path: Path) -> None:
    out_path = tmp_path / "nested" / "styled.mmd"
    runner = CliRunner()

    result = runner.invoke(app, ["render", str(PIPELINE), "--out", str(out_path)])

    assert result.exit_code == 0, result.output
    assert f"rendered: {out_path}" in result.stdout
    content = out_path.read_text(encoding="utf-8")
    assert content.endswith("\n")
    assert "classDef success" in content


def test_render_missing_resource_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["render", str(tmp_path / "missing.mmd")])

    assert result.exit_code == 1
    assert "render failed:" in result.output
