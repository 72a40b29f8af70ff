"""Out-of-band status writer used for DagKit watch demos and smoke tests.

Rewrites a status resource in place, advancing one block per tick, and can
serve it over local HTTP with caching disabled.
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
import threading
import time

DIAGRAM = """flowchart LR
    Fetch[Fetch sources] --> Clean[Clean records]
    Clean --> Train(Train model)
    Train --> Report[Publish report]
"""
BLOCKS = ("Fetch", "Clean", "Train", "Report")


def render_status(tick: int, *, now: datetime | None = None) -> str:
    """Status text after ``tick`` ticks: finished blocks, one running, rest waiting."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    lines = [DIAGRAM, f"%% Status: {stamp}"]
    for index, block_id in enumerate(BLOCKS):
        if index < tick:
            lines.append(f"%% {block_id}: Success ({3 * (index + 1)}s)")
        elif index == tick:
            lines.append(f"%% {block_id}: Running ({tick}s)")
        else:
            lines.append(f"%% {block_id}: Waiting")
    return "\n".join(lines) + "\n"


class _NoStoreHandler(SimpleHTTPRequestHandler):
    server_version = "DagKitExample/1.0"

    def end_headers(self) -> None:
        self.send_header("Cache-Control", "no-store")
        super().end_headers()

    def log_message(self, _format: str, *_args: object) -> None:
        return


def serve_directory(directory: Path, *, port: int = 0) -> ThreadingHTTPServer:
    handler = partial(_NoStoreHandler, directory=str(directory))
    server = ThreadingHTTPServer(("127.0.0.1", port), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out", type=Path, default=Path("runs/pipeline.mmd"))
    parser.add_argument("--ticks", type=int, default=len(BLOCKS) + 1)
    parser.add_argument("--tick-seconds", type=float, default=2.0)
    parser.add_argument("--serve", action="store_true", help="Serve the output directory over HTTP.")
    parser.add_argument("--port", type=int, default=0)
    args = parser.parse_args(argv)

    args.out.parent.mkdir(parents=True, exist_ok=True)
    server = serve_directory(args.out.parent, port=args.port) if args.serve else None
    if server is not None:
        host, port = server.server_address
        print(f"serving http://{host}:{port}/{args.out.name}", flush=True)

    try:
        for tick in range(args.ticks):
            args.out.write_text(render_status(tick), encoding="utf-8")
            time.sleep(max(0.0, args.tick_seconds))
    finally:
        if server is not None:
            server.shutdown()
            server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
