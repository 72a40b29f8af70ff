"""Fixed-interval polling loop driving change detection and notification."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from dagpack.config import WatchConfig
from dagpack.core.models import Snapshot
from dagpack.diff import SnapshotDiff, diff_snapshots
from dagpack.hub import SubscriptionHub
from dagpack.poller.exceptions import FetchError
from dagpack.poller.fetch import FetchText, ResourceFetcher
from dagpack.snapshot import parse_snapshot

CycleStatus = Literal["notified", "unchanged", "fetch_failed", "skipped"]

_FETCH_ERRORS = (FetchError, httpx.HTTPError, OSError, asyncio.TimeoutError)


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of one fetch-and-process cycle."""

    status: CycleStatus
    diff: SnapshotDiff | None = None
    error_type: str | None = None
    error_message: str | None = None

    @property
    def redraw(self) -> bool:
        return self.diff is not None and self.diff.redraw

    @property
    def update(self) -> bool:
        return self.diff is not None and self.diff.update

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "diff": self.diff.to_dict() if self.diff is not None else None,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


class ResourcePoller:
    """Polls one status resource and publishes changes to a hub.

    All cycles run on the event loop that called ``start``. At most one cycle
    is in flight; a tick that finds one running is dropped, not queued.
    ``stop`` only cancels future ticks. A cycle already in flight completes and
    its result is published like any other.
    """

    def __init__(
        self,
        resource_url: str,
        *,
        hub: SubscriptionHub,
        config: WatchConfig | None = None,
        fetch_text: FetchText | None = None,
    ) -> None:
        self._resource_url = resource_url
        self._hub = hub
        self._config = config if config is not None else WatchConfig()
        self._fetch_text = fetch_text or ResourceFetcher(
            timeout_seconds=self._config.fetch_timeout_seconds
        )
        self._last_snapshot: Snapshot | None = None
        self._last_text: str | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._next_deadline = 0.0
        self._in_flight = False
        self._cycle_task: asyncio.Task[CycleResult] | None = None
        self._last_error: str | None = None
        self._counters = {
            "cycles_attempted": 0,
            "cycles_completed": 0,
            "fetch_failures": 0,
            "skipped_ticks": 0,
            "redraws": 0,
            "updates": 0,
        }

    @property
    def resource_url(self) -> str:
        return self._resource_url

    @property
    def config(self) -> WatchConfig:
        return self._config

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def last_snapshot(self) -> Snapshot | None:
        return self._last_snapshot

    @property
    def last_text(self) -> str | None:
        return self._last_text

    def start(self) -> None:
        """Run one cycle now and schedule the rest; no-op when already running."""
        if self._timer is not None:
            return
        loop = asyncio.get_running_loop()
        self._launch_cycle(loop)
        self._next_deadline = loop.time() + self._config.interval_seconds
        self._timer = loop.call_at(self._next_deadline, self._on_tick, loop)

    def stop(self) -> None:
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None

    async def poll_once(self) -> CycleResult:
        """Run a single cycle unless one is already in flight."""
        if self._in_flight:
            self._counters["skipped_ticks"] += 1
            return CycleResult(status="skipped")
        self._in_flight = True
        self._cycle_task = asyncio.get_running_loop().create_task(self._run_cycle())
        return await self._cycle_task

    async def wait_idle(self) -> None:
        """Wait for the in-flight cycle, if any, to finish."""
        task = self._cycle_task
        if task is not None and not task.done():
            await asyncio.shield(task)

    def metrics_payload(self) -> dict[str, Any]:
        return {
            **self._counters,
            "running": self.running,
            "in_flight": self._in_flight,
            "last_error": self._last_error,
        }

    def _on_tick(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._timer is None:
            return
        # Deadlines advance by whole intervals so slow cycles do not drift the schedule.
        self._next_deadline += self._config.interval_seconds
        now = loop.time()
        if self._next_deadline <= now:
            missed = int((now - self._next_deadline) // self._config.interval_seconds) + 1
            self._counters["skipped_ticks"] += missed
            self._next_deadline += missed * self._config.interval_seconds
        self._timer = loop.call_at(self._next_deadline, self._on_tick, loop)
        self._launch_cycle(loop)

    def _launch_cycle(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._in_flight:
            self._counters["skipped_ticks"] += 1
            return
        self._in_flight = True
        self._cycle_task = loop.create_task(self._run_cycle())

    async def _run_cycle(self) -> CycleResult:
        self._counters["cycles_attempted"] += 1
        try:
            try:
                raw_text = await self._fetch_text(self._resource_url)
            except _FETCH_ERRORS as error:
                self._counters["fetch_failures"] += 1
                self._last_error = f"{error.__class__.__name__}: {error}"
                return CycleResult(
                    status="fetch_failed",
                    error_type=error.__class__.__name__,
                    error_message=str(error),
                )
            return self._process(raw_text)
        finally:
            self._in_flight = False

    def _process(self, raw_text: str) -> CycleResult:
        snapshot = parse_snapshot(raw_text)
        diff = diff_snapshots(self._last_snapshot, snapshot)
        self._last_snapshot = snapshot
        self._last_text = raw_text
        self._last_error = None
        self._counters["cycles_completed"] += 1

        if diff.redraw:
            self._counters["redraws"] += 1
            self._hub.publish("redraw", raw_text)
        if diff.update:
            self._counters["updates"] += 1
            self._hub.publish("update", raw_text)
        return CycleResult(status="unchanged" if diff.identical else "notified", diff=diff)
