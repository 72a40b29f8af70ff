"""Diagram manager: one poller and one subscription hub per status resource."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from dagpack.config import WatchConfig
from dagpack.core.models import Snapshot
from dagpack.diff.models import Channel
from dagpack.hub import Subscriber, SubscriptionHub, Unsubscribe
from dagpack.poller import CycleResult, FetchText, ResourcePoller


class DiagramManager:
    """Consumer-facing handle: lifecycle control plus ``on_redraw``/``on_update``.

    Usable as an async context manager, which starts polling on entry and on
    exit stops it and waits for the in-flight cycle.
    """

    def __init__(
        self,
        resource_url: str,
        *,
        config: WatchConfig | None = None,
        fetch_text: FetchText | None = None,
    ) -> None:
        self._config = config if config is not None else WatchConfig()
        self._hub = SubscriptionHub()
        self._poller = ResourcePoller(
            resource_url,
            hub=self._hub,
            config=self._config,
            fetch_text=fetch_text,
        )

    @property
    def config(self) -> WatchConfig:
        return self._config

    @property
    def hub(self) -> SubscriptionHub:
        return self._hub

    @property
    def resource_url(self) -> str:
        return self._poller.resource_url

    @property
    def running(self) -> bool:
        return self._poller.running

    @property
    def last_snapshot(self) -> Snapshot | None:
        return self._poller.last_snapshot

    def start(self) -> None:
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop()

    def on_redraw(self, callback: Subscriber) -> Unsubscribe:
        unsubscribe = self._hub.on_redraw(callback)
        last_text = self._poller.last_text
        if self._config.replay_on_subscribe and last_text is not None:
            self._hub.deliver("redraw", callback, last_text)
        return unsubscribe

    def on_update(self, callback: Subscriber) -> Unsubscribe:
        return self._hub.on_update(callback)

    def subscriber_count(self, channel: Channel | None = None) -> int:
        return self._hub.subscriber_count(channel)

    async def poll_once(self) -> CycleResult:
        return await self._poller.poll_once()

    async def wait_idle(self) -> None:
        await self._poller.wait_idle()

    def metrics_payload(self) -> dict[str, Any]:
        return {
            **self._poller.metrics_payload(),
            "subscribers": {
                "redraw": self._hub.subscriber_count("redraw"),
                "update": self._hub.subscriber_count("update"),
            },
            "subscriber_failures": self._hub.failure_count,
        }

    async def __aenter__(self) -> "DiagramManager":
        self.start()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        self.stop()
        await self.wait_idle()


def create_manager(
    resource_url: str,
    interval_seconds: float | None = None,
    *,
    config: WatchConfig | None = None,
    fetch_text: FetchText | None = None,
) -> DiagramManager:
    """Create a manager polling ``resource_url`` every ``interval_seconds``.

    Without an explicit ``config`` the settings come from ``DAGKIT_*``
    environment variables; ``interval_seconds`` overrides either source.
    """
    resolved = config if config is not None else WatchConfig.from_env()
    if interval_seconds is not None:
        resolved = replace(resolved, interval_seconds=interval_seconds)
    return DiagramManager(resource_url, config=resolved, fetch_text=fetch_text)
