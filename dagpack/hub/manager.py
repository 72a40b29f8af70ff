"""Dual-channel subscription hub with fault-isolated delivery."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable
import warnings

from dagpack.diff.models import CHANNELS, Channel

Subscriber = Callable[[str], object]
Unsubscribe = Callable[[], None]

MAX_DIAGNOSTICS = 100


@dataclass(frozen=True, slots=True)
class SubscriberDiagnostic:
    channel: str
    subscriber_name: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "channel": self.channel,
            "subscriber_name": self.subscriber_name,
            "error_type": self.error_type,
            "message": self.message,
        }


class _Registration:
    __slots__ = ("callback",)

    def __init__(self, callback: Subscriber) -> None:
        self.callback = callback


@dataclass(slots=True)
class SubscriptionHub:
    """Delivers raw resource text to ``redraw`` and ``update`` subscribers.

    Callbacks run synchronously in registration order. A failing callback is
    recorded in ``diagnostics`` (the most recent ``MAX_DIAGNOSTICS`` only) and
    reported as a ``RuntimeWarning``; delivery continues with the next one.
    ``failure_count`` counts every failure since the hub was created.
    """

    diagnostics: deque[SubscriberDiagnostic] = field(
        default_factory=lambda: deque(maxlen=MAX_DIAGNOSTICS)
    )
    failure_count: int = 0
    _registrations: dict[str, list[_Registration]] = field(
        default_factory=lambda: {channel: [] for channel in CHANNELS}
    )

    def on_redraw(self, callback: Subscriber) -> Unsubscribe:
        return self.subscribe("redraw", callback)

    def on_update(self, callback: Subscriber) -> Unsubscribe:
        return self.subscribe("update", callback)

    def subscribe(self, channel: Channel, callback: Subscriber) -> Unsubscribe:
        registrations = self._channel(channel)
        registration = _Registration(callback)
        registrations.append(registration)

        def unsubscribe() -> None:
            for index, candidate in enumerate(registrations):
                if candidate is registration:
                    del registrations[index]
                    return

        return unsubscribe

    def publish(self, channel: Channel, raw_text: str) -> int:
        """Deliver ``raw_text`` to every subscriber of ``channel``; return successes."""
        delivered = 0
        for registration in tuple(self._channel(channel)):
            if self.deliver(channel, registration.callback, raw_text):
                delivered += 1
        return delivered

    def deliver(self, channel: Channel, callback: Subscriber, raw_text: str) -> bool:
        try:
            callback(raw_text)
        except Exception as error:
            diagnostic = SubscriberDiagnostic(
                channel=channel,
                subscriber_name=_subscriber_name(callback),
                error_type=error.__class__.__name__,
                message=str(error),
            )
            self.diagnostics.append(diagnostic)
            self.failure_count += 1
            warnings.warn(
                (
                    f"DagKit subscriber failure: channel={diagnostic.channel} "
                    f"subscriber={diagnostic.subscriber_name} "
                    f"error={diagnostic.error_type}: {diagnostic.message}"
                ),
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        return True

    def subscriber_count(self, channel: Channel | None = None) -> int:
        if channel is not None:
            return len(self._channel(channel))
        return sum(len(registrations) for registrations in self._registrations.values())

    def clear_diagnostics(self) -> None:
        self.diagnostics.clear()

    def _channel(self, channel: str) -> list[_Registration]:
        try:
            return self._registrations[channel]
        except KeyError:
            raise ValueError(f"Unknown channel: {channel}") from None


def _subscriber_name(callback: Subscriber) -> str:
    name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", None)
    return str(name or callback.__class__.__name__)
