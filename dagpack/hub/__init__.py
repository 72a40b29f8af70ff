"""Subscription hub for DagKit consumers."""

from dagpack.hub.manager import (
    MAX_DIAGNOSTICS,
    Subscriber,
    SubscriberDiagnostic,
    SubscriptionHub,
    Unsubscribe,
)

__all__ = [
    "MAX_DIAGNOSTICS",
    "Subscriber",
    "SubscriberDiagnostic",
    "SubscriptionHub",
    "Unsubscribe",
]
