"""Status resource polling for DagKit."""

from dagpack.poller.engine import CycleResult, CycleStatus, ResourcePoller
from dagpack.poller.exceptions import FetchError, PollerError
from dagpack.poller.fetch import (
    NO_STORE_HEADERS,
    FetchText,
    ResourceFetcher,
    fetch_resource_text,
    is_local_resource,
)

__all__ = [
    "CycleResult",
    "CycleStatus",
    "ResourcePoller",
    "FetchError",
    "PollerError",
    "FetchText",
    "NO_STORE_HEADERS",
    "ResourceFetcher",
    "fetch_resource_text",
    "is_local_resource",
]
