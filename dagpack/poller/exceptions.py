"""Poller subsystem exceptions."""

from dagpack.exceptions import DagKitError


class PollerError(DagKitError):
    """Base class for poller errors."""


class FetchError(PollerError):
    """The status resource could not be fetched."""
