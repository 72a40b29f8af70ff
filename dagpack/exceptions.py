"""DagKit exceptions shared across subsystems."""


class DagKitError(Exception):
    """Base class for DagKit errors."""


class WatchConfigError(DagKitError, ValueError):
    """Watch configuration is malformed."""
