"""Watch configuration value object and environment resolution."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import math
import os
from typing import Any, Mapping

from dagpack.exceptions import WatchConfigError
from dagpack.staleness import DEFAULT_STALE_AFTER_SECONDS

INTERVAL_ENV_VAR = "DAGKIT_INTERVAL_SECONDS"
STALE_AFTER_ENV_VAR = "DAGKIT_STALE_AFTER_SECONDS"
FETCH_TIMEOUT_ENV_VAR = "DAGKIT_FETCH_TIMEOUT_SECONDS"
REPLAY_ON_SUBSCRIBE_ENV_VAR = "DAGKIT_REPLAY_ON_SUBSCRIBE"

_DEFAULT_INTERVAL_SECONDS = 1.0
_DEFAULT_FETCH_TIMEOUT_SECONDS = 5.0
_MAX_FETCH_TIMEOUT_SECONDS = 120.0
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class WatchConfig:
    """Polling and staleness settings passed to a diagram manager."""

    interval_seconds: float = _DEFAULT_INTERVAL_SECONDS
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS
    fetch_timeout_seconds: float = _DEFAULT_FETCH_TIMEOUT_SECONDS
    replay_on_subscribe: bool = False

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise WatchConfigError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )
        if self.stale_after_seconds < 0:
            raise WatchConfigError(
                f"stale_after_seconds must be non-negative, got {self.stale_after_seconds}"
            )
        if self.fetch_timeout_seconds <= 0:
            raise WatchConfigError(
                f"fetch_timeout_seconds must be positive, got {self.fetch_timeout_seconds}"
            )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "WatchConfig":
        """Build a config from ``DAGKIT_*`` variables, then apply explicit overrides.

        Unparseable variables fall back to their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls(
            interval_seconds=_resolve_positive_float(
                env.get(INTERVAL_ENV_VAR), _DEFAULT_INTERVAL_SECONDS
            ),
            stale_after_seconds=_resolve_non_negative_float(
                env.get(STALE_AFTER_ENV_VAR), DEFAULT_STALE_AFTER_SECONDS
            ),
            fetch_timeout_seconds=min(
                _resolve_positive_float(
                    env.get(FETCH_TIMEOUT_ENV_VAR), _DEFAULT_FETCH_TIMEOUT_SECONDS
                ),
                _MAX_FETCH_TIMEOUT_SECONDS,
            ),
            replay_on_subscribe=_resolve_bool(env.get(REPLAY_ON_SUBSCRIBE_ENV_VAR), False),
        )
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise WatchConfigError(f"Unknown watch config field(s): {', '.join(unknown)}")
        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(config, **applied) if applied else config

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval_seconds": self.interval_seconds,
            "stale_after_seconds": self.stale_after_seconds,
            "fetch_timeout_seconds": self.fetch_timeout_seconds,
            "replay_on_subscribe": self.replay_on_subscribe,
        }


def _resolve_positive_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    if not math.isfinite(parsed) or parsed <= 0:
        return default
    return parsed


def _resolve_non_negative_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    if not math.isfinite(parsed) or parsed < 0:
        return default
    return parsed


def _resolve_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return default
