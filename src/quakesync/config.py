"""Runtime configuration for quakesync."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from quakesync import _constants
from quakesync.exceptions import QuakeSyncConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_env(env_key: str, raw: str, parser: Callable[[str], Any]) -> Any:
    try:
        return parser(raw)
    except ValueError as exc:
        raise QuakeSyncConfigError(f"{env_key}={raw!r} is not a valid value") from exc


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Connector configuration.

    Parameters
    ----------
    feed_url : str
        GeoJSON feed polled on every pass.
    connect_timeout : float
        Seconds allowed to establish the feed connection.
    read_timeout : float
        Seconds allowed between two reads of the feed response.
    sync_interval : float
        Seconds to wait after a pass completes before starting the next one.
    database_url : str
        SQLAlchemy URL of the event store.
    continent : str
        Placeholder written to every event's ``continent`` column.
    list_limit : int
        Number of rows returned by the listing endpoint (max 200).
    http_enabled : bool
        Serve the listing endpoint alongside the scheduler.
    http_host : str
        Listing endpoint bind address.
    http_port : int
        Listing endpoint port.
    """

    feed_url: str = _constants.FEED_URL
    connect_timeout: float = _constants.CONNECT_TIMEOUT
    read_timeout: float = _constants.READ_TIMEOUT
    sync_interval: float = _constants.SYNC_INTERVAL
    database_url: str = _constants.DATABASE_URL
    continent: str = _constants.CONTINENT_PLACEHOLDER
    list_limit: int = _constants.LIST_LIMIT_MAX
    http_enabled: bool = True
    http_host: str = _constants.HTTP_HOST
    http_port: int = _constants.HTTP_PORT

    def __post_init__(self) -> None:
        if not self.feed_url:
            raise QuakeSyncConfigError("feed_url must be set")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise QuakeSyncConfigError("connect_timeout and read_timeout must be positive")
        if self.sync_interval <= 0:
            raise QuakeSyncConfigError("sync_interval must be positive")
        if not 1 <= self.list_limit <= _constants.LIST_LIMIT_MAX:
            raise QuakeSyncConfigError(f"list_limit must be between 1 and {_constants.LIST_LIMIT_MAX}")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from ``QUAKESYNC_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        QuakeSyncConfigError
            If a variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "QUAKESYNC_FEED_URL": ("feed_url", str),
            "QUAKESYNC_CONNECT_TIMEOUT": ("connect_timeout", float),
            "QUAKESYNC_READ_TIMEOUT": ("read_timeout", float),
            "QUAKESYNC_SYNC_INTERVAL": ("sync_interval", float),
            "QUAKESYNC_DATABASE_URL": ("database_url", str),
            "QUAKESYNC_CONTINENT": ("continent", str),
            "QUAKESYNC_LIST_LIMIT": ("list_limit", int),
            "QUAKESYNC_HTTP_HOST": ("http_host", str),
            "QUAKESYNC_HTTP_PORT": ("http_port", int),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, parser) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _parse_env(env_key, val, parser)

        if "http_enabled" not in overrides:
            config_kwargs["http_enabled"] = _env_bool(env.get("QUAKESYNC_HTTP_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
