"""Configuration for the HAC session client."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    DEFAULT_CACHE_TTL,
    DEFAULT_DATABASE,
    DEFAULT_MARKING_PERIOD,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)

CONF_BASE_URL = "base_url"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_DATABASE = "database"
CONF_TIMEOUT = "timeout"
CONF_USER_AGENT = "user_agent"
CONF_MARKING_PERIOD = "marking_period"
CONF_CACHE_TTL = "cache_ttl"


def base_url(value: Any) -> str:
    """Validate a portal URL and strip any trailing slash."""
    url = vol.Url()(str(value).strip())
    return url.rstrip("/")


def non_empty(value: Any) -> str:
    value = str(value)
    if not value:
        raise vol.Invalid("value must not be empty")
    return value


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_BASE_URL): base_url,
        vol.Required(CONF_USERNAME): non_empty,
        vol.Required(CONF_PASSWORD): non_empty,
        vol.Optional(CONF_DATABASE, default=DEFAULT_DATABASE): vol.Coerce(str),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=1)
        ),
        vol.Optional(CONF_USER_AGENT, default=DEFAULT_USER_AGENT): str,
        vol.Optional(CONF_MARKING_PERIOD, default=DEFAULT_MARKING_PERIOD): vol.Coerce(str),
        vol.Optional(CONF_CACHE_TTL, default=DEFAULT_CACHE_TTL): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
    }
)


@dataclass(frozen=True)
class HACConfig:
    """Validated settings for one user's scraper."""

    base_url: str
    username: str
    password: str
    database: str = DEFAULT_DATABASE
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    marking_period: str = DEFAULT_MARKING_PERIOD
    cache_ttl: float = DEFAULT_CACHE_TTL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HACConfig":
        """Validate raw settings, raising vol.Invalid on bad input."""
        return cls(**CONFIG_SCHEMA(dict(data)))

    def __repr__(self) -> str:
        return (
            f"HACConfig(base_url={self.base_url!r}, username={self.username!r}, "
            f"database={self.database!r})"
        )
