"""Minimal cookie jar for a single HAC login session."""
from __future__ import annotations

from collections.abc import Iterable
import logging

_LOGGER = logging.getLogger(__name__)


class CookieJar:
    """Name to value mapping fed from Set-Cookie headers.

    Attributes such as Path or Expires are dropped; the jar lives only as
    long as the session that owns it.
    """

    def __init__(self) -> None:
        """Initialize an empty jar."""
        self._cookies: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._cookies)

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def get(self, name: str) -> str | None:
        """Return the current value of a cookie."""
        return self._cookies.get(name)

    def merge(self, set_cookie_headers: Iterable[str] | str | None) -> None:
        """Upsert the name=value token of each Set-Cookie header."""
        if not set_cookie_headers:
            return
        if isinstance(set_cookie_headers, str):
            set_cookie_headers = [set_cookie_headers]

        for header in set_cookie_headers:
            name_value = header.split(";", 1)[0]
            name, sep, value = name_value.partition("=")
            name = name.strip()
            if not name or not sep:
                _LOGGER.debug("Ignoring malformed Set-Cookie header")
                continue
            self._cookies[name] = value.strip()

    def serialize(self) -> str:
        """Return the jar as a Cookie header value."""
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())
