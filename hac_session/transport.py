"""HTTP transport used by the HAC session client."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

import aiohttp

from .const import DEFAULT_MAX_REDIRECTS, DEFAULT_TIMEOUT
from .exceptions import HACConnectionError

_LOGGER = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Status, headers and body of a portal response, whatever the status."""

    status: int
    url: str
    text: str = ""
    set_cookies: list[str] = field(default_factory=list)
    location: str | None = None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    @property
    def is_error(self) -> bool:
        return self.status >= 400


class Transport(Protocol):
    """Anything able to GET and POST on behalf of the scraper."""

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> TransportResponse:
        ...

    async def post(
        self,
        url: str,
        data: dict[str, str],
        headers: dict[str, str] | None = None,
        max_redirects: int = 0,
    ) -> TransportResponse:
        ...


class AiohttpTransport:
    """Transport backed by an aiohttp client session.

    The session should be created with ``aiohttp.DummyCookieJar()`` so that
    cookies only ever travel through the per-login ``CookieJar``.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport."""
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> TransportResponse:
        """Send a GET request."""
        return await self._request("GET", url, headers, max_redirects)

    async def post(
        self,
        url: str,
        data: dict[str, str],
        headers: dict[str, str] | None = None,
        max_redirects: int = 0,
    ) -> TransportResponse:
        """Send a form encoded POST request."""
        return await self._request("POST", url, headers, max_redirects, data=data)

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        max_redirects: int,
        **kwargs: Any,
    ) -> TransportResponse:
        """Perform a request and collect everything the caller may need."""
        if max_redirects > 0:
            kwargs["allow_redirects"] = True
            kwargs["max_redirects"] = max_redirects
        else:
            kwargs["allow_redirects"] = False

        try:
            async with self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            ) as response:
                text = await response.text(errors="replace")

                # Cookies set on intermediate redirect hops count too
                set_cookies: list[str] = []
                for hop in (*response.history, response):
                    set_cookies.extend(hop.headers.getall("Set-Cookie", []))

                _LOGGER.debug(
                    "%s %s -> %s (%d characters, %d cookies)",
                    method,
                    url,
                    response.status,
                    len(text),
                    len(set_cookies),
                )

                return TransportResponse(
                    status=response.status,
                    url=str(response.url),
                    text=text,
                    set_cookies=set_cookies,
                    location=response.headers.get("Location"),
                )

        except asyncio.TimeoutError as err:
            raise HACConnectionError(f"Timed out requesting {url}") from err
        except aiohttp.ClientError as err:
            raise HACConnectionError(f"Error requesting {url}: {err}") from err
