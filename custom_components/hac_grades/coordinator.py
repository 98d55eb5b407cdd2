"""Data update coordinator for HAC Grades."""
from datetime import timedelta
import logging
from typing import Any

import aiohttp

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from hac_session import AiohttpTransport, HACScraper

from .const import (
    DATA_COURSES,
    DATA_IDENTITY,
    DATA_LAST_UPDATED,
    DEFAULT_DATABASE,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TIMEOUT,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


class HACDataUpdateCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Class to manage fetching HAC data."""

    def __init__(
        self,
        hass: HomeAssistant,
        school_url: str,
        username: str,
        password: str,
        database: str = DEFAULT_DATABASE,
        scan_interval: timedelta = DEFAULT_SCAN_INTERVAL,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=scan_interval,
        )
        self.school_url = school_url
        self.username = username
        self.password = password
        self.database = database
        self._session: aiohttp.ClientSession | None = None

    def _scraper(self) -> HACScraper:
        """Build a scraper over a cookie-less session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())

        return HACScraper(
            self.school_url,
            self.username,
            self.password,
            AiohttpTransport(self._session, timeout=DEFAULT_TIMEOUT),
            database=self.database,
        )

    async def _async_update_data(self) -> dict[str, Any]:
        """Fetch data from HAC."""
        scraper = self._scraper()

        identity = await scraper.fetch_identity()
        if identity.error:
            raise UpdateFailed(f"Error fetching student name: {identity.error}")

        summaries = await scraper.fetch_course_summaries()
        if summaries.error:
            raise UpdateFailed(f"Error fetching courses: {summaries.error}")

        _LOGGER.info(
            "Successfully updated HAC data for %s: %d courses",
            self.username,
            len(summaries.courses),
        )

        return {
            DATA_IDENTITY: identity.as_dict(),
            DATA_COURSES: [course.as_dict() for course in summaries.courses],
            DATA_LAST_UPDATED: dt_util.utcnow(),
        }

    async def async_shutdown(self) -> None:
        """Close the session."""
        await super().async_shutdown()
        if self._session and not self._session.closed:
            await self._session.close()
