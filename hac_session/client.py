"""HAC (Home Access Center) client for scraping grade data."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import aiohttp
from bs4 import BeautifulSoup

from .auth import HACAuthenticator
from .cache import CacheKey, ResultCache
from .config import HACConfig
from .const import (
    ASSIGNMENTS_POPUP_PATH,
    DEFAULT_DATABASE,
    DEFAULT_MARKING_PERIOD,
    DEFAULT_USER_AGENT,
    ERROR_CLASS_NOT_FOUND,
    ERROR_LOGIN_FAILED,
    OP_COURSE_DETAIL,
    OP_COURSES,
    OP_IDENTITY,
    WEEK_VIEW_PATH,
)
from .exceptions import HACAuthError, HACError
from .extract import (
    extract_course_detail,
    extract_course_summaries,
    extract_student_name,
    find_course_row,
    normalize_class_name,
    parse_html,
)
from .models import CourseDetail, CourseSummaries, HACSession, StudentIdentity
from .transport import AiohttpTransport, Transport

_LOGGER = logging.getLogger(__name__)


class HACScraper:
    """Client to read a student's data from Home Access Center.

    Every public method logs in from scratch on a fresh session, fetches
    what it needs and returns a result object. Failures are reported in the
    result's ``error`` field; nothing is raised to the caller.
    """

    def __init__(
        self,
        school_url: str,
        username: str,
        password: str,
        transport: Transport,
        *,
        database: str = DEFAULT_DATABASE,
        user_agent: str = DEFAULT_USER_AGENT,
        marking_period: str = DEFAULT_MARKING_PERIOD,
        cache: ResultCache | None = None,
    ) -> None:
        """Initialize the HAC client."""
        self.school_url = school_url.rstrip("/")
        self.username = username
        self.password = password
        self.transport = transport
        self.database = database
        self.user_agent = user_agent
        self.marking_period = marking_period
        self.cache = cache

    @classmethod
    def from_config(
        cls,
        config: HACConfig,
        session: aiohttp.ClientSession,
        cache: ResultCache | None = None,
    ) -> "HACScraper":
        """Build a scraper talking through an aiohttp session.

        Without an explicit cache, a private one is created when the config
        has a positive ``cache_ttl``.
        """
        if cache is None and config.cache_ttl > 0:
            cache = ResultCache(ttl=config.cache_ttl)

        return cls(
            config.base_url,
            config.username,
            config.password,
            AiohttpTransport(session, timeout=config.timeout),
            database=config.database,
            user_agent=config.user_agent,
            marking_period=config.marking_period,
            cache=cache,
        )

    async def _login(self) -> HACAuthenticator:
        """Log in on a new session and return the authenticated handshake."""
        session = HACSession(self.school_url, self.username, self.password)
        authenticator = HACAuthenticator(
            session,
            self.transport,
            database=self.database,
            user_agent=self.user_agent,
        )
        await authenticator.login()
        return authenticator

    async def _get_page(self, auth: HACAuthenticator, path: str) -> BeautifulSoup:
        """Fetch an authenticated page and parse it."""
        response = await self.transport.get(auth.session.url(path), headers=auth.headers())
        auth.session.cookie_jar.merge(response.set_cookies)

        if response.is_error:
            raise HACError(f"{path} returned status {response.status}")

        return parse_html(response.text)

    def _cache_key(self, operation: str, *params: str) -> CacheKey:
        return ResultCache.make_key(
            operation, self.school_url, self.username, self.password, *params
        )

    def _cached(self, operation: str, *params: str) -> Any | None:
        if self.cache is None:
            return None
        return self.cache.get(self._cache_key(operation, *params))

    def _store(self, result: Any, operation: str, *params: str) -> None:
        if self.cache is not None and result.error is None:
            self.cache.set(self._cache_key(operation, *params), result)

    async def fetch_identity(self) -> StudentIdentity:
        """Fetch the logged in student's name."""
        cached = self._cached(OP_IDENTITY)
        if cached is not None:
            return cached

        try:
            auth = await self._login()
            soup = await self._get_page(auth, WEEK_VIEW_PATH)
            identity = StudentIdentity(name=extract_student_name(soup))
        except HACAuthError:
            return StudentIdentity(error=ERROR_LOGIN_FAILED)
        except Exception as err:
            _LOGGER.error("Error fetching student name: %s", err)
            return StudentIdentity(error=str(err))

        _LOGGER.info("Fetched student name for %s", self.username)
        self._store(identity, OP_IDENTITY)
        return identity

    async def fetch_course_summaries(self) -> CourseSummaries:
        """Fetch the course list with each course's current average."""
        cached = self._cached(OP_COURSES)
        if cached is not None:
            return cached

        try:
            auth = await self._login()
            soup = await self._get_page(auth, WEEK_VIEW_PATH)
            result = CourseSummaries(courses=extract_course_summaries(soup))
        except HACAuthError:
            return CourseSummaries(error=ERROR_LOGIN_FAILED)
        except Exception as err:
            _LOGGER.error("Error fetching course summaries: %s", err)
            return CourseSummaries(error=str(err))

        _LOGGER.info("Found %d courses for %s", len(result.courses), self.username)
        self._store(result, OP_COURSES)
        return result

    async def fetch_course_detail(
        self, class_name: str, marking_period: str | None = None
    ) -> CourseDetail:
        """Fetch assignments and category breakdown for one course."""
        marking_period = marking_period or self.marking_period
        class_name = normalize_class_name(class_name)

        cached = self._cached(OP_COURSE_DETAIL, class_name, marking_period)
        if cached is not None:
            return cached

        try:
            auth = await self._login()
            week_view = await self._get_page(auth, WEEK_VIEW_PATH)

            match = find_course_row(week_view, class_name)
            if match is None or match[1] is None:
                _LOGGER.warning("Could not find section key for %s", class_name)
                return CourseDetail(
                    class_name=class_name,
                    marking_period=marking_period,
                    error=ERROR_CLASS_NOT_FOUND,
                )

            summary, section_key = match
            _LOGGER.debug("Using section key %s for %s", section_key, class_name)

            soup = await self._get_page(
                auth, assignments_path(section_key, marking_period)
            )
            detail = extract_course_detail(soup, class_name, marking_period)
            detail.teacher_name = summary.teacher_name
            detail.section_key = section_key

        except HACAuthError:
            return CourseDetail(
                class_name=class_name,
                marking_period=marking_period,
                error=ERROR_LOGIN_FAILED,
            )
        except Exception as err:
            _LOGGER.error("Error fetching grades for %s: %s", class_name, err)
            return CourseDetail(
                class_name=class_name,
                marking_period=marking_period,
                error=str(err),
            )

        _LOGGER.info(
            "Fetched %d assignments for %s",
            len(detail.assignments),
            detail.class_name,
        )
        self._store(detail, OP_COURSE_DETAIL, class_name, marking_period)
        return detail


def assignments_path(section_key: str, marking_period: str) -> str:
    """Relative URL of the assignments popup for a section and marking period."""
    query = urlencode(
        {
            "section_key": section_key,
            "course_session": "1",
            "RC_RUN": marking_period,
            "MARK_TITLE": "MP",
            "MARK_TYPE": "MP",
            "SLOT_INDEX": "1",
        }
    )
    return f"{ASSIGNMENTS_POPUP_PATH}?{query}"
