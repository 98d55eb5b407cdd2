"""Login handshake for Home Access Center."""
from __future__ import annotations

from enum import Enum
import logging
from urllib.parse import urljoin

from .const import (
    DEFAULT_DATABASE,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_USER_AGENT,
    LOGIN_PATH,
    PASSWORD_FIELD,
    TOKEN_FIELD,
    USERNAME_FIELD,
    VERIFICATION_OPTION,
)
from .exceptions import HACAuthError
from .extract import extract_token, parse_html
from .models import HACSession
from .transport import Transport, TransportResponse

_LOGGER = logging.getLogger(__name__)


class LoginState(Enum):
    """Steps of the login handshake."""

    START = "start"
    TOKEN_FETCHED = "token_fetched"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class HACAuthenticator:
    """Drive one session through the HAC login handshake.

    Token fetch, credential POST without redirects, then at most one
    followed redirect. Cookies from every response are merged into the
    session's jar, which is ready for data requests once ``login`` returns.
    Transport errors propagate as ``HACConnectionError``.
    """

    def __init__(
        self,
        session: HACSession,
        transport: Transport,
        database: str = DEFAULT_DATABASE,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the authenticator."""
        self.session = session
        self.transport = transport
        self.database = database
        self.user_agent = user_agent
        self.state = LoginState.START

    @property
    def login_url(self) -> str:
        return self.session.url(LOGIN_PATH)

    def headers(self, referer: str | None = None) -> dict[str, str]:
        """Request headers carrying the session's cookies."""
        headers = {"User-Agent": self.user_agent}
        cookie = self.session.cookie_jar.serialize()
        if cookie:
            headers["Cookie"] = cookie
        if referer:
            headers["Referer"] = referer
        return headers

    def _fail(self, reason: str) -> HACAuthError:
        self.state = LoginState.FAILED
        _LOGGER.warning("Login failed for %s: %s", self.session.username, reason)
        return HACAuthError(reason)

    def _absorb(self, response: TransportResponse) -> None:
        self.session.cookie_jar.merge(response.set_cookies)

    async def login(self) -> None:
        """Run the handshake, raising HACAuthError if it does not succeed."""
        self.state = LoginState.START
        _LOGGER.debug("Logging in to %s", self.login_url)

        token = await self._fetch_token()
        response = await self._submit_credentials(token)
        await self._follow_redirect(response)

        self.state = LoginState.AUTHENTICATED
        _LOGGER.debug(
            "Login complete for %s (cookies: %d)",
            self.session.username,
            len(self.session.cookie_jar),
        )

    async def _fetch_token(self) -> str:
        response = await self.transport.get(self.login_url, headers=self.headers())
        self._absorb(response)

        if response.is_error:
            raise self._fail(f"login page returned status {response.status}")

        token = extract_token(parse_html(response.text))
        if not token:
            raise self._fail("no anti-forgery token on login page")

        self.state = LoginState.TOKEN_FETCHED
        return token

    async def _submit_credentials(self, token: str) -> TransportResponse:
        form = {
            TOKEN_FIELD: token,
            "Database": self.database,
            "VerificationOption": VERIFICATION_OPTION,
            USERNAME_FIELD: self.session.username,
            PASSWORD_FIELD: self.session.password,
            "tempUN": "",
            "tempPW": "",
        }
        headers = self.headers(referer=self.login_url)
        headers["Content-Type"] = "application/x-www-form-urlencoded"

        response = await self.transport.post(
            self.login_url, data=form, headers=headers, max_redirects=0
        )
        self._absorb(response)

        if response.is_error:
            raise self._fail(f"credential submission returned status {response.status}")

        self.state = LoginState.CREDENTIALS_SUBMITTED
        return response

    async def _follow_redirect(self, response: TransportResponse) -> None:
        if not (response.is_redirect and response.location):
            _LOGGER.debug("No redirect after login (status %s)", response.status)
            return

        redirect_url = urljoin(self.login_url, response.location)
        _LOGGER.debug("Following login redirect to %s", redirect_url)

        redirected = await self.transport.get(
            redirect_url,
            headers=self.headers(referer=self.login_url),
            max_redirects=DEFAULT_MAX_REDIRECTS,
        )
        self._absorb(redirected)

        if redirected.is_error:
            raise self._fail(f"login redirect returned status {redirected.status}")
