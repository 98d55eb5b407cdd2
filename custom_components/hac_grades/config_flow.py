"""Config flow for HAC Grades integration."""
from typing import Any
import logging

import aiohttp
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME, CONF_SCAN_INTERVAL
from homeassistant.core import HomeAssistant, callback
from homeassistant.data_entry_flow import FlowResult

from hac_session import AiohttpTransport, HACScraper
from hac_session.config import base_url

from .const import (
    CONF_DATABASE,
    CONF_SCHOOL_URL,
    DEFAULT_DATABASE,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TIMEOUT,
    DOMAIN,
    SCAN_INTERVAL_OPTIONS,
)

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_SCHOOL_URL): str,
        vol.Required(CONF_USERNAME): str,
        vol.Required(CONF_PASSWORD): str,
        vol.Optional(CONF_DATABASE, default=DEFAULT_DATABASE): str,
    }
)


async def validate_input(hass: HomeAssistant, data: dict[str, Any]) -> dict[str, Any]:
    """Validate the user input allows us to connect."""
    try:
        school_url = base_url(data[CONF_SCHOOL_URL])
    except vol.Invalid as err:
        raise ValueError(f"Invalid school URL: {err}") from err

    session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())
    try:
        scraper = HACScraper(
            school_url,
            data[CONF_USERNAME],
            data[CONF_PASSWORD],
            AiohttpTransport(session, timeout=DEFAULT_TIMEOUT),
            database=data.get(CONF_DATABASE, DEFAULT_DATABASE),
        )

        # Logging in and reading the banner is enough to validate credentials
        identity = await scraper.fetch_identity()
        if identity.error:
            raise ValueError(f"Unable to login: {identity.error}")

        return {
            "title": f"HAC - {identity.name or data[CONF_USERNAME]}",
            CONF_SCHOOL_URL: school_url,
        }

    finally:
        await session.close()


class HACGradesConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for HAC Grades."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                info = await validate_input(self.hass, user_input)
            except ValueError as err:
                _LOGGER.error("Validation failed: %s", err)
                errors["base"] = "cannot_connect"
            except Exception as err:  # pylint: disable=broad-except
                _LOGGER.exception("Unexpected exception during config flow validation: %s", err)
                errors["base"] = "unknown"
            else:
                user_input[CONF_SCHOOL_URL] = info[CONF_SCHOOL_URL]
                await self.async_set_unique_id(
                    f"{user_input[CONF_SCHOOL_URL]}_{user_input[CONF_USERNAME]}"
                )
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=info["title"],
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Get the options flow for this handler."""
        return HACGradesOptionsFlowHandler(config_entry)


class HACGradesOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options for HAC Grades."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        """Initialize options flow."""
        self._entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=self._entry.options.get(
                            CONF_SCAN_INTERVAL,
                            int(DEFAULT_SCAN_INTERVAL.total_seconds() / 3600),
                        ),
                    ): vol.In(SCAN_INTERVAL_OPTIONS),
                }
            ),
        )
