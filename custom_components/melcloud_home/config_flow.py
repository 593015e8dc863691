"""Config flow for MELCloud Home integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from homeassistant import config_entries
from homeassistant.const import CONF_ACCESS_TOKEN, CONF_SCAN_INTERVAL
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession
import voluptuous as vol

from .client import MELCloudHomeAuthError, MELCloudHomeClient, MELCloudHomeError
from .const import (
    CONF_INCLUDE_FAN_SPEED,
    CONF_INCLUDE_SWING,
    DEFAULT_INCLUDE_FAN_SPEED,
    DEFAULT_INCLUDE_SWING,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
    MAX_SCAN_INTERVAL,
    MIN_SCAN_INTERVAL,
)


STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ACCESS_TOKEN): str,
    }
)


class MELCloudHomeConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for MELCloud Home."""

    VERSION = 1

    async def _async_validate(self, access_token: str) -> tuple[dict[str, Any] | None, dict[str, str]]:
        """Fetch the account context with the token, returning it or form errors."""
        client = MELCloudHomeClient(async_get_clientsession(self.hass), access_token)
        try:
            return await client.async_get_context(), {}
        except MELCloudHomeAuthError:
            return None, {"base": "invalid_auth"}
        except MELCloudHomeError:
            return None, {"base": "cannot_connect"}
        except Exception:  # noqa: BLE001
            return None, {"base": "unknown"}

    async def async_step_user(self, user_input: dict | None = None) -> FlowResult:
        """Handle user step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            context, errors = await self._async_validate(user_input[CONF_ACCESS_TOKEN])
            if context is not None:
                account_id = str(context.get("id") or context.get("email") or "")
                if account_id:
                    await self.async_set_unique_id(account_id)
                    self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=context.get("email") or "MELCloud Home",
                    data={CONF_ACCESS_TOKEN: user_input[CONF_ACCESS_TOKEN]},
                    options={
                        CONF_SCAN_INTERVAL: DEFAULT_SCAN_INTERVAL,
                        CONF_INCLUDE_FAN_SPEED: DEFAULT_INCLUDE_FAN_SPEED,
                        CONF_INCLUDE_SWING: DEFAULT_INCLUDE_SWING,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_reauth(self, entry_data: Mapping[str, Any]) -> FlowResult:
        """Start reauthentication after the token was rejected."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(self, user_input: dict | None = None) -> FlowResult:
        """Ask for a new access token."""
        errors: dict[str, str] = {}
        entry = self.hass.config_entries.async_get_entry(self.context["entry_id"])
        assert entry is not None

        if user_input is not None:
            context, errors = await self._async_validate(user_input[CONF_ACCESS_TOKEN])
            if context is not None:
                account_id = str(context.get("id") or context.get("email") or "")
                if entry.unique_id and account_id and account_id != entry.unique_id:
                    errors["base"] = "different_account"
                else:
                    return self.async_update_reload_and_abort(
                        entry,
                        data={CONF_ACCESS_TOKEN: user_input[CONF_ACCESS_TOKEN]},
                    )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry) -> config_entries.OptionsFlow:
        """Return the options flow."""
        return MELCloudHomeOptionsFlow()


class MELCloudHomeOptionsFlow(config_entries.OptionsFlow):
    """Handle MELCloud Home options."""

    async def async_step_init(self, user_input: dict | None = None) -> FlowResult:
        """Handle options step."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        options = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                    ): vol.All(vol.Coerce(int), vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL)),
                    vol.Optional(
                        CONF_INCLUDE_FAN_SPEED,
                        default=options.get(CONF_INCLUDE_FAN_SPEED, DEFAULT_INCLUDE_FAN_SPEED),
                    ): bool,
                    vol.Optional(
                        CONF_INCLUDE_SWING,
                        default=options.get(CONF_INCLUDE_SWING, DEFAULT_INCLUDE_SWING),
                    ): bool,
                }
            ),
        )
