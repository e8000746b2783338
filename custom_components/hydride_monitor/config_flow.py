"""Config flow for Hydride Monitor integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import (
    DOMAIN,
    CONF_PRESSURE_SENSOR,
    CONF_TEMPERATURE_SENSOR,
    CONF_FALLBACK_TEMPERATURE,
    CONF_MAX_CAPACITY,
    CONF_DISCHARGE_RATE,
    CONF_READING_BUFFER_SIZE,
    CONF_READING_DEBOUNCE_SECONDS,
    DEFAULT_FALLBACK_TEMPERATURE,
    DEFAULT_MAX_CAPACITY,
    DEFAULT_DISCHARGE_RATE,
    DEFAULT_READING_BUFFER_SIZE,
    DEFAULT_READING_DEBOUNCE_SECONDS,
)

_LOGGER = logging.getLogger(__name__)

CONFIG_DEFAULTS: dict[str, Any] = {
    CONF_FALLBACK_TEMPERATURE: DEFAULT_FALLBACK_TEMPERATURE,
    CONF_MAX_CAPACITY: DEFAULT_MAX_CAPACITY,
    CONF_DISCHARGE_RATE: DEFAULT_DISCHARGE_RATE,
    CONF_READING_BUFFER_SIZE: DEFAULT_READING_BUFFER_SIZE,
    CONF_READING_DEBOUNCE_SECONDS: DEFAULT_READING_DEBOUNCE_SECONDS,
}


def _build_schema(
    defaults: dict[str, Any], include_pressure_sensor: bool = True
) -> vol.Schema:
    """Build the shared schema for config and options flows.

    The pressure sensor identifies the entry and its entities, so the options
    flow leaves it out.
    """
    defaults = {**CONFIG_DEFAULTS, **defaults}
    fields: dict[Any, Any] = {}
    if include_pressure_sensor:
        fields[
            vol.Required(
                CONF_PRESSURE_SENSOR,
                default=defaults.get(CONF_PRESSURE_SENSOR, vol.UNDEFINED),
            )
        ] = selector.EntitySelector(selector.EntitySelectorConfig(domain="sensor"))
    fields.update(
        {
            vol.Optional(
                CONF_TEMPERATURE_SENSOR,
                description={
                    "suggested_value": defaults.get(CONF_TEMPERATURE_SENSOR)
                },
            ): selector.EntitySelector(
                selector.EntitySelectorConfig(domain="sensor")
            ),
            vol.Optional(
                CONF_FALLBACK_TEMPERATURE,
                default=defaults[CONF_FALLBACK_TEMPERATURE],
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=-40,
                    max=80,
                    step=0.5,
                    mode=selector.NumberSelectorMode.BOX,
                    unit_of_measurement="°C",
                )
            ),
            vol.Optional(
                CONF_MAX_CAPACITY,
                default=defaults[CONF_MAX_CAPACITY],
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=1,
                    max=100000,
                    mode=selector.NumberSelectorMode.BOX,
                    unit_of_measurement="NL",
                )
            ),
            vol.Optional(
                CONF_DISCHARGE_RATE,
                default=defaults[CONF_DISCHARGE_RATE],
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=1,
                    max=100000,
                    mode=selector.NumberSelectorMode.BOX,
                    unit_of_measurement="mL/min",
                )
            ),
            vol.Optional(
                CONF_READING_BUFFER_SIZE,
                default=defaults[CONF_READING_BUFFER_SIZE],
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=1,
                    max=20,
                    mode=selector.NumberSelectorMode.BOX,
                )
            ),
            vol.Optional(
                CONF_READING_DEBOUNCE_SECONDS,
                default=defaults[CONF_READING_DEBOUNCE_SECONDS],
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=0,
                    max=300,
                    mode=selector.NumberSelectorMode.BOX,
                    unit_of_measurement="sec",
                )
            ),
        }
    )
    return vol.Schema(fields)


class HydrideMonitorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Hydride Monitor."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors = {}

        if user_input is not None:
            pressure_sensor = user_input[CONF_PRESSURE_SENSOR]
            temperature_sensor = user_input.get(CONF_TEMPERATURE_SENSOR)

            if not self.hass.states.get(pressure_sensor):
                errors[CONF_PRESSURE_SENSOR] = "sensor_not_found"
            elif temperature_sensor and not self.hass.states.get(temperature_sensor):
                errors[CONF_TEMPERATURE_SENSOR] = "sensor_not_found"
            else:
                await self.async_set_unique_id(pressure_sensor)
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Hydride Cylinder ({pressure_sensor})",
                    data=user_input,
                )
            _LOGGER.debug("Config flow rejected input: %s", errors)

        return self.async_show_form(
            step_id="user",
            data_schema=_build_schema(user_input or {}),
            errors=errors,
        )

    async def async_step_import(self, import_config: dict[str, Any]) -> FlowResult:
        """Handle import from configuration.yaml."""
        return await self.async_step_user(import_config)

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Get the options flow for this handler."""
        return HydrideMonitorOptionsFlow()


class HydrideMonitorOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Hydride Monitor."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            # An omitted optional sensor means it was cleared in the form
            data = {
                key: value
                for key, value in self.config_entry.data.items()
                if key != CONF_TEMPERATURE_SENSOR
            }
            self.hass.config_entries.async_update_entry(
                self.config_entry,
                data={**data, **user_input},
            )
            return self.async_create_entry(title="", data={})

        return self.async_show_form(
            step_id="init",
            data_schema=_build_schema(
                dict(self.config_entry.data), include_pressure_sensor=False
            ),
        )
