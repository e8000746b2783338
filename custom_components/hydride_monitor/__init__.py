"""Hydride Monitor Integration."""

import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.typing import ConfigType

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
    SERVICE_ESTIMATE,
    ATTR_PRESSURE,
    ATTR_TEMPERATURE,
    ATTR_ENTRY_ID,
)
from .coordinator import HydrideCoordinator
from .cylinder import DEFAULT_CYLINDER
from .estimation import estimate

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]

# Keep YAML config support for backward compatibility
CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_PRESSURE_SENSOR): cv.entity_id,
                vol.Optional(CONF_TEMPERATURE_SENSOR): cv.entity_id,
                vol.Optional(
                    CONF_FALLBACK_TEMPERATURE, default=DEFAULT_FALLBACK_TEMPERATURE
                ): vol.Coerce(float),
                vol.Optional(
                    CONF_MAX_CAPACITY, default=DEFAULT_MAX_CAPACITY
                ): cv.positive_float,
                vol.Optional(
                    CONF_DISCHARGE_RATE, default=DEFAULT_DISCHARGE_RATE
                ): cv.positive_float,
                vol.Optional(
                    CONF_READING_BUFFER_SIZE, default=DEFAULT_READING_BUFFER_SIZE
                ): cv.positive_int,
                vol.Optional(
                    CONF_READING_DEBOUNCE_SECONDS,
                    default=DEFAULT_READING_DEBOUNCE_SECONDS,
                ): cv.positive_int,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)

ESTIMATE_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_PRESSURE): vol.Coerce(float),
        vol.Required(ATTR_TEMPERATURE): vol.Coerce(float),
        vol.Optional(ATTR_ENTRY_ID): cv.string,
    }
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Hydride Monitor component from YAML."""
    hass.data.setdefault(DOMAIN, {})

    async def handle_estimate(call: ServiceCall) -> ServiceResponse:
        """Estimate remaining hydrogen for an arbitrary reading."""
        cylinder = DEFAULT_CYLINDER
        entry_id = call.data.get(ATTR_ENTRY_ID)
        if entry_id:
            coordinator = hass.data[DOMAIN].get(entry_id)
            if not isinstance(coordinator, HydrideCoordinator):
                raise ServiceValidationError(
                    f"No hydride monitor configured for entry_id: {entry_id}"
                )
            cylinder = coordinator.cylinder

        result = estimate(
            call.data[ATTR_PRESSURE], call.data[ATTR_TEMPERATURE], cylinder
        )
        _LOGGER.debug("Estimate service called: %s -> %s", dict(call.data), result)
        return result.as_dict()

    hass.services.async_register(
        DOMAIN,
        SERVICE_ESTIMATE,
        handle_estimate,
        schema=ESTIMATE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    # Support YAML configuration (legacy)
    if DOMAIN in config:
        hass.async_create_task(
            hass.config_entries.flow.async_init(
                DOMAIN,
                context={"source": "import"},
                data=config[DOMAIN],
            )
        )

    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Hydride Monitor from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    # Merge entry.data and entry.options (options take precedence)
    config = {**entry.data, **entry.options}

    pressure_sensor = config.get(CONF_PRESSURE_SENSOR)
    if not pressure_sensor:
        _LOGGER.error("Missing pressure sensor for entry %s", entry.entry_id)
        return False

    coordinator = HydrideCoordinator(
        hass,
        pressure_sensor=pressure_sensor,
        temperature_sensor=config.get(CONF_TEMPERATURE_SENSOR),
        fallback_temperature=config.get(
            CONF_FALLBACK_TEMPERATURE, DEFAULT_FALLBACK_TEMPERATURE
        ),
        max_capacity=config.get(CONF_MAX_CAPACITY, DEFAULT_MAX_CAPACITY),
        discharge_rate=config.get(CONF_DISCHARGE_RATE, DEFAULT_DISCHARGE_RATE),
        reading_buffer_size=config.get(
            CONF_READING_BUFFER_SIZE, DEFAULT_READING_BUFFER_SIZE
        ),
        reading_debounce_seconds=config.get(
            CONF_READING_DEBOUNCE_SECONDS, DEFAULT_READING_DEBOUNCE_SECONDS
        ),
        entry_id=entry.entry_id,
    )

    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Register update listener for options changes
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator: HydrideCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        coordinator.async_stop()

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload config entry when options change."""
    await hass.config_entries.async_reload(entry.entry_id)
