"""Sensor platform for Hydride Monitor."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfPressure, UnitOfTime, UnitOfVolume
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import HydrideCoordinator
from .estimation import CylinderStatus, Estimate

_LOGGER = logging.getLogger(__name__)

UNIT_LOADING = "mL/g"

STATUS_ICONS = {
    CylinderStatus.FULL: "mdi:gas-cylinder",
    CylinderStatus.NORMAL: "mdi:gauge",
    CylinderStatus.LOW: "mdi:gauge-low",
    CylinderStatus.CRITICAL: "mdi:alert-circle",
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the sensor platform from a config entry."""
    coordinator = hass.data[DOMAIN].get(entry.entry_id)
    if not isinstance(coordinator, HydrideCoordinator):
        _LOGGER.error("No coordinator found for entry %s", entry.entry_id)
        return

    async_add_entities(_build_sensors(coordinator))


def _build_sensors(coordinator: HydrideCoordinator) -> list[HydrideSensorBase]:
    """Create all sensors for one cylinder."""
    return [
        HydrideRemainingVolumeSensor(coordinator),
        HydrideRemainingPercentSensor(coordinator),
        HydrideRuntimeSensor(coordinator),
        HydrideStatusSensor(coordinator),
        HydrideLoadingSensor(coordinator),
        HydrideAbsolutePressureSensor(coordinator),
    ]


class HydrideSensorBase(CoordinatorEntity[HydrideCoordinator], SensorEntity):
    """Common setup for sensors of one cylinder."""

    _attr_has_entity_name = True
    _key: str

    def __init__(self, coordinator: HydrideCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{DOMAIN}_{coordinator.pressure_sensor}_{self._key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, coordinator.pressure_sensor)},
            name="Hydride Cylinder",
            manufacturer="Hydride Monitor",
            model=coordinator.cylinder.model,
        )

    @property
    def _estimate(self) -> Estimate | None:
        data = self.coordinator.data
        return data.estimate if data is not None else None


class HydrideRemainingVolumeSensor(HydrideSensorBase):
    """Sensor for remaining hydrogen in normal liters."""

    _key = "remaining_volume"
    _attr_name = "Remaining Hydrogen"
    _attr_device_class = SensorDeviceClass.VOLUME_STORAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfVolume.LITERS
    _attr_icon = "mdi:gas-cylinder"

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        result = self._estimate
        return result.remaining_nl if result else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return cylinder metadata and the inputs behind the estimate."""
        attrs: dict[str, Any] = dict(self.coordinator.cylinder.metadata())
        data = self.coordinator.data
        if data is not None:
            attrs["temperature"] = data.temperature
            attrs["temperature_is_fallback"] = data.temperature_is_fallback
            if data.pressure is not None:
                attrs["pressure_psi"] = round(data.pressure, 2)
        return attrs


class HydrideRemainingPercentSensor(HydrideSensorBase):
    """Sensor for remaining hydrogen as a share of full charge."""

    _key = "remaining_percent"
    _attr_name = "Remaining Percent"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_icon = "mdi:gauge"

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        result = self._estimate
        return result.remaining_percent if result else None


class HydrideRuntimeSensor(HydrideSensorBase):
    """Sensor for estimated runtime at the typical discharge rate."""

    _key = "estimated_runtime"
    _attr_name = "Estimated Runtime"
    _attr_device_class = SensorDeviceClass.DURATION
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES
    _attr_icon = "mdi:timer-sand"

    @property
    def native_value(self) -> int | None:
        """Return the state of the sensor."""
        result = self._estimate
        return result.estimated_runtime if result else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the discharge rate the runtime assumes."""
        return {
            "typical_discharge_rate_ml_per_min": (
                self.coordinator.cylinder.typical_discharge_rate
            )
        }


class HydrideStatusSensor(HydrideSensorBase):
    """Sensor for the charge status band."""

    _key = "status"
    _attr_name = "Status"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [status.value for status in CylinderStatus]

    @property
    def native_value(self) -> str | None:
        """Return the state of the sensor."""
        result = self._estimate
        return result.status.value if result else None

    @property
    def icon(self) -> str:
        """Return an icon matching the status."""
        result = self._estimate
        if result is None:
            return "mdi:help-circle"
        return STATUS_ICONS[result.status]


class HydrideLoadingSensor(HydrideSensorBase):
    """Sensor for interpolated hydrogen loading of the alloy."""

    _key = "loading"
    _attr_name = "Hydrogen Loading"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UNIT_LOADING
    _attr_icon = "mdi:molecule"

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        data = self.coordinator.data
        if data is None or data.content is None:
            return None
        return round(data.content, 1)


class HydrideAbsolutePressureSensor(HydrideSensorBase):
    """Sensor for absolute pressure used against the curves."""

    _key = "absolute_pressure"
    _attr_name = "Absolute Pressure"
    _attr_device_class = SensorDeviceClass.PRESSURE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfPressure.KPA

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        data = self.coordinator.data
        if data is None or data.pressure_abs is None:
            return None
        return round(data.pressure_abs * 1000, 1)
