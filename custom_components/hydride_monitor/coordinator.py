"""Coordinator for Hydride Monitor readings and estimates."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import math

from homeassistant.const import (
    ATTR_UNIT_OF_MEASUREMENT,
    UnitOfPressure,
    UnitOfTemperature,
)
from homeassistant.core import Event, HomeAssistant, State
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util
from homeassistant.util.unit_conversion import PressureConverter, TemperatureConverter

from .const import (
    DOMAIN,
    DEFAULT_DISCHARGE_RATE,
    DEFAULT_FALLBACK_TEMPERATURE,
    DEFAULT_MAX_CAPACITY,
    DEFAULT_READING_BUFFER_SIZE,
    DEFAULT_READING_DEBOUNCE_SECONDS,
)
from .curves import REFERENCE_CURVES, CurveStore
from .cylinder import DEFAULT_CYLINDER, CylinderSpec
from .estimation import (
    Estimate,
    content_for,
    estimate_from_content,
    gauge_psi_to_absolute_mpa,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class HydrideData:
    """Snapshot of cylinder state for sensors."""

    pressure: float | None  # psi gauge, filtered
    pressure_abs: float | None  # MPa
    temperature: float  # °C used for the estimate
    temperature_is_fallback: bool
    content: float | None  # mL/g
    estimate: Estimate | None


def _state_value(state: State | None) -> str | None:
    if state is None or state.state in ("unknown", "unavailable"):
        return None
    return state.state


def parse_pressure_psi(state: State) -> float:
    """Read a pressure state as gauge psi, converting from its own unit."""
    value = float(state.state)
    if not math.isfinite(value):
        raise ValueError(f"non-finite pressure {state.state}")

    # A sensor without a unit is taken to report psi
    unit = state.attributes.get(ATTR_UNIT_OF_MEASUREMENT)
    if not unit or unit == UnitOfPressure.PSI:
        return value
    if unit not in PressureConverter.VALID_UNITS:
        raise ValueError(f"unsupported pressure unit {unit}")
    return PressureConverter.convert(value, unit, UnitOfPressure.PSI)


def parse_temperature_c(state: State) -> float:
    """Read a temperature state in °C, converting from its own unit."""
    value = float(state.state)
    if not math.isfinite(value):
        raise ValueError(f"non-finite temperature {state.state}")

    unit = state.attributes.get(ATTR_UNIT_OF_MEASUREMENT)
    if (
        unit
        and unit != UnitOfTemperature.CELSIUS
        and unit in TemperatureConverter.VALID_UNITS
    ):
        value = TemperatureConverter.convert(value, unit, UnitOfTemperature.CELSIUS)
    return value


class HydrideCoordinator(DataUpdateCoordinator[HydrideData]):
    """Coordinator turning pressure and temperature readings into estimates."""

    def __init__(
        self,
        hass: HomeAssistant,
        pressure_sensor: str,
        temperature_sensor: str | None = None,
        fallback_temperature: float = DEFAULT_FALLBACK_TEMPERATURE,
        max_capacity: float = DEFAULT_MAX_CAPACITY,
        discharge_rate: float = DEFAULT_DISCHARGE_RATE,
        reading_buffer_size: int = DEFAULT_READING_BUFFER_SIZE,
        reading_debounce_seconds: int = DEFAULT_READING_DEBOUNCE_SECONDS,
        entry_id: str | None = None,
        cylinder: CylinderSpec = DEFAULT_CYLINDER,
        curve_store: CurveStore = REFERENCE_CURVES,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(hass, _LOGGER, name=DOMAIN)

        self.hass = hass
        self.pressure_sensor = pressure_sensor
        self.temperature_sensor = temperature_sensor
        self.fallback_temperature = float(fallback_temperature)
        self.reading_buffer_size = int(reading_buffer_size)
        self.reading_debounce_seconds = reading_debounce_seconds
        self.entry_id = entry_id
        self.cylinder = cylinder.with_overrides(max_capacity, discharge_rate)
        self.curve_store = curve_store

        self._current_pressure: float | None = None
        self._current_temperature: float | None = None
        self._reading_buffer: list[dict] = []
        self._last_processed_time: datetime | None = None

        self._unsub_listeners: list[Callable[[], None]] = [
            async_track_state_change_event(
                hass, [pressure_sensor], self._handle_pressure_change
            )
        ]
        if temperature_sensor:
            self._unsub_listeners.append(
                async_track_state_change_event(
                    hass, [temperature_sensor], self._handle_temperature_change
                )
            )

        self._initialize_pressure()

        if temperature_sensor:
            self._initialize_temperature()

        self._publish()

    async def _async_update_data(self) -> HydrideData:
        """Provide data for coordinator refresh requests."""
        return self._build_data()

    def async_stop(self) -> None:
        """Stop tracking source sensors."""
        while self._unsub_listeners:
            self._unsub_listeners.pop()()

    @property
    def effective_temperature(self) -> float:
        """Return the measured temperature, or the fallback while none is known."""
        if self._current_temperature is None:
            return self.fallback_temperature
        return self._current_temperature

    def _initialize_pressure(self) -> None:
        """Initialize pressure from current pressure sensor reading."""
        state = self.hass.states.get(self.pressure_sensor)
        if _state_value(state) is None:
            return

        try:
            self._current_pressure = parse_pressure_psi(state)
            _LOGGER.debug(
                "Initialized pressure from sensor: %.2f psi", self._current_pressure
            )
        except (ValueError, TypeError) as exc:
            _LOGGER.debug("Could not initialize pressure from sensor: %s", exc)

    def _initialize_temperature(self) -> None:
        """Initialize temperature from current temperature sensor reading."""
        if not self.temperature_sensor:
            return

        state = self.hass.states.get(self.temperature_sensor)
        if _state_value(state) is None:
            return

        try:
            self._current_temperature = parse_temperature_c(state)
            _LOGGER.debug(
                "Initialized temperature from sensor: %.2f °C",
                self._current_temperature,
            )
        except (ValueError, TypeError) as exc:
            _LOGGER.debug("Could not initialize temperature from sensor: %s", exc)

    async def _handle_temperature_change(self, event: Event) -> None:
        """Handle temperature sensor state change."""
        new_state = event.data.get("new_state")
        if _state_value(new_state) is None:
            return

        try:
            self._current_temperature = parse_temperature_c(new_state)
        except (ValueError, TypeError):
            _LOGGER.warning("Invalid temperature value: %s", new_state.state)
            return

        _LOGGER.debug("Temperature updated: %.2f °C", self._current_temperature)
        self._publish()

    async def _handle_pressure_change(self, event: Event) -> None:
        """Handle pressure sensor state change."""
        new_state = event.data.get("new_state")
        if _state_value(new_state) is None:
            return

        try:
            pressure = parse_pressure_psi(new_state)
        except (ValueError, TypeError):
            _LOGGER.warning("Invalid pressure value: %s", new_state.state)
            return

        await self._process_pressure_reading(pressure)

    def _get_median_pressure(self, readings: list[dict]) -> float:
        """Calculate median pressure from a list of readings."""
        if not readings:
            return 0.0

        pressures = sorted(r["pressure"] for r in readings)
        mid = len(pressures) // 2

        if len(pressures) % 2 == 0:
            return (pressures[mid - 1] + pressures[mid]) / 2
        return pressures[mid]

    def _should_process_reading(self, now: datetime) -> bool:
        """Check if enough time has passed since last processed reading."""
        if self._last_processed_time is None:
            return True

        elapsed = (now - self._last_processed_time).total_seconds()
        return elapsed >= self.reading_debounce_seconds

    async def _process_pressure_reading(self, pressure: float) -> None:
        """Process a new pressure reading with median filtering and debouncing."""
        now = dt_util.now()

        self._reading_buffer.append({"timestamp": now, "pressure": pressure})

        cutoff = now - timedelta(minutes=5)
        buffer_size = self.reading_buffer_size
        self._reading_buffer = [
            r for r in self._reading_buffer if r["timestamp"] > cutoff
        ][-max(buffer_size * 2, 10) :]

        if self._current_pressure is None:
            self._current_pressure = pressure
            self._last_processed_time = now
            _LOGGER.debug("Initial pressure reading: %.2f psi", pressure)
            self._publish()
            return

        if not self._should_process_reading(now):
            _LOGGER.debug(
                "Debouncing: skipping reading %.2f psi (last processed %.0fs ago)",
                pressure,
                (now - self._last_processed_time).total_seconds(),
            )
            return

        if len(self._reading_buffer) >= buffer_size:
            filtered = self._get_median_pressure(self._reading_buffer[-buffer_size:])
        else:
            filtered = pressure

        _LOGGER.debug(
            "Pressure (filtered): %.2f → %.2f psi, raw reading: %.2f psi",
            self._current_pressure,
            filtered,
            pressure,
        )

        self._current_pressure = filtered
        self._last_processed_time = now
        self._publish()

    def _build_data(self) -> HydrideData:
        """Run the estimate for the current readings."""
        temperature = self.effective_temperature
        is_fallback = self._current_temperature is None

        if self._current_pressure is None:
            return HydrideData(
                pressure=None,
                pressure_abs=None,
                temperature=temperature,
                temperature_is_fallback=is_fallback,
                content=None,
                estimate=None,
            )

        pressure_abs = gauge_psi_to_absolute_mpa(self._current_pressure)
        content = content_for(pressure_abs, temperature, self.curve_store)
        return HydrideData(
            pressure=self._current_pressure,
            pressure_abs=pressure_abs,
            temperature=temperature,
            temperature_is_fallback=is_fallback,
            content=content,
            estimate=estimate_from_content(content, self.cylinder),
        )

    def _publish(self) -> None:
        """Publish updated data to listeners."""
        self.async_set_updated_data(self._build_data())
