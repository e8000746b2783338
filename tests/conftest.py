"""Shared fixtures for hydride monitor tests."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Ensure custom_components is importable
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

pytest.importorskip("homeassistant")

from custom_components.hydride_monitor.const import (
    DEFAULT_FALLBACK_TEMPERATURE,
    DEFAULT_MAX_CAPACITY,
    DEFAULT_DISCHARGE_RATE,
    DEFAULT_READING_BUFFER_SIZE,
    DEFAULT_READING_DEBOUNCE_SECONDS,
)

PRESSURE_SENSOR = "sensor.cylinder_pressure"
TEMPERATURE_SENSOR = "sensor.cylinder_temperature"


@pytest.fixture
def mock_hass():
    """Create a mocked HomeAssistant instance."""
    hass = MagicMock()
    hass.states.get.return_value = None
    hass.async_create_task.return_value = None
    hass.bus.async_listen.return_value = MagicMock()
    hass.bus.async_fire = MagicMock()
    hass.data = {}
    return hass


def make_state(value, unit: str | None = None):
    """Create a mocked sensor State with an optional unit attribute."""
    state = MagicMock()
    state.state = str(value)
    state.attributes = {"unit_of_measurement": unit} if unit else {}
    return state


def make_event(state):
    """Create a mocked state change event carrying new_state."""
    event = MagicMock()
    event.data = {"new_state": state}
    return event


def make_coordinator(
    mock_hass,
    pressure_sensor=PRESSURE_SENSOR,
    entry_id="test_entry_id",
    initial_pressure=None,
    initial_temperature=None,
    **kwargs,
):
    """Create a HydrideCoordinator with mocked HA dependencies.

    This patches async_track_state_change_event to avoid real HA
    interactions. Initial sensor states are served by entity id.
    """
    from custom_components.hydride_monitor.coordinator import HydrideCoordinator

    temperature_sensor = kwargs.get("temperature_sensor")
    states = {}
    if initial_pressure is not None:
        states[pressure_sensor] = make_state(initial_pressure)
    if initial_temperature is not None and temperature_sensor:
        states[temperature_sensor] = make_state(initial_temperature)
    mock_hass.states.get.side_effect = states.get

    with (
        patch(
            "custom_components.hydride_monitor.coordinator.async_track_state_change_event"
        ),
        patch(
            "homeassistant.helpers.frame.report_usage", create=True
        ),
    ):
        coordinator = HydrideCoordinator(
            mock_hass,
            pressure_sensor=pressure_sensor,
            temperature_sensor=temperature_sensor,
            fallback_temperature=kwargs.get(
                "fallback_temperature", DEFAULT_FALLBACK_TEMPERATURE
            ),
            max_capacity=kwargs.get("max_capacity", DEFAULT_MAX_CAPACITY),
            discharge_rate=kwargs.get("discharge_rate", DEFAULT_DISCHARGE_RATE),
            reading_buffer_size=kwargs.get(
                "reading_buffer_size", DEFAULT_READING_BUFFER_SIZE
            ),
            reading_debounce_seconds=kwargs.get(
                "reading_debounce_seconds", DEFAULT_READING_DEBOUNCE_SECONDS
            ),
            entry_id=entry_id,
        )

    return coordinator
