"""Tests for integration setup and the estimate service."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

pytest.importorskip("homeassistant")

from homeassistant.core import SupportsResponse
from homeassistant.exceptions import ServiceValidationError

from custom_components.hydride_monitor import (
    ESTIMATE_SCHEMA,
    async_setup,
    async_setup_entry,
    async_unload_entry,
)
from custom_components.hydride_monitor.const import DOMAIN, SERVICE_ESTIMATE
from conftest import make_coordinator


def _make_call(**data):
    call = MagicMock()
    call.data = data
    return call


async def _setup_service(hass):
    assert await async_setup(hass, {})
    return hass.services.async_register.call_args.args[2]


# ---------------------------------------------------------------------------
# async_setup / estimate service
# ---------------------------------------------------------------------------

class TestEstimateService:
    """Tests for the estimate response service."""

    @pytest.mark.asyncio
    async def test_service_registered(self, mock_hass):
        await _setup_service(mock_hass)
        call_args = mock_hass.services.async_register.call_args
        assert call_args.args[:2] == (DOMAIN, SERVICE_ESTIMATE)
        assert call_args.kwargs["supports_response"] is SupportsResponse.ONLY
        assert mock_hass.data[DOMAIN] == {}

    @pytest.mark.asyncio
    async def test_yaml_config_not_imported_when_absent(self, mock_hass):
        await _setup_service(mock_hass)
        mock_hass.async_create_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_estimate_with_default_cylinder(self, mock_hass):
        handler = await _setup_service(mock_hass)
        response = await handler(_make_call(pressure=500.0, temperature=20.0))
        assert response == {
            "remaining_nl": 450.0,
            "remaining_percent": 100.0,
            "estimated_runtime": 900,
            "status": "full",
        }

    @pytest.mark.asyncio
    async def test_estimate_uses_configured_cylinder(self, mock_hass):
        handler = await _setup_service(mock_hass)
        mock_hass.data[DOMAIN]["x"] = make_coordinator(mock_hass, max_capacity=900)

        response = await handler(
            _make_call(pressure=500.0, temperature=20.0, entry_id="x")
        )
        assert response["remaining_nl"] == 900.0

    @pytest.mark.asyncio
    async def test_unknown_entry_rejected(self, mock_hass):
        handler = await _setup_service(mock_hass)
        with pytest.raises(ServiceValidationError):
            await handler(
                _make_call(pressure=500.0, temperature=20.0, entry_id="missing")
            )

    def test_schema_coerces_numbers(self):
        data = ESTIMATE_SCHEMA({"pressure": "12.5", "temperature": 20})
        assert data == {"pressure": 12.5, "temperature": 20.0}

    def test_schema_requires_temperature(self):
        import voluptuous as vol

        with pytest.raises(vol.Invalid):
            ESTIMATE_SCHEMA({"pressure": 12.5})


# ---------------------------------------------------------------------------
# Config entry lifecycle
# ---------------------------------------------------------------------------

class TestEntryLifecycle:
    """Tests for setting up and unloading config entries."""

    @pytest.mark.asyncio
    async def test_setup_entry_without_pressure_sensor_fails(self, mock_hass):
        entry = MagicMock()
        entry.data = {}
        entry.options = {}
        assert await async_setup_entry(mock_hass, entry) is False

    @pytest.mark.asyncio
    async def test_unload_entry_stops_coordinator(self, mock_hass):
        coordinator = MagicMock()
        mock_hass.data[DOMAIN] = {"entry": coordinator}
        mock_hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
        entry = MagicMock()
        entry.entry_id = "entry"

        assert await async_unload_entry(mock_hass, entry) is True
        coordinator.async_stop.assert_called_once()
        assert "entry" not in mock_hass.data[DOMAIN]
