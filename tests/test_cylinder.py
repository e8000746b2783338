"""Tests for the cylinder specification."""

from __future__ import annotations

import math

import pytest

from custom_components.hydride_monitor.const import (
    DEFAULT_DISCHARGE_RATE,
    DEFAULT_MAX_CAPACITY,
)
from custom_components.hydride_monitor.curves import CurveConfigurationError
from custom_components.hydride_monitor.cylinder import DEFAULT_CYLINDER, CylinderSpec


class TestCylinderSpec:
    """Tests for CylinderSpec construction and overrides."""

    def test_default_cylinder_uses_defaults(self):
        assert DEFAULT_CYLINDER.max_capacity == DEFAULT_MAX_CAPACITY
        assert DEFAULT_CYLINDER.typical_discharge_rate == DEFAULT_DISCHARGE_RATE

    @pytest.mark.parametrize("capacity", [0.0, -10.0])
    def test_non_positive_capacity_rejected(self, capacity):
        with pytest.raises(CurveConfigurationError):
            CylinderSpec(max_capacity=capacity, typical_discharge_rate=500.0)

    @pytest.mark.parametrize(
        "field", ["max_capacity", "typical_discharge_rate"]
    )
    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_values_rejected(self, field, value):
        """Non-finite sizing would only fail later, inside the estimate."""
        kwargs = {"max_capacity": 450.0, "typical_discharge_rate": 500.0}
        kwargs[field] = value
        with pytest.raises(CurveConfigurationError):
            CylinderSpec(**kwargs)

    def test_non_finite_override_rejected(self):
        with pytest.raises(CurveConfigurationError):
            DEFAULT_CYLINDER.with_overrides(max_capacity=math.inf)

    @pytest.mark.parametrize("rate", [0.0, -1.0])
    def test_non_positive_discharge_rate_rejected(self, rate):
        """A zero rate would make the runtime estimate divide by zero."""
        with pytest.raises(CurveConfigurationError):
            CylinderSpec(max_capacity=450.0, typical_discharge_rate=rate)

    def test_overrides_keep_metadata(self):
        cylinder = DEFAULT_CYLINDER.with_overrides(max_capacity=900, typical_discharge_rate=250)
        assert cylinder.max_capacity == 900.0
        assert cylinder.typical_discharge_rate == 250.0
        assert cylinder.model == DEFAULT_CYLINDER.model
        assert cylinder.weight_kg == DEFAULT_CYLINDER.weight_kg

    def test_no_overrides_returns_same_instance(self):
        assert DEFAULT_CYLINDER.with_overrides() is DEFAULT_CYLINDER

    def test_metadata_skips_unset_fields(self):
        cylinder = CylinderSpec(max_capacity=100.0, typical_discharge_rate=50.0)
        assert cylinder.metadata() == {
            "max_capacity": 100.0,
            "typical_discharge_rate": 50.0,
            "model": "Generic",
        }

    def test_metadata_passes_through_description(self):
        metadata = DEFAULT_CYLINDER.metadata()
        assert metadata["model"] == DEFAULT_CYLINDER.model
        assert metadata["material"] == DEFAULT_CYLINDER.material
        assert metadata["max_temperature_c"] == 40.0
