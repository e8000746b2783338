"""Cylinder specification for metal-hydride hydrogen storage."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
import math
from typing import Any

from .const import DEFAULT_DISCHARGE_RATE, DEFAULT_MAX_CAPACITY
from .curves import CurveConfigurationError


@dataclass(frozen=True)
class CylinderSpec:
    """Static cylinder description.

    Only max_capacity and typical_discharge_rate feed the estimate; the rest
    is passed through unchanged to whatever displays the result.
    """

    max_capacity: float  # NL of hydrogen at full charge
    typical_discharge_rate: float  # mL/min
    model: str = "Generic"
    diameter_mm: float | None = None
    length_mm: float | None = None
    weight_kg: float | None = None
    material: str | None = None
    min_pressure_mpa: float | None = None
    max_pressure_mpa: float | None = None
    min_temperature_c: float | None = None
    max_temperature_c: float | None = None

    def __post_init__(self) -> None:
        for name in ("max_capacity", "typical_discharge_rate"):
            if not math.isfinite(getattr(self, name)):
                raise CurveConfigurationError(
                    f"{name} must be finite, got {getattr(self, name)}"
                )
        if self.max_capacity <= 0:
            raise CurveConfigurationError(
                f"max_capacity must be positive, got {self.max_capacity}"
            )
        if self.typical_discharge_rate <= 0:
            raise CurveConfigurationError(
                "typical_discharge_rate must be positive, "
                f"got {self.typical_discharge_rate}"
            )

    def with_overrides(
        self,
        max_capacity: float | None = None,
        typical_discharge_rate: float | None = None,
    ) -> CylinderSpec:
        """Return a copy with user-configured capacity and discharge rate."""
        changes: dict[str, float] = {}
        if max_capacity is not None:
            changes["max_capacity"] = float(max_capacity)
        if typical_discharge_rate is not None:
            changes["typical_discharge_rate"] = float(typical_discharge_rate)
        return replace(self, **changes) if changes else self

    def metadata(self) -> dict[str, Any]:
        """Return the descriptive fields that are set, for state attributes."""
        return {key: value for key, value in asdict(self).items() if value is not None}


DEFAULT_CYLINDER = CylinderSpec(
    max_capacity=DEFAULT_MAX_CAPACITY,
    typical_discharge_rate=DEFAULT_DISCHARGE_RATE,
    model="MH-450",
    diameter_mm=45.0,
    length_mm=300.0,
    weight_kg=2.6,
    material="AB5 (LaNi5) alloy in aluminium shell",
    min_pressure_mpa=0.1,
    max_pressure_mpa=3.0,
    min_temperature_c=0.0,
    max_temperature_c=40.0,
)
