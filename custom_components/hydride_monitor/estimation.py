"""Remaining-hydrogen estimation from P-C-T desorption curves."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
import math
from typing import Any

from .const import (
    ATMOSPHERIC_PRESSURE_MPA,
    FULL_CHARGE_CONTENT,
    NL_TO_ML,
    PSI_TO_MPA,
    STATUS_FULL_PERCENT,
    STATUS_LOW_PERCENT,
    STATUS_NORMAL_PERCENT,
)
from .curves import REFERENCE_CURVES, Curve, CurveStore
from .cylinder import DEFAULT_CYLINDER, CylinderSpec

_LOGGER = logging.getLogger(__name__)


class CylinderStatus(StrEnum):
    """Charge band of the cylinder."""

    FULL = "full"
    NORMAL = "normal"
    LOW = "low"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Estimate:
    """Remaining hydrogen derived from one reading."""

    remaining_nl: float
    remaining_percent: float
    estimated_runtime: int  # minutes
    status: CylinderStatus

    def as_dict(self) -> dict[str, Any]:
        return {
            "remaining_nl": self.remaining_nl,
            "remaining_percent": self.remaining_percent,
            "estimated_runtime": self.estimated_runtime,
            "status": str(self.status),
        }


def gauge_psi_to_absolute_mpa(pressure_psi: float) -> float:
    """Convert gauge psi to absolute MPa in curve units."""
    return pressure_psi * PSI_TO_MPA + ATMOSPHERIC_PRESSURE_MPA


def content_at(pressure: float, curve: Curve) -> float:
    """Return loading (mL/g) at an absolute pressure on a single curve.

    Pressures outside the measured range saturate at the end points.
    """
    first, last = curve[0], curve[-1]
    if pressure <= first.pressure:
        return first.content
    if pressure >= last.pressure:
        return last.content

    for low, high in zip(curve, curve[1:]):
        if low.pressure <= pressure <= high.pressure:
            return low.content + (pressure - low.pressure) * (
                high.content - low.content
            ) / (high.pressure - low.pressure)

    _LOGGER.warning(
        "No bracketing curve points for %s MPa; curve may be unordered", pressure
    )
    return 0.0


def clamp_temperature(temperature: float, store: CurveStore) -> float:
    """Clamp a temperature into the calibrated range of the store."""
    return max(store.min_temperature, min(store.max_temperature, temperature))


def bracket_temperatures(
    temperature: float, store: CurveStore
) -> tuple[float, float]:
    """Return adjacent reference temperatures around a clamped temperature.

    An exact match on a reference temperature returns that key twice.
    """
    keys = store.keys()
    if temperature in store:
        return temperature, temperature

    for low, high in zip(keys, keys[1:]):
        if low <= temperature <= high:
            return low, high

    # Only reachable for a temperature that was not clamped first
    edge = keys[0] if temperature < keys[0] else keys[-1]
    return edge, edge


def content_for(
    pressure_abs: float,
    temperature: float,
    store: CurveStore = REFERENCE_CURVES,
) -> float:
    """Return loading (mL/g) by pressure then temperature interpolation."""
    clamped = clamp_temperature(temperature, store)
    t_low, t_high = bracket_temperatures(clamped, store)

    content_low = content_at(pressure_abs, store.lookup(t_low))
    if t_low == t_high:
        return content_low

    content_high = content_at(pressure_abs, store.lookup(t_high))
    return content_low + (clamped - t_low) * (content_high - content_low) / (
        t_high - t_low
    )


def classify_status(remaining_percent: float) -> CylinderStatus:
    """Map a remaining percentage onto a status band."""
    if remaining_percent >= STATUS_FULL_PERCENT:
        return CylinderStatus.FULL
    if remaining_percent >= STATUS_NORMAL_PERCENT:
        return CylinderStatus.NORMAL
    if remaining_percent >= STATUS_LOW_PERCENT:
        return CylinderStatus.LOW
    return CylinderStatus.CRITICAL


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def estimate_from_content(
    content: float, cylinder: CylinderSpec = DEFAULT_CYLINDER
) -> Estimate:
    """Turn an interpolated loading (mL/g) into remaining hydrogen.

    Status is classified before rounding; volume and percent are rounded to
    one decimal and runtime to whole minutes.
    """
    percent = max(0.0, min(100.0, content / FULL_CHARGE_CONTENT * 100.0))
    volume = percent / 100.0 * cylinder.max_capacity
    runtime = volume * NL_TO_ML / cylinder.typical_discharge_rate

    return Estimate(
        remaining_nl=_round_half_up(volume, 1),
        remaining_percent=_round_half_up(percent, 1),
        estimated_runtime=int(_round_half_up(runtime)),
        status=classify_status(percent),
    )


def estimate(
    pressure: float,
    temperature: float,
    cylinder: CylinderSpec = DEFAULT_CYLINDER,
    store: CurveStore = REFERENCE_CURVES,
) -> Estimate:
    """Estimate remaining hydrogen from a gauge pressure (psi) and temperature (°C).

    Readings outside the calibrated range are clamped rather than rejected.
    """
    pressure_abs = gauge_psi_to_absolute_mpa(pressure)
    content = content_for(pressure_abs, temperature, store)
    result = estimate_from_content(content, cylinder)

    _LOGGER.debug(
        "Estimate for %.1f psi at %.1f °C: %.3f MPa abs, %.2f mL/g -> %s",
        pressure,
        temperature,
        pressure_abs,
        content,
        result,
    )
    return result
