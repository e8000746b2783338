"""Reference P-C-T desorption curves for the metal-hydride cylinder.

Each curve maps absolute pressure (MPa) to hydrogen loading (mL/g) at one
reference temperature. Points must be strictly ascending in pressure; this is
checked once when a store is built and never sorted at runtime.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import math
from types import MappingProxyType
from typing import NamedTuple


class CurveConfigurationError(ValueError):
    """Reference curve data cannot support interpolation."""


class CurveLookupError(KeyError):
    """No curve is stored for the requested temperature."""


class CurvePoint(NamedTuple):
    """One measured desorption point."""

    pressure: float  # MPa absolute
    content: float  # mL/g


Curve = tuple[CurvePoint, ...]


def _validate_curve(temperature: float, points: Iterable[Iterable[float]]) -> Curve:
    """Build a curve and fail fast on data that would break interpolation."""
    curve = tuple(CurvePoint(*(float(v) for v in point)) for point in points)

    if len(curve) < 2:
        raise CurveConfigurationError(
            f"Curve at {temperature} °C needs at least 2 points, got {len(curve)}"
        )

    for point in curve:
        if not (math.isfinite(point.pressure) and math.isfinite(point.content)):
            raise CurveConfigurationError(
                f"Curve at {temperature} °C has a non-finite point: {point}"
            )
        if point.pressure < 0 or point.content < 0:
            raise CurveConfigurationError(
                f"Curve at {temperature} °C has a negative point: {point}"
            )

    for low, high in zip(curve, curve[1:]):
        if high.pressure <= low.pressure:
            raise CurveConfigurationError(
                f"Curve at {temperature} °C is not strictly ascending in pressure "
                f"({low.pressure} MPa followed by {high.pressure} MPa)"
            )

    return curve


@dataclass(frozen=True, init=False, eq=False)
class CurveStore:
    """Immutable mapping from reference temperature (°C) to a curve."""

    _curves: Mapping[float, Curve]
    _keys: tuple[float, ...]

    def __init__(self, curves: Mapping[float, Iterable[Iterable[float]]]) -> None:
        if len(curves) < 2:
            raise CurveConfigurationError(
                f"At least 2 reference temperatures are required, got {len(curves)}"
            )

        validated = {
            float(temperature): _validate_curve(temperature, points)
            for temperature, points in curves.items()
        }
        if len(validated) < 2:
            raise CurveConfigurationError(
                "At least 2 distinct reference temperatures are required"
            )

        object.__setattr__(self, "_curves", MappingProxyType(validated))
        object.__setattr__(self, "_keys", tuple(sorted(validated)))

    def keys(self) -> tuple[float, ...]:
        """Return reference temperatures in ascending order."""
        return self._keys

    def lookup(self, temperature: float) -> Curve:
        """Return the curve stored for an exact reference temperature."""
        try:
            return self._curves[float(temperature)]
        except KeyError:
            raise CurveLookupError(
                f"No curve for {temperature} °C; known: {list(self._keys)}"
            ) from None

    def __contains__(self, temperature: object) -> bool:
        return temperature in self._curves

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def min_temperature(self) -> float:
        return self._keys[0]

    @property
    def max_temperature(self) -> float:
        return self._keys[-1]


# Manufacturer desorption data, (MPa absolute, mL/g).
# Warmer alloy holds less hydrogen at a given pressure, so the plateau
# moves up in pressure as temperature rises.
REFERENCE_CURVE_DATA: dict[float, list[tuple[float, float]]] = {
    0.0: [
        (0.04, 5.0),
        (0.06, 20.0),
        (0.08, 60.0),
        (0.10, 120.0),
        (0.12, 155.0),
        (0.20, 165.0),
        (0.50, 170.0),
        (1.00, 172.0),
    ],
    10.0: [
        (0.07, 5.0),
        (0.09, 20.0),
        (0.12, 60.0),
        (0.15, 120.0),
        (0.18, 155.0),
        (0.30, 165.0),
        (0.60, 170.0),
        (1.00, 172.0),
    ],
    20.0: [
        (0.12, 5.0),
        (0.15, 20.0),
        (0.18, 60.0),
        (0.22, 120.0),
        (0.26, 155.0),
        (0.40, 165.0),
        (0.70, 170.0),
        (1.00, 172.0),
    ],
    30.0: [
        (0.18, 5.0),
        (0.22, 20.0),
        (0.27, 60.0),
        (0.32, 120.0),
        (0.38, 155.0),
        (0.55, 165.0),
        (0.85, 170.0),
        (1.20, 172.0),
    ],
    40.0: [
        (0.26, 5.0),
        (0.32, 20.0),
        (0.38, 60.0),
        (0.45, 120.0),
        (0.52, 155.0),
        (0.75, 165.0),
        (1.10, 170.0),
        (1.50, 172.0),
    ],
}

REFERENCE_CURVES = CurveStore(REFERENCE_CURVE_DATA)
