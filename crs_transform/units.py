"""
Units of measure for coordinate system axes.

Each unit belongs to a kind (length, angle, time, scale) and carries a factor
to the base unit of that kind: metre, radian, second and one respectively.
Only units of the same kind can be converted into each other.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from crs_transform.exceptions import IncommensurableUnitsError

logger = logging.getLogger(__name__)


class UnitKind(Enum):
    """Physical quantity measured by a unit."""

    LENGTH = "length"
    ANGLE = "angle"
    TIME = "time"
    SCALE = "scale"


@dataclass(frozen=True)
class Unit:
    """Immutable unit of measure.

    Attributes:
        name: Human readable name, e.g. "metre".
        symbol: Short symbol, e.g. "m".
        kind: Quantity measured by this unit.
        factor: Multiplier converting a value in this unit to the base unit
            of its kind (1 foot = 0.3048 metre gives factor 0.3048).
    """

    name: str
    symbol: str
    kind: UnitKind
    factor: float

    def __post_init__(self) -> None:
        if not (self.factor > 0 and math.isfinite(self.factor)):
            raise ValueError(f"Unit factor must be a positive finite number, got {self.factor}")

    def is_compatible(self, other: Unit) -> bool:
        """Return True if values can be converted between this unit and ``other``."""
        return self.kind is other.kind

    def converter_to(self, target: Unit) -> float:
        """Return the scale factor converting values in this unit to ``target``.

        Args:
            target: Unit to convert to.

        Returns:
            Multiplier such that ``value_in_target = value_in_self * factor``.

        Raises:
            IncommensurableUnitsError: If the units measure different quantities.
        """
        if not self.is_compatible(target):
            raise IncommensurableUnitsError(
                f"Cannot convert from '{self.name}' ({self.kind.value}) "
                f"to '{target.name}' ({target.kind.value})"
            )
        if self == target:
            return 1.0
        return self.factor / target.factor

    def __str__(self) -> str:
        return self.symbol


# Length
METRE = Unit("metre", "m", UnitKind.LENGTH, 1.0)
CENTIMETRE = Unit("centimetre", "cm", UnitKind.LENGTH, 0.01)
MILLIMETRE = Unit("millimetre", "mm", UnitKind.LENGTH, 0.001)
KILOMETRE = Unit("kilometre", "km", UnitKind.LENGTH, 1000.0)
FOOT = Unit("foot", "ft", UnitKind.LENGTH, 0.3048)
US_SURVEY_FOOT = Unit("US survey foot", "ftUS", UnitKind.LENGTH, 1200.0 / 3937.0)

# Angle
RADIAN = Unit("radian", "rad", UnitKind.ANGLE, 1.0)
DEGREE = Unit("degree", "°", UnitKind.ANGLE, math.pi / 180.0)
GRAD = Unit("grad", "grad", UnitKind.ANGLE, math.pi / 200.0)
ARC_SECOND = Unit("arc-second", "″", UnitKind.ANGLE, math.pi / 648000.0)

# Time
SECOND = Unit("second", "s", UnitKind.TIME, 1.0)
MINUTE = Unit("minute", "min", UnitKind.TIME, 60.0)
HOUR = Unit("hour", "h", UnitKind.TIME, 3600.0)
DAY = Unit("day", "d", UnitKind.TIME, 86400.0)

# Dimensionless
ONE = Unit("unity", "1", UnitKind.SCALE, 1.0)

_ALL_UNITS = (
    METRE, CENTIMETRE, MILLIMETRE, KILOMETRE, FOOT, US_SURVEY_FOOT,
    RADIAN, DEGREE, GRAD, ARC_SECOND,
    SECOND, MINUTE, HOUR, DAY,
    ONE,
)

# Extra spellings found in WKT and PROJ metadata
_ALIASES = {
    "meter": METRE,
    "metres": METRE,
    "meters": METRE,
    "deg": DEGREE,
    "degrees": DEGREE,
    "degree minute second hemisphere": DEGREE,
    "us survey foot": US_SURVEY_FOOT,
    "us-ft": US_SURVEY_FOOT,
    "international foot": FOOT,
    "feet": FOOT,
    "gon": GRAD,
    "grads": GRAD,
    "sec": SECOND,
    "seconds": SECOND,
    "days": DAY,
    "unity": ONE,
    "": ONE,
}


def unit_for_name(name: str) -> Unit:
    """Resolve a unit from its name, symbol or a common alias (case-insensitive).

    Raises:
        ValueError: If the name is not recognized.
    """
    key = name.strip().lower()
    for unit in _ALL_UNITS:
        if key in (unit.name.lower(), unit.symbol.lower()):
            return unit
    if key in _ALIASES:
        return _ALIASES[key]
    raise ValueError(
        f"Unknown unit '{name}'. "
        f"Must be one of: {', '.join(u.name for u in _ALL_UNITS)}"
    )
