"""Coordinate system axes and their directions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from crs_transform import units
from crs_transform.units import Unit


class AxisDirection(Enum):
    """Direction of increasing values along a coordinate system axis.

    Directions come in opposite pairs (NORTH/SOUTH, UP/DOWN, ...). The first
    member of each pair is the "absolute" direction used when matching axes
    between two coordinate systems.
    """

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    UP = "up"
    DOWN = "down"
    GEOCENTRIC_X = "geocentricX"
    GEOCENTRIC_Y = "geocentricY"
    GEOCENTRIC_Z = "geocentricZ"
    FUTURE = "future"
    PAST = "past"
    COLUMN_POSITIVE = "columnPositive"
    COLUMN_NEGATIVE = "columnNegative"
    ROW_POSITIVE = "rowPositive"
    ROW_NEGATIVE = "rowNegative"
    DISPLAY_RIGHT = "displayRight"
    DISPLAY_LEFT = "displayLeft"
    DISPLAY_UP = "displayUp"
    DISPLAY_DOWN = "displayDown"
    OTHER = "other"

    def opposite(self) -> Optional[AxisDirection]:
        """Return the direction pointing the other way, or None if there is none."""
        return _OPPOSITES.get(self)

    def absolute(self) -> AxisDirection:
        """Return the positive member of this direction's pair."""
        return _ABSOLUTES.get(self, self)

    def is_reversed(self) -> bool:
        """True if this direction is the negative member of its pair."""
        return self.absolute() is not self

    @classmethod
    def parse(cls, name: str) -> AxisDirection:
        """Parse a direction from its value or member name (case-insensitive).

        Raises:
            ValueError: If the name is not a known direction.
        """
        key = name.strip().replace("_", "").replace(" ", "").lower()
        for direction in cls:
            if key in (direction.value.lower(), direction.name.replace("_", "").lower()):
                return direction
        valid = [d.value for d in cls]
        raise ValueError(
            f"Invalid axis direction '{name}'. Must be one of: {', '.join(valid)}"
        )


_PAIRS = (
    (AxisDirection.NORTH, AxisDirection.SOUTH),
    (AxisDirection.EAST, AxisDirection.WEST),
    (AxisDirection.UP, AxisDirection.DOWN),
    (AxisDirection.FUTURE, AxisDirection.PAST),
    (AxisDirection.COLUMN_POSITIVE, AxisDirection.COLUMN_NEGATIVE),
    (AxisDirection.ROW_POSITIVE, AxisDirection.ROW_NEGATIVE),
    (AxisDirection.DISPLAY_RIGHT, AxisDirection.DISPLAY_LEFT),
    (AxisDirection.DISPLAY_UP, AxisDirection.DISPLAY_DOWN),
)

_OPPOSITES = {}
_ABSOLUTES = {}
for _positive, _negative in _PAIRS:
    _OPPOSITES[_positive] = _negative
    _OPPOSITES[_negative] = _positive
    _ABSOLUTES[_negative] = _positive


@dataclass(frozen=True)
class CoordinateSystemAxis:
    """One axis of a coordinate system.

    Attributes:
        name: Axis name, e.g. "Geodetic longitude".
        abbreviation: Short label, e.g. "Lon".
        direction: Direction of increasing values.
        unit: Unit of the values along this axis.
    """

    name: str
    abbreviation: str
    direction: AxisDirection
    unit: Unit

    def equals_ignore_metadata(self, other: CoordinateSystemAxis) -> bool:
        """Compare direction and unit only."""
        return self.direction is other.direction and self.unit == other.unit


LONGITUDE = CoordinateSystemAxis("Geodetic longitude", "Lon", AxisDirection.EAST, units.DEGREE)
LATITUDE = CoordinateSystemAxis("Geodetic latitude", "Lat", AxisDirection.NORTH, units.DEGREE)
ELLIPSOIDAL_HEIGHT = CoordinateSystemAxis("Ellipsoidal height", "h", AxisDirection.UP, units.METRE)
GRAVITY_RELATED_HEIGHT = CoordinateSystemAxis("Gravity-related height", "H", AxisDirection.UP, units.METRE)
EASTING = CoordinateSystemAxis("Easting", "E", AxisDirection.EAST, units.METRE)
NORTHING = CoordinateSystemAxis("Northing", "N", AxisDirection.NORTH, units.METRE)
X = CoordinateSystemAxis("x", "x", AxisDirection.EAST, units.METRE)
Y = CoordinateSystemAxis("y", "y", AxisDirection.NORTH, units.METRE)
Z = CoordinateSystemAxis("z", "z", AxisDirection.UP, units.METRE)
TIME = CoordinateSystemAxis("Time", "t", AxisDirection.FUTURE, units.DAY)
