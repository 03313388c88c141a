"""
Coordinate reference system descriptors.

These are plain immutable descriptions: a name, an ordered tuple of axes and
the datum (plus, for projected systems, the map projection parameters). They
never transform anything themselves; CoordinateOperationFactory reads them to
build math transforms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from crs_transform.crs import axis as axes_module
from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.crs.datum import (
    ELLIPSOID_SURFACE,
    MEAN_SEA_LEVEL,
    UNIX_EPOCH,
    WGS84_DATUM,
    EngineeringDatum,
    GeodeticDatum,
    TemporalDatum,
    VerticalDatum,
)
from crs_transform.exceptions import InvalidArgumentError
from crs_transform.parameters import ParameterValueGroup
from crs_transform.units import UnitKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoordinateReferenceSystem:
    """Base class for all CRS descriptors.

    Attributes:
        name: Human readable name; ignored by ``equals_ignore_metadata``.
        axes: Ordered axes; their count is the CRS dimension.
    """

    name: str
    axes: Tuple[CoordinateSystemAxis, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "axes", tuple(self.axes))
        if not self.axes:
            raise InvalidArgumentError(f"CRS '{self.name}' must have at least one axis")

    @property
    def dimension(self) -> int:
        return len(self.axes)

    @property
    def directions(self) -> Tuple[AxisDirection, ...]:
        return tuple(a.direction for a in self.axes)

    def equals_ignore_metadata(self, other: object) -> bool:
        if type(self) is not type(other):
            return False
        return _axes_equal(self.axes, other.axes)


def _axes_equal(a: Sequence[CoordinateSystemAxis], b: Sequence[CoordinateSystemAxis]) -> bool:
    return len(a) == len(b) and all(x.equals_ignore_metadata(y) for x, y in zip(a, b))


def _count_axes(crs: CoordinateReferenceSystem, absolute: AxisDirection, kind: UnitKind) -> int:
    return sum(
        1 for a in crs.axes
        if a.direction.absolute() is absolute and a.unit.kind is kind
    )


@dataclass(frozen=True)
class GeographicCRS(CoordinateReferenceSystem):
    """Longitude/latitude (and optionally ellipsoidal height) on a geodetic datum."""

    datum: GeodeticDatum = WGS84_DATUM

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.dimension not in (2, 3):
            raise InvalidArgumentError(
                f"Geographic CRS '{self.name}' must be 2D or 3D, got {self.dimension} axes"
            )
        if (_count_axes(self, AxisDirection.EAST, UnitKind.ANGLE) != 1
                or _count_axes(self, AxisDirection.NORTH, UnitKind.ANGLE) != 1):
            raise InvalidArgumentError(
                f"Geographic CRS '{self.name}' needs one angular longitude and one angular latitude axis"
            )

    @property
    def ellipsoid(self):
        return self.datum.ellipsoid

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return (
            self.datum.equals_ignore_metadata(other.datum)
            and self.datum.prime_meridian.greenwich_longitude
            == other.datum.prime_meridian.greenwich_longitude
        )


@dataclass(frozen=True)
class ProjectedCRS(CoordinateReferenceSystem):
    """Easting/northing obtained by a map projection of a geographic CRS.

    Attributes:
        base_crs: Two-dimensional geographic CRS being projected.
        conversion: Projection method and parameter values. When the method
            has ``semi_major``/``semi_minor`` parameters and they are not
            set, they are filled from the base CRS ellipsoid.
    """

    base_crs: Optional[GeographicCRS] = None
    conversion: Optional[ParameterValueGroup] = field(default=None, hash=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.base_crs is None or self.conversion is None:
            raise InvalidArgumentError(f"Projected CRS '{self.name}' needs a base CRS and a conversion")
        if self.dimension != 2 or self.base_crs.dimension != 2:
            raise InvalidArgumentError(
                f"Projected CRS '{self.name}' and its base CRS must be two-dimensional"
            )
        if (_count_axes(self, AxisDirection.EAST, UnitKind.LENGTH) != 1
                or _count_axes(self, AxisDirection.NORTH, UnitKind.LENGTH) != 1):
            raise InvalidArgumentError(
                f"Projected CRS '{self.name}' needs one linear easting and one linear northing axis"
            )
        conversion = self.conversion.copy()
        ellipsoid = self.base_crs.ellipsoid
        if "semi_major" in conversion and not conversion.is_set("semi_major"):
            conversion.set("semi_major", ellipsoid.semi_major)
        if "semi_minor" in conversion and not conversion.is_set("semi_minor"):
            conversion.set("semi_minor", ellipsoid.semi_minor)
        object.__setattr__(self, "conversion", conversion)

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return (
            self.base_crs.equals_ignore_metadata(other.base_crs)
            and self.conversion == other.conversion
        )


@dataclass(frozen=True)
class EngineeringCRS(CoordinateReferenceSystem):
    """Local cartesian or image coordinate system.

    Attributes:
        datum: Engineering datum.
        generic: When True this CRS is a wildcard: any CRS of the same
            dimension converts to or from it with the identity transform.
    """

    datum: EngineeringDatum = EngineeringDatum("Unknown engineering datum")
    generic: bool = False

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return self.generic == other.generic and self.datum.equals_ignore_metadata(other.datum)


@dataclass(frozen=True)
class VerticalCRS(CoordinateReferenceSystem):
    """One-dimensional height or depth system."""

    datum: VerticalDatum = MEAN_SEA_LEVEL

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.dimension != 1:
            raise InvalidArgumentError(f"Vertical CRS '{self.name}' must be one-dimensional")

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return self.datum.equals_ignore_metadata(other.datum)


@dataclass(frozen=True)
class TemporalCRS(CoordinateReferenceSystem):
    """One-dimensional time system counted from the datum origin."""

    datum: TemporalDatum = UNIX_EPOCH

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.dimension != 1 or self.axes[0].unit.kind is not UnitKind.TIME:
            raise InvalidArgumentError(f"Temporal CRS '{self.name}' needs exactly one time axis")

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return self.datum.equals_ignore_metadata(other.datum)


@dataclass(frozen=True)
class CompoundCRS(CoordinateReferenceSystem):
    """Concatenation of independent CRSs, e.g. horizontal + vertical + time.

    Use ``CompoundCRS.of`` to build one; its axes are the components' axes
    in order.
    """

    components: Tuple[CoordinateReferenceSystem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", tuple(self.components))
        super().__post_init__()
        if len(self.components) < 2:
            raise InvalidArgumentError(f"Compound CRS '{self.name}' needs at least two components")
        expected = tuple(a for c in self.components for a in c.axes)
        if self.axes != expected:
            raise InvalidArgumentError(
                f"Compound CRS '{self.name}' axes must be the concatenation of its components' axes"
            )

    @classmethod
    def of(cls, name: str, *components: CoordinateReferenceSystem) -> CompoundCRS:
        return cls(name, tuple(a for c in components for a in c.axes), components)

    def equals_ignore_metadata(self, other: object) -> bool:
        if not super().equals_ignore_metadata(other):
            return False
        return len(self.components) == len(other.components) and all(
            a.equals_ignore_metadata(b) for a, b in zip(self.components, other.components)
        )


def equals_ignore_metadata(
    a: Optional[CoordinateReferenceSystem],
    b: Optional[CoordinateReferenceSystem],
) -> bool:
    """Compare two CRSs ignoring names. Two Nones are equal."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    return a.equals_ignore_metadata(b)


def is_generic(crs: CoordinateReferenceSystem) -> bool:
    return isinstance(crs, EngineeringCRS) and crs.generic


_CARTESIAN_DATUM = EngineeringDatum("Cartesian")
_UNKNOWN_DATUM = EngineeringDatum("Unknown")

WGS84 = GeographicCRS("WGS 84", (axes_module.LONGITUDE, axes_module.LATITUDE), WGS84_DATUM)
WGS84_3D = GeographicCRS(
    "WGS 84 (3D)",
    (axes_module.LONGITUDE, axes_module.LATITUDE, axes_module.ELLIPSOIDAL_HEIGHT),
    WGS84_DATUM,
)
CARTESIAN_2D = EngineeringCRS("Cartesian 2D", (axes_module.X, axes_module.Y), _CARTESIAN_DATUM)
CARTESIAN_3D = EngineeringCRS(
    "Cartesian 3D", (axes_module.X, axes_module.Y, axes_module.Z), _CARTESIAN_DATUM
)
GENERIC_2D = EngineeringCRS(
    "Generic cartesian 2D", (axes_module.X, axes_module.Y), _UNKNOWN_DATUM, generic=True
)
GENERIC_3D = EngineeringCRS(
    "Generic cartesian 3D", (axes_module.X, axes_module.Y, axes_module.Z), _UNKNOWN_DATUM, generic=True
)
ELLIPSOIDAL_HEIGHT = VerticalCRS("Ellipsoidal height", (axes_module.ELLIPSOIDAL_HEIGHT,), ELLIPSOID_SURFACE)
MEAN_SEA_LEVEL_HEIGHT = VerticalCRS(
    "Mean sea level height", (axes_module.GRAVITY_RELATED_HEIGHT,), MEAN_SEA_LEVEL
)
UNIX_TIME = TemporalCRS("Unix time (days)", (axes_module.TIME,), UNIX_EPOCH)
