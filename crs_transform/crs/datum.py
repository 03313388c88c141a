"""Ellipsoids, prime meridians and datums."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from crs_transform.exceptions import InvalidArgumentError
from crs_transform.types import Degrees, Meters, Unitless


@dataclass(frozen=True)
class Ellipsoid:
    """Reference ellipsoid defined by its semi-axes in metres.

    Attributes:
        name: Ellipsoid name, e.g. "WGS 84".
        semi_major: Equatorial radius.
        semi_minor: Polar radius. Equal to ``semi_major`` for a sphere.
    """

    name: str
    semi_major: Meters
    semi_minor: Meters

    def __post_init__(self) -> None:
        if not (self.semi_major > 0 and self.semi_minor > 0):
            raise InvalidArgumentError(
                f"Ellipsoid axes must be positive, got a={self.semi_major}, b={self.semi_minor}"
            )
        if self.semi_minor > self.semi_major:
            raise InvalidArgumentError(
                f"Semi-minor axis {self.semi_minor} exceeds semi-major axis {self.semi_major}"
            )

    @classmethod
    def from_inverse_flattening(cls, name: str, semi_major: float, inverse_flattening: float) -> Ellipsoid:
        """Create an ellipsoid from a and 1/f. An infinite 1/f gives a sphere."""
        if math.isinf(inverse_flattening):
            return cls(name, Meters(semi_major), Meters(semi_major))
        semi_minor = semi_major * (1.0 - 1.0 / inverse_flattening)
        return cls(name, Meters(semi_major), Meters(semi_minor))

    @classmethod
    def sphere(cls, name: str, radius: float) -> Ellipsoid:
        return cls(name, Meters(radius), Meters(radius))

    @property
    def is_sphere(self) -> bool:
        return self.semi_major == self.semi_minor

    @property
    def eccentricity_squared(self) -> Unitless:
        ratio = self.semi_minor / self.semi_major
        return Unitless(1.0 - ratio * ratio)

    @property
    def eccentricity(self) -> Unitless:
        return Unitless(math.sqrt(self.eccentricity_squared))

    @property
    def inverse_flattening(self) -> float:
        if self.is_sphere:
            return math.inf
        return self.semi_major / (self.semi_major - self.semi_minor)

    def equals_ignore_metadata(self, other: Ellipsoid) -> bool:
        return self.semi_major == other.semi_major and self.semi_minor == other.semi_minor


WGS84_ELLIPSOID = Ellipsoid.from_inverse_flattening("WGS 84", 6378137.0, 298.257223563)
GRS80 = Ellipsoid.from_inverse_flattening("GRS 1980", 6378137.0, 298.257222101)
CLARKE_1866 = Ellipsoid("Clarke 1866", Meters(6378206.4), Meters(6356583.8))
INTERNATIONAL_1924 = Ellipsoid.from_inverse_flattening("International 1924", 6378388.0, 297.0)
BESSEL_1841 = Ellipsoid.from_inverse_flattening("Bessel 1841", 6377397.155, 299.1528128)
SPHERE = Ellipsoid.sphere("GRS 1980 Authalic Sphere", 6371007.0)


@dataclass(frozen=True)
class PrimeMeridian:
    """Origin of longitudes, given as its longitude east of Greenwich in degrees."""

    name: str
    greenwich_longitude: Degrees = Degrees(0.0)


GREENWICH = PrimeMeridian("Greenwich", Degrees(0.0))
PARIS = PrimeMeridian("Paris", Degrees(2.33722917))


@dataclass(frozen=True)
class GeodeticDatum:
    """Horizontal datum: an ellipsoid plus a prime meridian."""

    name: str
    ellipsoid: Ellipsoid
    prime_meridian: PrimeMeridian = GREENWICH

    def equals_ignore_metadata(self, other: object) -> bool:
        """Compare ellipsoid axes. Prime meridians are compared by the CRS."""
        if not isinstance(other, GeodeticDatum):
            return False
        return self.ellipsoid.equals_ignore_metadata(other.ellipsoid)


WGS84_DATUM = GeodeticDatum("World Geodetic System 1984", WGS84_ELLIPSOID)


@dataclass(frozen=True)
class EngineeringDatum:
    """Local datum for engineering and image coordinate systems."""

    name: str

    def equals_ignore_metadata(self, other: object) -> bool:
        return isinstance(other, EngineeringDatum)


@dataclass(frozen=True)
class VerticalDatum:
    """Reference surface for heights, e.g. "Ellipsoid" or "Mean Sea Level"."""

    name: str

    def equals_ignore_metadata(self, other: object) -> bool:
        return isinstance(other, VerticalDatum) and self.name == other.name


@dataclass(frozen=True)
class TemporalDatum:
    """Time origin (epoch) of a temporal coordinate system."""

    name: str
    origin: datetime = field(default_factory=lambda: datetime(1970, 1, 1, tzinfo=timezone.utc))

    def equals_ignore_metadata(self, other: object) -> bool:
        return isinstance(other, TemporalDatum) and self.origin == other.origin


ELLIPSOID_SURFACE = VerticalDatum("Ellipsoid")
MEAN_SEA_LEVEL = VerticalDatum("Mean Sea Level")
UNIX_EPOCH = TemporalDatum("Unix epoch", datetime(1970, 1, 1, tzinfo=timezone.utc))
MODIFIED_JULIAN = TemporalDatum("Modified Julian", datetime(1858, 11, 17, tzinfo=timezone.utc))
