"""Axes, datums and coordinate reference systems."""

from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.crs.datum import (
    EngineeringDatum,
    Ellipsoid,
    GeodeticDatum,
    PrimeMeridian,
    TemporalDatum,
    VerticalDatum,
)
from crs_transform.crs.reference_system import (
    CARTESIAN_2D,
    CARTESIAN_3D,
    GENERIC_2D,
    GENERIC_3D,
    UNIX_TIME,
    WGS84,
    WGS84_3D,
    CompoundCRS,
    CoordinateReferenceSystem,
    EngineeringCRS,
    GeographicCRS,
    ProjectedCRS,
    TemporalCRS,
    VerticalCRS,
    equals_ignore_metadata,
    is_generic,
)

__all__ = [
    # Axes
    "AxisDirection",
    "CoordinateSystemAxis",
    # Datums
    "Ellipsoid",
    "PrimeMeridian",
    "GeodeticDatum",
    "EngineeringDatum",
    "VerticalDatum",
    "TemporalDatum",
    # Reference systems
    "CoordinateReferenceSystem",
    "GeographicCRS",
    "ProjectedCRS",
    "EngineeringCRS",
    "VerticalCRS",
    "TemporalCRS",
    "CompoundCRS",
    "equals_ignore_metadata",
    "is_generic",
    "WGS84",
    "WGS84_3D",
    "CARTESIAN_2D",
    "CARTESIAN_3D",
    "GENERIC_2D",
    "GENERIC_3D",
    "UNIX_TIME",
]
