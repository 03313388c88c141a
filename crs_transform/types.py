"""
Unit type annotations for numeric parameters.

NewType aliases used across crs_transform to document the expected unit of
scalar arguments (projection parameters, ellipsoid axes, angles). They have
no runtime cost and let static type checkers catch mixed units.

Usage Example:
    >>> from crs_transform.types import Degrees, Meters
    >>>
    >>> def semi_axis(value: Meters) -> Meters:
    ...     return value
"""

from typing import NewType

# Angular units
Degrees = NewType('Degrees', float)
"""Angle in degrees (e.g., longitude, latitude, central meridian, standard parallels)"""

Radians = NewType('Radians', float)
"""Angle in radians (e.g., intermediate values inside projection equations)"""

# Distance units
Meters = NewType('Meters', float)
"""Distance in meters (e.g., semi-major axis, false easting, projected ordinates)"""

# Dimensionless quantities
Unitless = NewType('Unitless', float)
"""Dimensionless scalar (e.g., scale factor, eccentricity, cone constant)"""
