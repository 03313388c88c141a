"""
Build coordinate reference systems from pyproj definitions.

Accepts anything ``pyproj.CRS.from_user_input`` understands (EPSG codes,
WKT, PROJ strings) and maps it onto the reference systems of this package:

    >>> lambert = from_pyproj("EPSG:32040")
    >>> lambert.conversion.method
    'Lambert_Conformal_Conic_2SP'

Only geographic, projected (Mercator and Lambert Conformal Conic methods),
vertical and compound definitions are supported.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

from crs_transform import units
from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.crs.datum import Ellipsoid, GeodeticDatum, PrimeMeridian, VerticalDatum
from crs_transform.crs.reference_system import (
    CompoundCRS,
    CoordinateReferenceSystem,
    GeographicCRS,
    ProjectedCRS,
    VerticalCRS,
)
from crs_transform.exceptions import InvalidArgumentError, ParameterNotFoundError
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.parameters import ParameterValueGroup
from crs_transform.types import Degrees, Meters

try:
    from pyproj import CRS
    from pyproj.exceptions import CRSError
    PYPROJ_AVAILABLE = True
except ImportError:
    PYPROJ_AVAILABLE = False

logger = logging.getLogger(__name__)


def _unit(name: str, owner: str) -> units.Unit:
    try:
        return units.unit_for_name(name)
    except ValueError as e:
        raise InvalidArgumentError(f"{owner}: {e}") from None


def _convert_axis(info: Any) -> CoordinateSystemAxis:
    try:
        direction = AxisDirection.parse(info.direction)
    except ValueError:
        direction = AxisDirection.OTHER
    unit = _unit(info.unit_name, f"Axis '{info.name}'")
    return CoordinateSystemAxis(info.name, info.abbrev, direction, unit)


def _convert_axes(crs: Any) -> Tuple[CoordinateSystemAxis, ...]:
    return tuple(_convert_axis(info) for info in crs.axis_info)


def _convert_datum(crs: Any) -> GeodeticDatum:
    source = crs.ellipsoid
    ellipsoid = Ellipsoid(source.name, Meters(source.semi_major_metre), Meters(source.semi_minor_metre))
    meridian = crs.prime_meridian
    unit = _unit(meridian.unit_name, f"Prime meridian '{meridian.name}'")
    longitude = meridian.longitude * unit.converter_to(units.DEGREE)
    datum_name = crs.datum.name if crs.datum is not None else crs.name
    return GeodeticDatum(datum_name, ellipsoid, PrimeMeridian(meridian.name, Degrees(longitude)))


def _convert_geographic(crs: Any) -> GeographicCRS:
    return GeographicCRS(crs.name, _convert_axes(crs), _convert_datum(crs))


def _convert_conversion(operation: Any) -> ParameterValueGroup:
    group = MathTransformFactory().get_default_parameters(operation.method_name)
    for param in operation.params:
        unit = _unit(param.unit_name, f"Parameter '{param.name}'") if param.unit_name else None
        try:
            group.set(param.name, param.value, unit)
        except ParameterNotFoundError:
            if param.value != 0:
                raise InvalidArgumentError(
                    f"Parameter '{param.name}' = {param.value} is not supported "
                    f"by method '{group.method}'"
                ) from None
            logger.debug(f"Ignoring zero-valued parameter '{param.name}'")
    return group


def _convert(crs: Any) -> CoordinateReferenceSystem:
    if crs.is_compound:
        return CompoundCRS.of(crs.name, *(_convert(sub) for sub in crs.sub_crs_list))
    if crs.is_projected:
        if crs.coordinate_operation is None:
            raise InvalidArgumentError(f"Projected CRS '{crs.name}' has no conversion")
        return ProjectedCRS(
            crs.name,
            _convert_axes(crs),
            base_crs=_convert_geographic(crs.geodetic_crs),
            conversion=_convert_conversion(crs.coordinate_operation),
        )
    if crs.is_geographic:
        return _convert_geographic(crs)
    if crs.is_vertical:
        datum_name = crs.datum.name if crs.datum is not None else crs.name
        return VerticalCRS(crs.name, _convert_axes(crs), VerticalDatum(datum_name))
    raise InvalidArgumentError(f"Unsupported CRS type '{crs.type_name}' for '{crs.name}'")


def from_pyproj(user_input: Any) -> CoordinateReferenceSystem:
    """
    Convert a pyproj CRS definition.

    Args:
        user_input: A ``pyproj.CRS`` or any input accepted by
            ``pyproj.CRS.from_user_input``, e.g. "EPSG:3395" or a WKT string.

    Returns:
        The equivalent CoordinateReferenceSystem.

    Raises:
        ImportError: If pyproj is not installed.
        InvalidArgumentError: If the definition cannot be parsed, or its CRS
            type, projection method, a parameter or an axis unit is not
            supported.
    """
    if not PYPROJ_AVAILABLE:
        raise ImportError(
            "pyproj is required to read CRS definitions. "
            "Install with: pip install pyproj"
        )
    try:
        crs = CRS.from_user_input(user_input)
    except CRSError as e:
        raise InvalidArgumentError(f"Invalid CRS definition {user_input!r}: {e}") from e
    result = _convert(crs)
    logger.debug(f"Converted pyproj CRS '{crs.name}' ({result.dimension}D)")
    return result
