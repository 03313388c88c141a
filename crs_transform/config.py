"""
Configuration for the referencing tools.

Holds display settings and a catalog of named coordinate reference systems
loaded from YAML:

    referencing:
      precision: 6
      default_source: wgs84
      crs:
        wgs84:
          type: geographic
          ellipsoid: WGS 84
        world_mercator:
          type: projected
          base: wgs84
          method: Mercator_1SP
          parameters:
            central_meridian: 0.0
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import yaml

from crs_transform import units
from crs_transform.crs import axis as axes_module
from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.crs.datum import (
    BESSEL_1841,
    CLARKE_1866,
    GRS80,
    INTERNATIONAL_1924,
    SPHERE,
    WGS84_ELLIPSOID,
    EngineeringDatum,
    Ellipsoid,
    GeodeticDatum,
    PrimeMeridian,
    TemporalDatum,
    VerticalDatum,
)
from crs_transform.crs.reference_system import (
    CompoundCRS,
    CoordinateReferenceSystem,
    EngineeringCRS,
    GeographicCRS,
    ProjectedCRS,
    TemporalCRS,
    VerticalCRS,
)
from crs_transform.exceptions import ReferencingError
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.types import Degrees, Meters

logger = logging.getLogger(__name__)

CRS_TYPES = ("geographic", "projected", "engineering", "vertical", "temporal", "compound")

_NAMED_ELLIPSOIDS = {
    e.name.lower(): e for e in (WGS84_ELLIPSOID, GRS80, CLARKE_1866, INTERNATIONAL_1924, BESSEL_1841, SPHERE)
}

_NAMED_AXES = {
    "longitude": axes_module.LONGITUDE,
    "latitude": axes_module.LATITUDE,
    "height": axes_module.ELLIPSOIDAL_HEIGHT,
    "ellipsoidal_height": axes_module.ELLIPSOIDAL_HEIGHT,
    "gravity_height": axes_module.GRAVITY_RELATED_HEIGHT,
    "easting": axes_module.EASTING,
    "northing": axes_module.NORTHING,
    "x": axes_module.X,
    "y": axes_module.Y,
    "z": axes_module.Z,
    "time": axes_module.TIME,
}

_DEFAULT_AXES = {
    "geographic": ("longitude", "latitude"),
    "projected": ("easting", "northing"),
    "engineering": ("x", "y"),
    "vertical": ("gravity_height",),
    "temporal": ("time",),
}


@dataclass
class ReferencingConfig:
    """Configuration for the referencing tools.

    Attributes:
        precision: Number of decimals printed by the CLI.
        default_source: Catalog name used when no source CRS is given.
        crs_definitions: Raw catalog entries keyed by CRS name. Entries are
            validated when the configuration is loaded and turned into CRS
            objects by ``get_crs``.
    """
    precision: int = 6
    default_source: str = "wgs84"
    crs_definitions: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str) -> 'ReferencingConfig':
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            ReferencingConfig instance loaded from file

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If configuration file is malformed or contains invalid values

        Example:
            >>> config = ReferencingConfig.from_yaml('config/referencing.yaml')
            >>> config.crs_names()
            ['wgs84', 'wgs84_lat_lon', 'world_mercator', ...]
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(
                f"Configuration file is empty: {path}\n"
                f"Expected a 'referencing' section with a CRS catalog"
            )

        if 'referencing' not in data:
            raise ValueError(
                f"Configuration file missing 'referencing' section: {path}\n"
                f"Expected structure: referencing:\n  crs:\n    <name>: ..."
            )

        return cls.from_dict(data['referencing'])

    @classmethod
    def from_dict(cls, config: dict) -> 'ReferencingConfig':
        """Create configuration from dictionary.

        Args:
            config: Dictionary with optional keys 'precision',
                'default_source' and 'crs' (the catalog).

        Raises:
            ValueError: If configuration is invalid

        Example:
            >>> config = ReferencingConfig.from_dict({
            ...     'crs': {'paris': {'type': 'geographic', 'prime_meridian': 'Paris'}}
            ... })
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        precision = config.get('precision', 6)
        if not isinstance(precision, int) or isinstance(precision, bool) or precision < 0:
            raise ValueError(f"'precision' must be a non-negative integer, got {precision!r}")

        catalog = config.get('crs', {})
        if not isinstance(catalog, dict):
            raise ValueError(f"'crs' must be a mapping of names to definitions, got {type(catalog)}")

        result = cls(
            precision=precision,
            default_source=str(config.get('default_source', 'wgs84')),
            crs_definitions={str(name): dict(entry or {}) for name, entry in catalog.items()},
        )

        # Build every entry once so errors surface at load time
        for name in result.crs_definitions:
            try:
                result.get_crs(name)
            except KeyError as e:
                raise ValueError(f"CRS '{name}' refers to an unknown CRS: {e}") from e
        if result.crs_definitions and result.default_source not in result.crs_definitions:
            raise ValueError(
                f"Default source '{result.default_source}' is not in the CRS catalog. "
                f"Must be one of: {', '.join(result.crs_names())}"
            )
        logger.debug(f"Loaded {len(result.crs_definitions)} CRS definition(s)")
        return result

    def to_dict(self) -> dict:
        """Convert configuration to dictionary suitable for YAML serialization."""
        return {
            'precision': self.precision,
            'default_source': self.default_source,
            'crs': {name: dict(entry) for name, entry in self.crs_definitions.items()},
        }

    def crs_names(self) -> List[str]:
        return list(self.crs_definitions)

    def has_crs(self, name: str) -> bool:
        return name in self.crs_definitions

    def get_crs(self, name: str) -> CoordinateReferenceSystem:
        """Build the catalog CRS called ``name``.

        Raises:
            KeyError: If the name is not in the catalog
            ValueError: If the definition is invalid
        """
        return self._build(name, ())

    def _build(self, name: str, chain: tuple) -> CoordinateReferenceSystem:
        if name not in self.crs_definitions:
            raise KeyError(
                f"Unknown CRS '{name}'. "
                f"Must be one of: {', '.join(self.crs_names())}"
            )
        if name in chain:
            raise ValueError(f"CRS '{name}' refers to itself: {' -> '.join(chain + (name,))}")
        entry = self.crs_definitions[name]
        crs_type = entry.get('type')
        if crs_type not in CRS_TYPES:
            raise ValueError(
                f"Invalid type {crs_type!r} for CRS '{name}'. "
                f"Must be one of: {', '.join(CRS_TYPES)}"
            )
        display_name = str(entry.get('name', name))
        try:
            return self._build_typed(crs_type, display_name, entry, chain + (name,))
        except ReferencingError as e:
            raise ValueError(f"Invalid definition for CRS '{name}': {e}") from e

    def _build_typed(
        self, crs_type: str, name: str, entry: Dict[str, Any], chain: tuple
    ) -> CoordinateReferenceSystem:
        if crs_type == 'compound':
            components = entry.get('components')
            if not isinstance(components, list) or len(components) < 2:
                raise ValueError(f"Compound CRS '{name}' needs a 'components' list of at least two names")
            return CompoundCRS.of(name, *(self._build(str(c), chain) for c in components))

        axes = _parse_axes(entry.get('axes', _DEFAULT_AXES[crs_type]))
        if crs_type == 'geographic':
            datum = GeodeticDatum(
                str(entry.get('datum', name)),
                _parse_ellipsoid(entry.get('ellipsoid', 'WGS 84')),
                _parse_prime_meridian(entry.get('prime_meridian', 0.0)),
            )
            return GeographicCRS(name, axes, datum)

        if crs_type == 'projected':
            if 'base' not in entry or 'method' not in entry:
                raise ValueError(f"Projected CRS '{name}' needs 'base' and 'method' fields")
            base = self._build(str(entry['base']), chain)
            if not isinstance(base, GeographicCRS):
                raise ValueError(f"Base of projected CRS '{name}' must be a geographic CRS")
            conversion = MathTransformFactory().get_default_parameters(str(entry['method']))
            for key, value in (entry.get('parameters') or {}).items():
                conversion.set(str(key), value)
            return ProjectedCRS(name, axes, base_crs=base, conversion=conversion)

        if crs_type == 'engineering':
            datum = EngineeringDatum(str(entry.get('datum', name)))
            return EngineeringCRS(name, axes, datum, generic=bool(entry.get('generic', False)))

        if crs_type == 'vertical':
            return VerticalCRS(name, axes, VerticalDatum(str(entry.get('datum', 'Mean Sea Level'))))

        origin = _parse_datetime(entry.get('origin', '1970-01-01T00:00:00Z'))
        if 'unit' in entry:
            axes = (CoordinateSystemAxis("Time", "t", AxisDirection.FUTURE, _parse_unit(entry['unit'])),)
        return TemporalCRS(name, axes, TemporalDatum(str(entry.get('datum', name)), origin))


def _parse_unit(value: Any) -> units.Unit:
    return units.unit_for_name(str(value))


def _parse_axis(entry: Any) -> CoordinateSystemAxis:
    if isinstance(entry, str):
        key = entry.strip().lower()
        if key not in _NAMED_AXES:
            raise ValueError(
                f"Unknown axis '{entry}'. "
                f"Must be one of: {', '.join(_NAMED_AXES)} or a mapping with 'direction' and 'unit'"
            )
        return _NAMED_AXES[key]
    if not isinstance(entry, dict) or 'direction' not in entry:
        raise ValueError(f"Axis definition must be a name or a mapping with 'direction', got {entry!r}")
    direction = AxisDirection.parse(str(entry['direction']))
    unit = _parse_unit(entry.get('unit', 'metre'))
    name = str(entry.get('name', direction.value))
    return CoordinateSystemAxis(name, str(entry.get('abbreviation', name[:1])), direction, unit)


def _parse_axes(specs: Any) -> tuple:
    if not isinstance(specs, (list, tuple)) or not specs:
        raise ValueError(f"'axes' must be a non-empty list, got {specs!r}")
    return tuple(_parse_axis(s) for s in specs)


def _parse_ellipsoid(value: Any) -> Ellipsoid:
    if isinstance(value, str):
        key = value.strip().lower()
        if key not in _NAMED_ELLIPSOIDS:
            raise ValueError(
                f"Unknown ellipsoid '{value}'. "
                f"Must be one of: {', '.join(e.name for e in _NAMED_ELLIPSOIDS.values())}"
            )
        return _NAMED_ELLIPSOIDS[key]
    if not isinstance(value, dict) or 'semi_major' not in value:
        raise ValueError(f"Ellipsoid must be a name or a mapping with 'semi_major', got {value!r}")
    name = str(value.get('name', 'Custom ellipsoid'))
    semi_major = float(value['semi_major'])
    if 'inverse_flattening' in value:
        return Ellipsoid.from_inverse_flattening(name, semi_major, float(value['inverse_flattening']))
    return Ellipsoid(name, Meters(semi_major), Meters(float(value.get('semi_minor', semi_major))))


def _parse_prime_meridian(value: Any) -> PrimeMeridian:
    if isinstance(value, str):
        if value.strip().lower() == 'greenwich':
            return PrimeMeridian("Greenwich", Degrees(0.0))
        if value.strip().lower() == 'paris':
            return PrimeMeridian("Paris", Degrees(2.33722917))
        raise ValueError(f"Unknown prime meridian '{value}'. Use 'Greenwich', 'Paris' or degrees east")
    return PrimeMeridian(f"{float(value)}E", Degrees(float(value)))


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            raise ValueError(f"Invalid temporal origin {value!r}, expected an ISO 8601 date") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_default_config() -> ReferencingConfig:
    """Return the built-in catalog.

    Contains WGS 84 in both axis orders, World Mercator, a Lambert Conic
    Conformal zone, a local cartesian system and WGS 84 with height.

    Example:
        >>> config = get_default_config()
        >>> config.get_crs('world_mercator').conversion.method
        'Mercator_1SP'
    """
    return ReferencingConfig.from_dict({
        'precision': 6,
        'default_source': 'wgs84',
        'crs': {
            'wgs84': {'type': 'geographic', 'name': 'WGS 84', 'ellipsoid': 'WGS 84'},
            'wgs84_lat_lon': {
                'type': 'geographic', 'name': 'WGS 84 (lat/lon)', 'ellipsoid': 'WGS 84',
                'axes': ['latitude', 'longitude'],
            },
            'world_mercator': {
                'type': 'projected', 'name': 'WGS 84 / World Mercator', 'base': 'wgs84',
                'method': 'Mercator_1SP',
            },
            'texas_central': {
                'type': 'geographic', 'name': 'NAD27', 'ellipsoid': 'Clarke 1866',
            },
            'texas_lambert': {
                'type': 'projected', 'name': 'NAD27 / Texas South Central', 'base': 'texas_central',
                'method': 'Lambert_Conformal_Conic_2SP',
                'parameters': {
                    'central_meridian': -99.0,
                    'latitude_of_origin': 27.833333333,
                    'standard_parallel_1': 28.383333333,
                    'standard_parallel_2': 30.283333333,
                    'false_easting': 609601.2192,
                },
            },
            'local': {'type': 'engineering', 'name': 'Local cartesian'},
            'msl_height': {'type': 'vertical', 'name': 'Mean sea level height'},
            'wgs84_msl': {'type': 'compound', 'name': 'WGS 84 + MSL height', 'components': ['wgs84', 'msl_height']},
        },
    })
