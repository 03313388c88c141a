"""
Coordinate operations and the factory resolving them between two CRSs.

The factory handles the cases that need no external data:
    - identical CRSs, and generic placeholder CRSs of the same dimension,
      resolve to the identity;
    - CRSs on the same datum resolve to an axis order/direction/unit
      alignment, plus prime meridian or time origin shifts;
    - geographic <-> projected CRSs on the same ellipsoid resolve to
      alignment + map projection (or its inverse) + alignment;
    - compound CRSs resolve component by component.

Everything else, datum shifts included, raises OperationNotFoundError.
Resolved operations are immutable; callers that transform many points
between the same pair of CRSs should keep the operation rather than
resolving it again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from crs_transform.crs import axis as axes_module
from crs_transform.crs.axis import CoordinateSystemAxis
from crs_transform.crs.reference_system import (
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
from crs_transform.exceptions import (
    InvalidArgumentError,
    MismatchedDimensionError,
    OperationNotFoundError,
)
from crs_transform.geometry.direct_position import GeneralDirectPosition
from crs_transform.geometry.envelope import GeneralEnvelope, check_compatible_crs
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.operation.matrix import swap_and_scale_axes, translation_matrix
from crs_transform.operation.transform import (
    IdentityTransform,
    MathTransform,
    concatenate,
    transform_envelope,
)

logger = logging.getLogger(__name__)

IDENTITY = "Identity"
AXIS_CHANGES = "Axis changes"
MAP_PROJECTION = "Map projection"
INVERSE_PROJECTION = "Inverse map projection"
CONVERSION = "Conversion"
TIME_SHIFT = "Time origin shift"
COMPOUND = "Compound operation"

SECONDS_PER_DAY = 86400.0

# Axes the projection equations work in
_GEOGRAPHIC_2D = (axes_module.LONGITUDE, axes_module.LATITUDE)
_GEOGRAPHIC_3D = _GEOGRAPHIC_2D + (axes_module.ELLIPSOIDAL_HEIGHT,)
_PROJECTED = (axes_module.EASTING, axes_module.NORTHING)
_TIME = (axes_module.TIME,)


@dataclass(frozen=True)
class CoordinateOperation:
    """A resolved path from one CRS to another.

    Attributes:
        name: Kind of operation, e.g. "Identity" or "Map projection".
        source_crs: CRS of input coordinates.
        target_crs: CRS of output coordinates.
        math_transform: Transform doing the numeric work.
        method: Projection method name when a projection is involved.
    """

    name: str
    source_crs: CoordinateReferenceSystem
    target_crs: CoordinateReferenceSystem
    math_transform: MathTransform
    method: Optional[str] = None

    def __post_init__(self) -> None:
        if self.math_transform.source_dimensions != self.source_crs.dimension:
            raise MismatchedDimensionError(
                f"Transform expects {self.math_transform.source_dimensions} dimension(s) "
                f"but source CRS '{self.source_crs.name}' has {self.source_crs.dimension}"
            )
        if self.math_transform.target_dimensions != self.target_crs.dimension:
            raise MismatchedDimensionError(
                f"Transform produces {self.math_transform.target_dimensions} dimension(s) "
                f"but target CRS '{self.target_crs.name}' has {self.target_crs.dimension}"
            )

    def is_identity(self) -> bool:
        return self.math_transform.is_identity()

    def transform(self, position: GeneralDirectPosition) -> GeneralDirectPosition:
        """Transform a position expressed in the source CRS (or without CRS).

        Returns:
            New position tagged with the target CRS.

        Raises:
            MismatchedReferenceSystemError: If the position has another CRS.
        """
        check_compatible_crs(self.source_crs, position.crs)
        result = self.math_transform.transform(position)
        result.crs = self.target_crs
        return result

    def transform_points(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return self.math_transform.transform_points(points)

    def transform_envelope(self, envelope: GeneralEnvelope) -> GeneralEnvelope:
        """Bounding box in the target CRS of an envelope in the source CRS."""
        check_compatible_crs(self.source_crs, envelope.crs)
        result = transform_envelope(self.math_transform, envelope)
        result.crs = self.target_crs
        return result

    def inverse(self) -> CoordinateOperation:
        return CoordinateOperation(
            f"Inverse of {self.name}",
            self.target_crs,
            self.source_crs,
            self.math_transform.inverse(),
            self.method,
        )


class CoordinateOperationFactory:
    """Resolves coordinate operations between CRS descriptors.

    Each instance owns its math transform factory (a fresh one unless given)
    and keeps no other state, so one instance can be shared between threads.

    Example:
        >>> factory = CoordinateOperationFactory()
        >>> op = factory.create_operation(WGS84, GENERIC_2D)
        >>> op.is_identity()
        True
    """

    def __init__(self, transform_factory: Optional[MathTransformFactory] = None):
        self._transforms = transform_factory if transform_factory is not None else MathTransformFactory()

    def create_operation(
        self,
        source: CoordinateReferenceSystem,
        target: CoordinateReferenceSystem,
    ) -> CoordinateOperation:
        """Find the operation converting coordinates from ``source`` to ``target``.

        Raises:
            OperationNotFoundError: If no operation connects the two CRSs.
        """
        if source is target or equals_ignore_metadata(source, target):
            return self._identity(source, target)
        if (is_generic(source) or is_generic(target)) and source.dimension == target.dimension:
            return self._identity(source, target)

        transform, name, method = self._create_transform(source, target)
        operation = CoordinateOperation(name, source, target, transform, method)
        logger.debug(f"Created '{name}' operation from '{source.name}' to '{target.name}': {transform!r}")
        return operation

    def _identity(self, source: CoordinateReferenceSystem, target: CoordinateReferenceSystem) -> CoordinateOperation:
        return CoordinateOperation(IDENTITY, source, target, IdentityTransform(source.dimension))

    def _create_transform(
        self,
        source: CoordinateReferenceSystem,
        target: CoordinateReferenceSystem,
    ) -> Tuple[MathTransform, str, Optional[str]]:
        if isinstance(source, EngineeringCRS) and isinstance(target, EngineeringCRS):
            self._require_same_datum(source, target)
            return self._align(source.axes, target.axes, source, target), AXIS_CHANGES, None

        if isinstance(source, GeographicCRS) and isinstance(target, GeographicCRS):
            self._require_same_datum(source, target)
            self._require_same_dimension(source, target)
            transform = concatenate(
                self._to_greenwich(source, source.axes),
                self._from_greenwich(target, target.axes),
            )
            return transform, AXIS_CHANGES, None

        if isinstance(source, GeographicCRS) and isinstance(target, ProjectedCRS):
            self._require_same_datum(source, target.base_crs)
            self._require_same_dimension(source, target)
            projection = self._transforms.create_parameterized_transform(target.conversion)
            transform = concatenate(
                self._to_greenwich(source, source.axes),
                self._from_greenwich(target.base_crs, _GEOGRAPHIC_2D),
                projection,
                self._align(_PROJECTED, target.axes, source, target),
            )
            return transform, MAP_PROJECTION, target.conversion.method

        if isinstance(source, ProjectedCRS) and isinstance(target, GeographicCRS):
            self._require_same_datum(source.base_crs, target)
            self._require_same_dimension(source, target)
            projection = self._transforms.create_parameterized_transform(source.conversion)
            transform = concatenate(
                self._align(source.axes, _PROJECTED, source, target),
                projection.inverse(),
                self._to_greenwich(source.base_crs, _GEOGRAPHIC_2D),
                self._from_greenwich(target, target.axes),
            )
            return transform, INVERSE_PROJECTION, source.conversion.method

        if isinstance(source, ProjectedCRS) and isinstance(target, ProjectedCRS):
            self._require_same_datum(source.base_crs, target.base_crs)
            source_projection = self._transforms.create_parameterized_transform(source.conversion)
            target_projection = self._transforms.create_parameterized_transform(target.conversion)
            transform = concatenate(
                self._align(source.axes, _PROJECTED, source, target),
                source_projection.inverse(),
                self._to_greenwich(source.base_crs, _GEOGRAPHIC_2D),
                self._from_greenwich(target.base_crs, _GEOGRAPHIC_2D),
                target_projection,
                self._align(_PROJECTED, target.axes, source, target),
            )
            return transform, CONVERSION, target.conversion.method

        if isinstance(source, VerticalCRS) and isinstance(target, VerticalCRS):
            self._require_same_datum(source, target)
            return self._align(source.axes, target.axes, source, target), AXIS_CHANGES, None

        if isinstance(source, TemporalCRS) and isinstance(target, TemporalCRS):
            shift = (source.datum.origin - target.datum.origin).total_seconds() / SECONDS_PER_DAY
            transform = concatenate(
                self._align(source.axes, _TIME, source, target),
                self._transforms.create_affine_transform(translation_matrix([shift])),
                self._align(_TIME, target.axes, source, target),
            )
            return transform, TIME_SHIFT, None

        if isinstance(source, CompoundCRS) and isinstance(target, CompoundCRS):
            return self._compound(source, target), COMPOUND, None

        raise OperationNotFoundError(
            f"No operation found from '{source.name}' ({type(source).__name__}) "
            f"to '{target.name}' ({type(target).__name__})"
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _align(
        self,
        source_axes: Sequence[CoordinateSystemAxis],
        target_axes: Sequence[CoordinateSystemAxis],
        source: CoordinateReferenceSystem,
        target: CoordinateReferenceSystem,
    ) -> MathTransform:
        """Axis order, direction and unit alignment, reported as OperationNotFound on failure."""
        try:
            matrix = swap_and_scale_axes(source_axes, target_axes)
        except InvalidArgumentError as e:
            raise OperationNotFoundError(
                f"Cannot align axes of '{source.name}' with '{target.name}': {e}"
            ) from e
        return self._transforms.create_affine_transform(matrix)

    def _to_greenwich(self, crs: GeographicCRS, axes: Sequence[CoordinateSystemAxis]) -> MathTransform:
        """From ``axes`` of ``crs`` to (longitude, latitude[, height]) east of Greenwich in degrees."""
        normalized = _GEOGRAPHIC_3D if len(axes) == 3 else _GEOGRAPHIC_2D
        offsets = [0.0] * len(normalized)
        offsets[0] = crs.datum.prime_meridian.greenwich_longitude
        return concatenate(
            self._align(axes, normalized, crs, crs),
            self._transforms.create_affine_transform(translation_matrix(offsets)),
        )

    def _from_greenwich(self, crs: GeographicCRS, axes: Sequence[CoordinateSystemAxis]) -> MathTransform:
        normalized = _GEOGRAPHIC_3D if len(axes) == 3 else _GEOGRAPHIC_2D
        offsets = [0.0] * len(normalized)
        offsets[0] = -crs.datum.prime_meridian.greenwich_longitude
        return concatenate(
            self._transforms.create_affine_transform(translation_matrix(offsets)),
            self._align(normalized, axes, crs, crs),
        )

    def _compound(self, source: CompoundCRS, target: CompoundCRS) -> MathTransform:
        if len(source.components) != len(target.components):
            raise OperationNotFoundError(
                f"Compound CRSs '{source.name}' and '{target.name}' have different component counts"
            )
        steps = []
        done = 0
        remaining = source.dimension
        for src, tgt in zip(source.components, target.components):
            remaining -= src.dimension
            step = self.create_operation(src, tgt).math_transform
            steps.append(self._transforms.create_pass_through_transform(done, step, remaining))
            done += tgt.dimension
        return concatenate(*steps)

    @staticmethod
    def _require_same_datum(source: CoordinateReferenceSystem, target: CoordinateReferenceSystem) -> None:
        if not source.datum.equals_ignore_metadata(target.datum):
            raise OperationNotFoundError(
                f"No operation found from '{source.name}' to '{target.name}': "
                f"datum '{source.datum.name}' differs from '{target.datum.name}' "
                f"and datum shifts are not supported"
            )

    @staticmethod
    def _require_same_dimension(source: CoordinateReferenceSystem, target: CoordinateReferenceSystem) -> None:
        if source.dimension != target.dimension:
            raise OperationNotFoundError(
                f"No operation found from '{source.name}' ({source.dimension}D) "
                f"to '{target.name}' ({target.dimension}D): dimension changes are not supported"
            )
