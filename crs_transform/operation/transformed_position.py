"""Position that reprojects incoming positions into a fixed target CRS."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from crs_transform.crs.reference_system import CoordinateReferenceSystem, equals_ignore_metadata
from crs_transform.geometry.direct_position import GeneralDirectPosition
from crs_transform.operation.coordinate_operation import CoordinateOperationFactory
from crs_transform.operation.transform import MathTransform

logger = logging.getLogger(__name__)


class TransformedDirectPosition(GeneralDirectPosition):
    """Position in a target CRS, set by transforming positions from other CRSs.

    Transforming many points that share a source CRS resolves the coordinate
    operation once: the last (source CRS, transform) pair is kept in this
    instance and reused until a position with another CRS arrives or the
    target CRS changes. The cache belongs to the instance; like any
    position, an instance must not be used from several threads at once.

    Example:
        >>> pos = TransformedDirectPosition(utm_crs)
        >>> for lon, lat in points:
        ...     pos.transform(DirectPosition2D(lon, lat, WGS84))
        ...     print(pos.coordinates)
    """

    def __init__(
        self,
        target_crs: CoordinateReferenceSystem,
        factory: Optional[CoordinateOperationFactory] = None,
    ):
        self._factory = factory if factory is not None else CoordinateOperationFactory()
        self._source_crs: Optional[CoordinateReferenceSystem] = None
        self._forward: Optional[MathTransform] = None
        self._inverse: Optional[MathTransform] = None
        super().__init__(np.zeros(target_crs.dimension), target_crs)

    def _set_crs(self, crs: Optional[CoordinateReferenceSystem]) -> None:
        GeneralDirectPosition.crs.fset(self, crs)
        self._invalidate()

    crs = property(GeneralDirectPosition.crs.fget, _set_crs)

    def _invalidate(self) -> None:
        self._source_crs = None
        self._forward = None
        self._inverse = None

    def set_location(self, other: GeneralDirectPosition) -> None:
        super().set_location(other)
        self._invalidate()

    def _forward_from(self, source_crs: CoordinateReferenceSystem) -> MathTransform:
        cached = self._source_crs
        if self._forward is None or not (cached is source_crs or equals_ignore_metadata(cached, source_crs)):
            operation = self._factory.create_operation(source_crs, self.crs)
            self._source_crs = source_crs
            self._forward = operation.math_transform
            self._inverse = None
            logger.debug(f"Cached '{operation.name}' operation from '{source_crs.name}'")
        return self._forward

    def transform(self, position: GeneralDirectPosition) -> None:
        """Set this position to ``position`` expressed in the target CRS.

        A position without CRS is assumed to be in the target CRS already.

        Raises:
            OperationNotFoundError: If no operation leads from the position's CRS.
            TransformDomainError: If the position cannot be transformed.
        """
        if position.crs is None:
            self.set_coordinates(position.coordinates)
            return
        self._forward_from(position.crs).transform(position, self)

    def inverse_transform(self, crs: CoordinateReferenceSystem) -> GeneralDirectPosition:
        """Return this position expressed in ``crs``."""
        self._forward_from(crs)
        if self._inverse is None:
            self._inverse = self._forward.inverse()
        result = self._inverse.transform(self)
        result.crs = crs
        return result
