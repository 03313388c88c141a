"""
Factory for math transforms.

Creates affine, concatenated and pass-through transforms, and parameterized
transforms (map projections) from a named parameter group:

    >>> factory = MathTransformFactory()
    >>> params = factory.get_default_parameters("Lambert_Conformal_Conic_2SP")
    >>> params["semi_major"] = 6378206.4
    >>> params["semi_minor"] = 6356583.8
    >>> params["standard_parallel_1"] = 28.383333333
    >>> params["standard_parallel_2"] = 30.283333333
    >>> transform = factory.create_parameterized_transform(params)
"""

import logging
from typing import Callable, Dict, List

from crs_transform.exceptions import InvalidArgumentError
from crs_transform.geometry.direct_position import check_dimension
from crs_transform.operation.matrix import AffineMatrix
from crs_transform.operation.projection import (
    MapProjection,
    ProjectionKind,
    default_parameters,
)
from crs_transform.operation.transform import (
    IdentityTransform,
    MathTransform,
    PassThroughTransform,
    affine,
    concatenate,
)
from crs_transform.parameters import ParameterValueGroup

logger = logging.getLogger(__name__)

TransformBuilder = Callable[[ParameterValueGroup], MathTransform]


class MathTransformFactory:
    """Factory for math transforms.

    Each factory owns a registry mapping ProjectionKind to the callable
    building its transform from a parameter group. A new factory starts with
    the built-in map projections; builders registered on one instance, e.g.
    an instrumented projection in tests, never affect other instances.

    Attributes:
        _registry: Dictionary mapping ProjectionKind to transform builders.
    """

    def __init__(self):
        self._registry: Dict[ProjectionKind, TransformBuilder] = {
            kind: MapProjection.from_parameters for kind in ProjectionKind
        }

    def register(self, kind: ProjectionKind, builder: TransformBuilder) -> None:
        if kind in self._registry:
            logger.warning(f"Overriding transform builder for {kind.value}")
        self._registry[kind] = builder
        logger.info(f"Registered transform builder for {kind.value}")

    def available_methods(self) -> List[str]:
        """OGC names of the registered projection methods."""
        return [kind.value for kind in self._registry]

    def _resolve(self, method: str) -> ProjectionKind:
        try:
            kind = ProjectionKind.parse(method)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from None
        if kind not in self._registry:
            raise InvalidArgumentError(
                f"Method '{method}' not registered. "
                f"Available methods: {', '.join(self.available_methods())}"
            )
        return kind

    def get_default_parameters(self, method: str) -> ParameterValueGroup:
        """Return a fresh parameter group for ``method`` with default values.

        Args:
            method: OGC, EPSG or GeoTIFF method name, e.g. "Mercator_1SP" or
                "Lambert Conic Conformal (2SP)".

        Raises:
            InvalidArgumentError: If the method is unknown.
        """
        return default_parameters(self._resolve(method))

    def create_parameterized_transform(self, parameters: ParameterValueGroup) -> MathTransform:
        """Build the transform described by a parameter group.

        Raises:
            InvalidArgumentError: If the method is unknown, a mandatory
                parameter is missing or a value is invalid.
        """
        kind = self._resolve(parameters.method)
        transform = self._registry[kind](parameters)
        logger.debug(f"Created parameterized transform {kind.value}")
        return transform

    @staticmethod
    def create_affine_transform(matrix: AffineMatrix) -> MathTransform:
        """Affine transform for ``matrix``; identity matrices give IdentityTransform."""
        return affine(matrix)

    @staticmethod
    def create_concatenated_transform(*transforms: MathTransform) -> MathTransform:
        return concatenate(*transforms)

    @staticmethod
    def create_pass_through_transform(
        first_affected: int, sub_transform: MathTransform, num_trailing: int
    ) -> MathTransform:
        """Apply ``sub_transform`` to ordinates ``first_affected`` onward, keeping ``num_trailing``."""
        if sub_transform.is_identity():
            check_dimension("sub_transform", sub_transform.source_dimensions, sub_transform.target_dimensions)
            return IdentityTransform(first_affected + sub_transform.source_dimensions + num_trailing)
        if first_affected == 0 and num_trailing == 0:
            return sub_transform
        return PassThroughTransform(first_affected, sub_transform, num_trailing)
