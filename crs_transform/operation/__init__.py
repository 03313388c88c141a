"""Matrices, math transforms, map projections and coordinate operations."""

from crs_transform.operation.coordinate_operation import CoordinateOperation, CoordinateOperationFactory
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.operation.matrix import (
    AffineMatrix,
    axis_swap_matrix,
    envelope_matrix,
    swap_and_scale_axes,
    translation_matrix,
)
from crs_transform.operation.projection import InverseMapProjection, MapProjection, ProjectionKind
from crs_transform.operation.transform import (
    AffineTransform,
    ConcatenatedTransform,
    IdentityTransform,
    MathTransform,
    PassThroughTransform,
    concatenate,
    transform_envelope,
)
from crs_transform.operation.transformed_position import TransformedDirectPosition

__all__ = [
    "AffineMatrix",
    "axis_swap_matrix",
    "swap_and_scale_axes",
    "translation_matrix",
    "envelope_matrix",
    "MathTransform",
    "IdentityTransform",
    "AffineTransform",
    "ConcatenatedTransform",
    "PassThroughTransform",
    "concatenate",
    "transform_envelope",
    "MapProjection",
    "InverseMapProjection",
    "ProjectionKind",
    "MathTransformFactory",
    "CoordinateOperation",
    "CoordinateOperationFactory",
    "TransformedDirectPosition",
]
