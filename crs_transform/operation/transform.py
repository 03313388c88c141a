"""
Math transforms: the numeric part of a coordinate operation.

A MathTransform maps points from a source dimension to a target dimension.
Transforms are immutable and thread-safe once built. Every transform accepts
both single positions and (n, dimensions) numpy arrays; the array path is the
one to use for bulk data.

Composition goes through ``concatenate``, which removes identity steps,
merges adjacent affine steps into one matrix and cancels a transform followed
by its own inverse.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from itertools import product
from typing import List, Optional, Tuple

import numpy as np
import numpy.typing as npt

from crs_transform.exceptions import (
    InvalidArgumentError,
    MismatchedDimensionError,
    NoninvertibleTransformError,
    TransformDomainError,
)
from crs_transform.geometry.direct_position import (
    DirectPosition2D,
    GeneralDirectPosition,
    check_dimension,
)
from crs_transform.geometry.envelope import GeneralEnvelope
from crs_transform.operation.matrix import AffineMatrix

logger = logging.getLogger(__name__)

# Merged matrices closer than this to the identity are treated as identity
IDENTITY_TOLERANCE = 1e-12


class MathTransform(ABC):
    """Base class for all transforms.

    Subclasses implement ``_transform_array`` on a validated (n, source
    dimensions) float64 array and return an (n, target dimensions) array.
    """

    @property
    @abstractmethod
    def source_dimensions(self) -> int:
        """Number of ordinates expected on input."""

    @property
    @abstractmethod
    def target_dimensions(self) -> int:
        """Number of ordinates produced on output."""

    @abstractmethod
    def _transform_array(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        pass

    @abstractmethod
    def inverse(self) -> MathTransform:
        """Return the inverse transform.

        Raises:
            NoninvertibleTransformError: If the transform has no inverse.
        """

    def is_identity(self) -> bool:
        return False

    def transform_points(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Transform many points at once.

        Args:
            points: Array of shape (n, source_dimensions), or a single point
                of shape (source_dimensions,).

        Returns:
            New array of shape (n, target_dimensions), or (target_dimensions,)
            for a single point. The input is never modified.

        Raises:
            MismatchedDimensionError: If the last axis does not match
                ``source_dimensions``.
            TransformDomainError: If a point is outside the transform domain.
        """
        array = np.array(points, dtype=np.float64)
        single = array.ndim == 1
        if single:
            array = array.reshape(1, -1)
        if array.ndim != 2:
            raise MismatchedDimensionError(f"Expected a 2D array of points, got shape {array.shape}")
        check_dimension("points", self.source_dimensions, array.shape[1])
        result = self._transform_array(array)
        return result[0] if single else result

    def transform(
        self,
        position: GeneralDirectPosition,
        dst: Optional[GeneralDirectPosition] = None,
    ) -> GeneralDirectPosition:
        """Transform one position.

        Args:
            position: Input position; it is never modified unless it is also
                passed as ``dst``.
            dst: Optional position receiving the result. It may be
                ``position`` itself when source and target dimensions match.
                Its CRS is left untouched.

        Returns:
            ``dst`` if given, otherwise a new position without CRS.
        """
        check_dimension("position", self.source_dimensions, position.dimension)
        result = self.transform_points(position.coordinates)
        if dst is None:
            if self.target_dimensions == 2:
                return DirectPosition2D(result[0], result[1])
            return GeneralDirectPosition(result)
        check_dimension("dst", self.target_dimensions, dst.dimension)
        dst.set_coordinates(result)
        return dst

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_dimensions}D -> {self.target_dimensions}D)"


class IdentityTransform(MathTransform):
    """Transform that copies its input."""

    def __init__(self, dimension: int):
        if dimension <= 0:
            raise MismatchedDimensionError(f"Dimension must be positive, got {dimension}")
        self._dimension = dimension

    @property
    def source_dimensions(self) -> int:
        return self._dimension

    @property
    def target_dimensions(self) -> int:
        return self._dimension

    def _transform_array(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return points.copy()

    def inverse(self) -> IdentityTransform:
        return self

    def is_identity(self) -> bool:
        return True

    @property
    def matrix(self) -> AffineMatrix:
        return AffineMatrix.identity(self._dimension + 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentityTransform):
            return NotImplemented
        return self._dimension == other._dimension

    def __hash__(self) -> int:
        return hash(("identity", self._dimension))

    def __repr__(self) -> str:
        return f"IdentityTransform({self._dimension})"


class AffineTransform(MathTransform):
    """Transform backed by an affine matrix.

    The inverse is computed on first request and cached.
    """

    def __init__(self, matrix: AffineMatrix):
        if not matrix.is_affine():
            raise InvalidArgumentError(f"Matrix is not affine (last row must be [0 ... 0 1]): {matrix}")
        self._matrix = matrix
        self._inverse: Optional[AffineTransform] = None

    @property
    def matrix(self) -> AffineMatrix:
        return self._matrix

    @property
    def source_dimensions(self) -> int:
        return self._matrix.num_col - 1

    @property
    def target_dimensions(self) -> int:
        return self._matrix.num_row - 1

    def _transform_array(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        data = self._matrix.data
        n_src = self.source_dimensions
        n_dst = self.target_dimensions
        return points @ data[:n_dst, :n_src].T + data[:n_dst, n_src]

    def inverse(self) -> AffineTransform:
        if self._inverse is None:
            inverse = AffineTransform(self._matrix.inverse())
            inverse._inverse = self
            self._inverse = inverse
        return self._inverse

    def is_identity(self) -> bool:
        return self._matrix.is_identity()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return self._matrix == other._matrix

    def __hash__(self) -> int:
        return hash(self._matrix)

    def __repr__(self) -> str:
        return f"AffineTransform({self._matrix.to_list()})"


class ConcatenatedTransform(MathTransform):
    """``second(first(x))``. Build with ``concatenate`` rather than directly."""

    def __init__(self, first: MathTransform, second: MathTransform):
        check_dimension("second", first.target_dimensions, second.source_dimensions)
        self.first = first
        self.second = second

    @property
    def source_dimensions(self) -> int:
        return self.first.source_dimensions

    @property
    def target_dimensions(self) -> int:
        return self.second.target_dimensions

    def _transform_array(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return self.second._transform_array(self.first._transform_array(points))

    def inverse(self) -> MathTransform:
        return concatenate(self.second.inverse(), self.first.inverse())

    @property
    def steps(self) -> List[MathTransform]:
        """Flattened list of the non-concatenated steps, in application order."""
        result: List[MathTransform] = []
        for part in (self.first, self.second):
            if isinstance(part, ConcatenatedTransform):
                result.extend(part.steps)
            else:
                result.append(part)
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConcatenatedTransform):
            return NotImplemented
        return self.first == other.first and self.second == other.second

    def __hash__(self) -> int:
        return hash((self.first, self.second))

    def __repr__(self) -> str:
        return " -> ".join(repr(step) for step in self.steps)


class PassThroughTransform(MathTransform):
    """Apply a sub-transform to a contiguous range of ordinates.

    Ordinates before ``first_affected`` and the ``num_trailing`` last ones
    are copied unchanged.
    """

    def __init__(self, first_affected: int, sub_transform: MathTransform, num_trailing: int):
        if first_affected < 0 or num_trailing < 0:
            raise InvalidArgumentError(
                f"Pass-through ordinate counts must not be negative, got {first_affected}, {num_trailing}"
            )
        self.first_affected = first_affected
        self.sub_transform = sub_transform
        self.num_trailing = num_trailing

    @property
    def source_dimensions(self) -> int:
        return self.first_affected + self.sub_transform.source_dimensions + self.num_trailing

    @property
    def target_dimensions(self) -> int:
        return self.first_affected + self.sub_transform.target_dimensions + self.num_trailing

    def _transform_array(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        start = self.first_affected
        end = start + self.sub_transform.source_dimensions
        middle = self.sub_transform._transform_array(points[:, start:end])
        return np.hstack([points[:, :start], middle, points[:, end:]])

    def inverse(self) -> PassThroughTransform:
        return PassThroughTransform(self.first_affected, self.sub_transform.inverse(), self.num_trailing)

    def is_identity(self) -> bool:
        return self.sub_transform.is_identity()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PassThroughTransform):
            return NotImplemented
        return (
            self.first_affected == other.first_affected
            and self.num_trailing == other.num_trailing
            and self.sub_transform == other.sub_transform
        )

    def __hash__(self) -> int:
        return hash((self.first_affected, self.sub_transform, self.num_trailing))

    def __repr__(self) -> str:
        return f"PassThroughTransform({self.first_affected}, {self.sub_transform!r}, {self.num_trailing})"


def affine(matrix: AffineMatrix) -> MathTransform:
    """Wrap a matrix, returning IdentityTransform for (near) identity matrices."""
    if matrix.is_identity(IDENTITY_TOLERANCE):
        return IdentityTransform(matrix.num_row - 1)
    return AffineTransform(matrix)


def _are_inverse(first: MathTransform, second: MathTransform) -> bool:
    if first.source_dimensions != second.target_dimensions:
        return False
    try:
        return first.inverse() == second
    except (NoninvertibleTransformError, TransformDomainError):
        return False


def _concatenate_pair(first: MathTransform, second: MathTransform) -> MathTransform:
    check_dimension("second", first.target_dimensions, second.source_dimensions)
    if first.is_identity():
        return second
    if second.is_identity():
        return first
    if isinstance(first, AffineTransform) and isinstance(second, AffineTransform):
        return affine(second.matrix @ first.matrix)
    if isinstance(first, ConcatenatedTransform):
        tail = first.second
        if (isinstance(tail, AffineTransform) and isinstance(second, AffineTransform)) or _are_inverse(tail, second):
            return _concatenate_pair(first.first, _concatenate_pair(tail, second))
    if isinstance(second, ConcatenatedTransform):
        head = second.first
        if (isinstance(first, AffineTransform) and isinstance(head, AffineTransform)) or _are_inverse(first, head):
            return _concatenate_pair(_concatenate_pair(first, head), second.second)
    if _are_inverse(first, second):
        return IdentityTransform(first.source_dimensions)
    return ConcatenatedTransform(first, second)


def concatenate(*transforms: MathTransform) -> MathTransform:
    """Chain transforms, applied left to right.

    Raises:
        MismatchedDimensionError: If a step's target dimension does not match
            the next step's source dimension.
    """
    if not transforms:
        raise InvalidArgumentError("At least one transform is required")
    result = transforms[0]
    for step in transforms[1:]:
        result = _concatenate_pair(result, step)
    return result


def transform_envelope(transform: MathTransform, envelope: GeneralEnvelope) -> GeneralEnvelope:
    """Bounding box of the transformed corners and mid-edge points.

    Samples the 3**n combinations of (minimum, center, maximum) along each of
    the n source axes, which catches the extremes of the monotonic and
    conformal transforms in this package. The result has no CRS.
    """
    check_dimension("envelope", transform.source_dimensions, envelope.dimension)
    if envelope.is_null():
        nan = np.full(transform.target_dimensions, np.nan)
        return GeneralEnvelope(nan, nan.copy())
    choices: List[Tuple[float, float, float]] = [
        (envelope.minimum(i), envelope.center(i), envelope.maximum(i))
        for i in range(envelope.dimension)
    ]
    samples = np.array(list(product(*choices)), dtype=np.float64)
    projected = transform.transform_points(samples)
    lower = np.fmin.reduce(projected, axis=0)
    upper = np.fmax.reduce(projected, axis=0)
    return GeneralEnvelope(lower, upper)
