"""
Homogeneous matrices and the axis-swap builders.

An affine map from an N-dimensional source to an M-dimensional target is
stored as an (M+1) x (N+1) matrix whose last row is ``[0, ..., 0, 1]``:

    [y0]   [m00 m01 ... t0] [x0]
    [y1] = [m10 m11 ... t1] [x1]
    [..]   [ ...          ] [..]
    [ 1]   [  0   0 ...  1] [ 1]

The builders here align axis order, direction and units between two
coordinate systems, which is the "axis changes" step of most coordinate
operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.exceptions import (
    InvalidArgumentError,
    MismatchedDimensionError,
    NoninvertibleTransformError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class AffineMatrix:
    """Immutable float64 matrix.

    The wrapped array is a private read-only copy, so an AffineMatrix can be
    shared freely between transforms and threads.

    Attributes:
        data: 2D numpy array of coefficients.
    """

    data: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        data = np.array(self.data, dtype=np.float64)
        if data.ndim != 2 or data.shape[0] == 0 or data.shape[1] == 0:
            raise InvalidArgumentError(f"Matrix must be a non-empty 2D array, got shape {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> AffineMatrix:
        return cls(data=np.asarray(array, dtype=np.float64))

    @classmethod
    def identity(cls, size: int) -> AffineMatrix:
        """Square identity matrix of ``size`` rows (dimension ``size - 1``)."""
        return cls(data=np.eye(size, dtype=np.float64))

    @property
    def num_row(self) -> int:
        return int(self.data.shape[0])

    @property
    def num_col(self) -> int:
        return int(self.data.shape[1])

    def element(self, row: int, col: int) -> float:
        if not (0 <= row < self.num_row and 0 <= col < self.num_col):
            raise IndexError(f"Element ({row}, {col}) outside {self.num_row}x{self.num_col} matrix")
        return float(self.data[row, col])

    @property
    def is_square(self) -> bool:
        return self.num_row == self.num_col

    def is_affine(self) -> bool:
        """True if the last row is ``[0, ..., 0, 1]``."""
        last = np.zeros(self.num_col)
        last[-1] = 1.0
        return bool(np.array_equal(self.data[-1], last))

    def is_identity(self, tolerance: float = 0.0) -> bool:
        if not self.is_square:
            return False
        return bool(np.all(np.abs(self.data - np.eye(self.num_row)) <= tolerance))

    def multiply(self, other: AffineMatrix) -> AffineMatrix:
        """Return ``self @ other`` (apply ``other`` first, then ``self``)."""
        if self.num_col != other.num_row:
            raise MismatchedDimensionError(
                f"Cannot multiply {self.num_row}x{self.num_col} by {other.num_row}x{other.num_col}"
            )
        return AffineMatrix(self.data @ other.data)

    def __matmul__(self, other: AffineMatrix) -> AffineMatrix:
        return self.multiply(other)

    @property
    def determinant(self) -> float:
        if not self.is_square:
            raise NoninvertibleTransformError(
                f"Determinant undefined for a {self.num_row}x{self.num_col} matrix"
            )
        return float(np.linalg.det(self.data))

    def inverse(self) -> AffineMatrix:
        """Compute the inverse matrix.

        Raises:
            NoninvertibleTransformError: If the matrix is not square or is singular.
        """
        if not self.is_square:
            raise NoninvertibleTransformError(
                f"Cannot invert a {self.num_row}x{self.num_col} matrix"
            )
        try:
            inverse = np.linalg.inv(self.data)
        except np.linalg.LinAlgError:
            raise NoninvertibleTransformError("Matrix is singular and cannot be inverted") from None
        if not np.all(np.isfinite(inverse)):
            raise NoninvertibleTransformError("Matrix is singular and cannot be inverted")
        return AffineMatrix(inverse)

    def to_list(self) -> List[List[float]]:
        return self.data.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineMatrix):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))

    def __hash__(self) -> int:
        return hash((self.data.shape, self.data.tobytes()))

    def __repr__(self) -> str:
        return f"AffineMatrix({self.to_list()})"


def _match_axes(
    source: Sequence[AxisDirection],
    target: Sequence[AxisDirection],
    allow_reduction: bool,
) -> List[Tuple[int, int, int]]:
    """Pair each target axis with the source axis it comes from.

    Returns:
        One ``(row, col, sign)`` per target axis: target axis ``row`` equals
        ``sign`` times source axis ``col``.
    """
    claimed: List[Optional[int]] = [None] * len(source)
    matches = []
    for row, direction in enumerate(target):
        opposite = direction.opposite()
        candidates = [
            col for col, s in enumerate(source)
            if s is direction or (opposite is not None and s is opposite)
        ]
        if not candidates:
            raise InvalidArgumentError(
                f"Axis direction {direction.name} (target axis {row}) not found in source axes "
                f"[{', '.join(d.name for d in source)}]"
            )
        if len(candidates) > 1:
            raise InvalidArgumentError(
                f"Colinear axis: source axes {candidates} are all parallel to {direction.name}"
            )
        col = candidates[0]
        if claimed[col] is not None:
            raise InvalidArgumentError(
                f"Colinear axis: target axes {claimed[col]} and {row} both map to source axis "
                f"{col} ({source[col].name})"
            )
        claimed[col] = row
        matches.append((row, col, 1 if source[col] is direction else -1))
    dropped = [col for col, row in enumerate(claimed) if row is None]
    if dropped and not allow_reduction:
        raise InvalidArgumentError(
            f"Source axes {dropped} have no counterpart in the target; "
            f"pass allow_reduction=True to drop them"
        )
    return matches


def _homogeneous(num_target: int, num_source: int) -> npt.NDArray[np.float64]:
    data = np.zeros((num_target + 1, num_source + 1), dtype=np.float64)
    data[num_target, num_source] = 1.0
    return data


def axis_swap_matrix(
    source: Sequence[AxisDirection],
    target: Sequence[AxisDirection],
    allow_reduction: bool = False,
) -> AffineMatrix:
    """Build the matrix reordering and flipping ``source`` axes into ``target`` order.

    Each target axis must appear in the source either as the same direction
    (entry ``1``) or as its opposite (entry ``-1``).

    Args:
        source: Directions of the N source axes.
        target: Directions of the M target axes.
        allow_reduction: Accept source axes that no target axis uses; they
            are dropped (M < N).

    Returns:
        (M+1) x (N+1) matrix.

    Raises:
        InvalidArgumentError: If a target direction is absent from the source,
            two axes are colinear, or axes would be dropped without
            ``allow_reduction``.

    Example:
        >>> N, E, U = AxisDirection.NORTH, AxisDirection.EAST, AxisDirection.UP
        >>> axis_swap_matrix([N, E, U], [AxisDirection.WEST, U, AxisDirection.SOUTH]).to_list()
        [[0.0, -1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 0.0], [-1.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 1.0]]
    """
    data = _homogeneous(len(target), len(source))
    for row, col, sign in _match_axes(source, target, allow_reduction):
        data[row, col] = sign
    return AffineMatrix(data)


def swap_and_scale_axes(
    source: Sequence[CoordinateSystemAxis],
    target: Sequence[CoordinateSystemAxis],
    allow_reduction: bool = False,
) -> AffineMatrix:
    """Like ``axis_swap_matrix`` but also converts units.

    Each non-zero entry is ``±`` the target-units-per-source-unit ratio, e.g.
    1000 from metres to millimetres.

    Raises:
        InvalidArgumentError: As ``axis_swap_matrix``, or when matched axes
            have incompatible units.
    """
    data = _homogeneous(len(target), len(source))
    directions = [a.direction for a in source]
    for row, col, sign in _match_axes(directions, [a.direction for a in target], allow_reduction):
        data[row, col] = sign * source[col].unit.converter_to(target[row].unit)
    return AffineMatrix(data)


def translation_matrix(offsets: Sequence[float]) -> AffineMatrix:
    """Square matrix adding ``offsets`` to each ordinate."""
    dimension = len(offsets)
    data = np.eye(dimension + 1, dtype=np.float64)
    data[:dimension, dimension] = offsets
    return AffineMatrix(data)


def envelope_matrix(
    source_bounds: Tuple[Sequence[float], Sequence[float]],
    target_bounds: Tuple[Sequence[float], Sequence[float]],
    source: Optional[Sequence[AxisDirection]] = None,
    target: Optional[Sequence[AxisDirection]] = None,
) -> AffineMatrix:
    """Matrix mapping one box onto another, optionally swapping axes.

    A reversed axis maps the source minimum onto the target maximum. This
    is the usual grid-to-CRS construction: source bounds are the grid range
    (e.g. ``ROW_POSITIVE`` going down) and target bounds the georeferenced
    extent.

    Args:
        source_bounds: ``(minimums, maximums)`` of the source box.
        target_bounds: ``(minimums, maximums)`` of the target box.
        source: Source axis directions; defaults to "same as target".
        target: Target axis directions; defaults to "same as source".
    """
    src_min, src_max = (np.asarray(b, dtype=np.float64) for b in source_bounds)
    dst_min, dst_max = (np.asarray(b, dtype=np.float64) for b in target_bounds)
    if source is None and target is None:
        if src_min.size != dst_min.size:
            raise MismatchedDimensionError(
                f"Source box has {src_min.size} dimension(s), target box has {dst_min.size}"
            )
        matches = [(i, i, 1) for i in range(src_min.size)]
    else:
        source = list(source if source is not None else target)
        target = list(target if target is not None else source)
        matches = _match_axes(source, target, allow_reduction=False)
    data = _homogeneous(dst_min.size, src_min.size)
    for row, col, sign in matches:
        scale = sign * (dst_max[row] - dst_min[row]) / (src_max[col] - src_min[col])
        origin = dst_min[row] if sign > 0 else dst_max[row]
        data[row, col] = scale
        data[row, -1] = origin - src_min[col] * scale
    return AffineMatrix(data)
