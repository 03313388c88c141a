"""
Axis-aligned envelopes (bounding boxes) in a coordinate reference system.

An envelope stores a minimum and a maximum per axis. Every axis satisfies
``minimum <= maximum``; NaN pairs are allowed and mark a "null" envelope that
was never initialized. Operations combining two envelopes, or an envelope and
a position, require equal dimensions and compatible CRSs (either side may
have no CRS).
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt

from crs_transform.crs.reference_system import (
    CompoundCRS,
    CoordinateReferenceSystem,
    equals_ignore_metadata,
)
from crs_transform.exceptions import (
    InvalidArgumentError,
    MismatchedDimensionError,
    MismatchedReferenceSystemError,
)
from crs_transform.geometry.direct_position import (
    DirectPosition2D,
    GeneralDirectPosition,
    _hashable,
    check_dimension,
)

logger = logging.getLogger(__name__)


def check_compatible_crs(
    a: Optional[CoordinateReferenceSystem],
    b: Optional[CoordinateReferenceSystem],
) -> None:
    """Raise MismatchedReferenceSystemError if both CRSs are set and differ."""
    if a is None or b is None:
        return
    if not equals_ignore_metadata(a, b):
        raise MismatchedReferenceSystemError(
            f"Mismatched coordinate reference systems: '{a.name}' and '{b.name}'"
        )


def _select_crs(
    crs: Optional[CoordinateReferenceSystem], indices: Sequence[int]
) -> Optional[CoordinateReferenceSystem]:
    """CRS for a subset of axes, when it maps onto whole compound components."""
    if crs is None:
        return None
    if list(indices) == list(range(crs.dimension)):
        return crs
    if not isinstance(crs, CompoundCRS):
        return None
    selected = []
    covered = []
    start = 0
    for component in crs.components:
        span = list(range(start, start + component.dimension))
        if set(span) <= set(indices):
            selected.append(component)
            covered.extend(span)
        start += component.dimension
    if covered != list(indices) or not selected:
        return None
    if len(selected) == 1:
        return selected[0]
    return CompoundCRS.of(crs.name, *selected)


class GeneralEnvelope:
    """Envelope of arbitrary dimension.

    Example:
        >>> env = GeneralEnvelope([0.0, 0.0], [10.0, 5.0])
        >>> env.add_position(GeneralDirectPosition([12.0, -1.0]))
        >>> env.lower_corner.coordinates
        array([ 0., -1.])
    """

    def __init__(
        self,
        lower: Sequence[float] | npt.ArrayLike,
        upper: Sequence[float] | npt.ArrayLike,
        crs: Optional[CoordinateReferenceSystem] = None,
    ):
        lo = np.array(lower, dtype=np.float64).reshape(-1)
        hi = np.array(upper, dtype=np.float64).reshape(-1)
        check_dimension("upper", lo.size, hi.size)
        self._check_coherence(lo, hi)
        self._lower = lo
        self._upper = hi
        self._crs: Optional[CoordinateReferenceSystem] = None
        self.crs = crs

    @classmethod
    def of_dimension(cls, dimension: int, crs: Optional[CoordinateReferenceSystem] = None) -> GeneralEnvelope:
        """Create an envelope with every axis set to [0, 0]."""
        if dimension < 0:
            raise MismatchedDimensionError(f"Dimension must not be negative, got {dimension}")
        return GeneralEnvelope(np.zeros(dimension), np.zeros(dimension), crs)

    @classmethod
    def from_crs(cls, crs: CoordinateReferenceSystem) -> GeneralEnvelope:
        """Create a null envelope (all NaN) with the dimension of ``crs``."""
        nan = np.full(crs.dimension, np.nan)
        return GeneralEnvelope(nan, nan.copy(), crs)

    @classmethod
    def from_positions(cls, lower: GeneralDirectPosition, upper: GeneralDirectPosition) -> GeneralEnvelope:
        """Create an envelope from its two corners; their CRSs must be compatible."""
        check_dimension("upper", lower.dimension, upper.dimension)
        check_compatible_crs(lower.crs, upper.crs)
        return GeneralEnvelope(lower.coordinates, upper.coordinates, lower.crs or upper.crs)

    @classmethod
    def from_envelope(cls, envelope: GeneralEnvelope) -> GeneralEnvelope:
        """Copy constructor. The result is always a GeneralEnvelope."""
        return GeneralEnvelope(envelope._lower.copy(), envelope._upper.copy(), envelope.crs)

    @staticmethod
    def _check_coherence(lower: npt.NDArray[np.float64], upper: npt.NDArray[np.float64]) -> None:
        bad = np.flatnonzero(lower > upper)
        if bad.size:
            i = int(bad[0])
            raise InvalidArgumentError(
                f"Illegal range on axis {i}: minimum {lower[i]} is greater than maximum {upper[i]}"
            )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return int(self._lower.size)

    @property
    def crs(self) -> Optional[CoordinateReferenceSystem]:
        return self._crs

    @crs.setter
    def crs(self, crs: Optional[CoordinateReferenceSystem]) -> None:
        if crs is not None:
            check_dimension("crs", self.dimension, crs.dimension)
        self._crs = crs

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.dimension:
            raise IndexError(f"Axis index {index} out of range [0, {self.dimension})")

    def minimum(self, index: int) -> float:
        self._check_index(index)
        return float(self._lower[index])

    def maximum(self, index: int) -> float:
        self._check_index(index)
        return float(self._upper[index])

    def center(self, index: int) -> float:
        self._check_index(index)
        return 0.5 * (float(self._lower[index]) + float(self._upper[index]))

    def span(self, index: int) -> float:
        self._check_index(index)
        return float(self._upper[index] - self._lower[index])

    @property
    def lower_corner(self) -> GeneralDirectPosition:
        return GeneralDirectPosition(self._lower.copy(), self._crs)

    @property
    def upper_corner(self) -> GeneralDirectPosition:
        return GeneralDirectPosition(self._upper.copy(), self._crs)

    @property
    def center_position(self) -> GeneralDirectPosition:
        return GeneralDirectPosition(0.5 * (self._lower + self._upper), self._crs)

    @property
    def bounds(self) -> npt.NDArray[np.float64]:
        """Array of shape (2, dimension): row 0 holds minimums, row 1 maximums."""
        return np.vstack([self._lower, self._upper])

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_range(self, index: int, minimum: float, maximum: float) -> None:
        self._check_index(index)
        if minimum > maximum:
            raise InvalidArgumentError(
                f"Illegal range on axis {index}: minimum {minimum} is greater than maximum {maximum}"
            )
        self._lower[index] = minimum
        self._upper[index] = maximum

    def set_envelope(self, other: GeneralEnvelope) -> None:
        """Copy the bounds (and CRS, if set) of ``other`` into this envelope."""
        check_dimension("other", self.dimension, other.dimension)
        self._lower[:] = other._lower
        self._upper[:] = other._upper
        if other.crs is not None:
            self._crs = other.crs

    def set_to_null(self) -> None:
        self._lower[:] = np.nan
        self._upper[:] = np.nan

    def set_to_infinite(self) -> None:
        self._lower[:] = -np.inf
        self._upper[:] = np.inf

    def _check_operand(self, name: str, dimension: int, crs: Optional[CoordinateReferenceSystem]) -> None:
        check_dimension(name, self.dimension, dimension)
        check_compatible_crs(self._crs, crs)

    def _expand(self, lower: npt.NDArray[np.float64], upper: npt.NDArray[np.float64]) -> None:
        # NaN operands never replace a bound; NaN bounds take any defined operand
        self._lower = np.where(~np.isnan(lower) & ~(lower >= self._lower), lower, self._lower)
        self._upper = np.where(~np.isnan(upper) & ~(upper <= self._upper), upper, self._upper)

    def add_position(self, position: GeneralDirectPosition) -> None:
        """Expand this envelope to include ``position``. NaN ordinates are ignored."""
        self._check_operand("position", position.dimension, position.crs)
        values = position.coordinates
        self._expand(values, values)

    def add_envelope(self, envelope: GeneralEnvelope) -> None:
        """Expand this envelope to the union with ``envelope``."""
        self._check_operand("envelope", envelope.dimension, envelope.crs)
        self._expand(envelope._lower, envelope._upper)

    def intersect(self, envelope: GeneralEnvelope) -> None:
        """Shrink this envelope to its intersection with ``envelope``.

        Axes that do not overlap collapse to the midpoint of the gap, which
        keeps ``minimum <= maximum`` while leaving the envelope empty.
        """
        self._check_operand("envelope", envelope.dimension, envelope.crs)
        lo = np.maximum(self._lower, envelope._lower)
        hi = np.minimum(self._upper, envelope._upper)
        disjoint = lo > hi
        if np.any(disjoint):
            middle = 0.5 * (lo + hi)
            lo = np.where(disjoint, middle, lo)
            hi = np.where(disjoint, middle, hi)
        self._lower = lo
        self._upper = hi

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def contains_position(self, position: GeneralDirectPosition, edges_inclusive: bool = True) -> bool:
        """True if ``position`` lies inside, or on the border when ``edges_inclusive``.

        NaN is never contained.
        """
        self._check_operand("position", position.dimension, position.crs)
        values = position.coordinates
        if edges_inclusive:
            inside = (values >= self._lower) & (values <= self._upper)
        else:
            inside = (values > self._lower) & (values < self._upper)
        return bool(np.all(inside))

    def contains_envelope(self, envelope: GeneralEnvelope, edges_inclusive: bool = True) -> bool:
        self._check_operand("envelope", envelope.dimension, envelope.crs)
        if edges_inclusive:
            inside = (envelope._lower >= self._lower) & (envelope._upper <= self._upper)
        else:
            inside = (envelope._lower > self._lower) & (envelope._upper < self._upper)
        return bool(np.all(inside))

    def intersects(self, envelope: GeneralEnvelope, edges_inclusive: bool = True) -> bool:
        self._check_operand("envelope", envelope.dimension, envelope.crs)
        if edges_inclusive:
            overlap = (envelope._upper >= self._lower) & (envelope._lower <= self._upper)
        else:
            overlap = (envelope._upper > self._lower) & (envelope._lower < self._upper)
        return bool(np.all(overlap))

    def is_empty(self) -> bool:
        """True if the envelope has no dimension or a non-positive (or NaN) span."""
        if self.dimension == 0:
            return True
        return not bool(np.all(self._lower < self._upper))

    def is_null(self) -> bool:
        """True if every bound is NaN."""
        return bool(np.all(np.isnan(self._lower)) and np.all(np.isnan(self._upper)))

    def is_infinite(self) -> bool:
        """True if at least one bound is infinite."""
        return bool(np.any(np.isinf(self._lower)) or np.any(np.isinf(self._upper)))

    # ------------------------------------------------------------------
    # Derived envelopes
    # ------------------------------------------------------------------

    def _check_range(self, lower: int, upper: int) -> None:
        if not 0 <= lower <= upper <= self.dimension:
            raise IndexError(
                f"Axis range [{lower}, {upper}) is not within [0, {self.dimension}]"
            )

    def sub_envelope(self, lower: int, upper: int) -> GeneralEnvelope:
        """Envelope made of axes ``lower`` (inclusive) to ``upper`` (exclusive)."""
        self._check_range(lower, upper)
        indices = list(range(lower, upper))
        return GeneralEnvelope(
            self._lower[lower:upper].copy(),
            self._upper[lower:upper].copy(),
            _select_crs(self._crs, indices),
        )

    def reduced_envelope(self, lower: int, upper: int) -> GeneralEnvelope:
        """Envelope with axes ``lower`` (inclusive) to ``upper`` (exclusive) removed."""
        self._check_range(lower, upper)
        indices = [i for i in range(self.dimension) if not lower <= i < upper]
        crs = _select_crs(self._crs, indices) if indices else None
        return GeneralEnvelope(self._lower[indices].copy(), self._upper[indices].copy(), crs)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def equals_approx(self, other: GeneralEnvelope, eps: float, relative_to_span: bool = True) -> bool:
        """Compare bounds within a tolerance.

        Args:
            other: Envelope to compare with.
            eps: Tolerance. When ``relative_to_span`` is True it is a fraction
                of the larger span of each axis; otherwise an absolute value.
            relative_to_span: See ``eps``.

        Returns:
            True if all bounds agree within tolerance. NaN matches NaN.
        """
        if other.dimension != self.dimension:
            return False
        if not (self._crs is None or other.crs is None or equals_ignore_metadata(self._crs, other.crs)):
            return False
        for i in range(self.dimension):
            epsilon = eps
            if relative_to_span:
                span = max(self.span(i), other.span(i))
                if span > 0 and math.isfinite(span):
                    epsilon = span * eps
            for a, b in ((self._lower[i], other._lower[i]), (self._upper[i], other._upper[i])):
                if math.isnan(a) and math.isnan(b):
                    continue
                if a == b:
                    continue
                if not abs(a - b) <= epsilon:
                    return False
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneralEnvelope):
            return NotImplemented
        return (
            self.dimension == other.dimension
            and bool(np.array_equal(self._lower, other._lower, equal_nan=True))
            and bool(np.array_equal(self._upper, other._upper, equal_nan=True))
            and self._crs == other._crs
        )

    def __hash__(self) -> int:
        return hash((_hashable(self._lower), _hashable(self._upper), self._crs))

    def __repr__(self) -> str:
        ranges = ", ".join(f"[{lo}, {hi}]" for lo, hi in zip(self._lower, self._upper))
        crs_name = self._crs.name if self._crs is not None else None
        return f"{type(self).__name__}({ranges}, crs={crs_name!r})"


class Envelope2D(GeneralEnvelope):
    """Two-dimensional envelope built like a rectangle: origin, width, height."""

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        width: float = 0.0,
        height: float = 0.0,
        crs: Optional[CoordinateReferenceSystem] = None,
    ):
        super().__init__([x, y], [x + width, y + height], crs)

    @classmethod
    def from_corners(
        cls,
        lower: DirectPosition2D,
        upper: DirectPosition2D,
    ) -> Envelope2D:
        check_compatible_crs(lower.crs, upper.crs)
        return cls(lower.x, lower.y, upper.x - lower.x, upper.y - lower.y, lower.crs or upper.crs)

    @classmethod
    def from_envelope(cls, envelope: GeneralEnvelope) -> Envelope2D:
        check_dimension("envelope", 2, envelope.dimension)
        result = cls(crs=None)
        result.set_envelope(envelope)
        return result

    @property
    def min_x(self) -> float:
        return float(self._lower[0])

    @property
    def max_x(self) -> float:
        return float(self._upper[0])

    @property
    def min_y(self) -> float:
        return float(self._lower[1])

    @property
    def max_y(self) -> float:
        return float(self._upper[1])

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center_x(self) -> float:
        return 0.5 * (self.min_x + self.max_x)

    @property
    def center_y(self) -> float:
        return 0.5 * (self.min_y + self.max_y)

    def bounds_equals(self, envelope: GeneralEnvelope, x_dim: int, y_dim: int, eps: float) -> bool:
        """Compare this 2D box with two axes of a (possibly larger) envelope.

        ``eps`` is relative: it is multiplied by the mean of width and height.
        """
        eps *= 0.5 * (self.width + self.height)
        pairs = (
            (self.min_x, envelope.minimum(x_dim)),
            (self.min_y, envelope.minimum(y_dim)),
            (self.max_x, envelope.maximum(x_dim)),
            (self.max_y, envelope.maximum(y_dim)),
        )
        return all(abs(mine - theirs) <= eps for mine, theirs in pairs)
