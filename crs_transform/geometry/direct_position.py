"""
Mutable positions in a coordinate reference system.

A position is a fixed-length vector of float64 ordinates plus an optional CRS.
The dimension is set at construction and never changes. Positions are not
thread-safe: callers that share one across threads must synchronize.
"""

from __future__ import annotations

import math
from typing import Iterator, Optional, Sequence

import numpy as np
import numpy.typing as npt

from crs_transform.crs.reference_system import CoordinateReferenceSystem
from crs_transform.exceptions import MismatchedDimensionError


def check_dimension(name: str, expected: int, actual: int) -> None:
    """Raise MismatchedDimensionError unless ``actual == expected``."""
    if expected != actual:
        raise MismatchedDimensionError(
            f"Argument '{name}' has {actual} dimension(s), expected {expected}"
        )


def _hashable(values: npt.NDArray[np.float64]) -> tuple:
    # NaN hashes by identity, so replace it with a stable marker
    return tuple(None if math.isnan(v) else float(v) for v in values)


class GeneralDirectPosition:
    """Position of arbitrary dimension.

    Example:
        >>> p = GeneralDirectPosition([10.0, 20.0, 30.0])
        >>> p.dimension
        3
        >>> p.set_ordinate(2, -5.0)
        >>> p.coordinates
        array([10., 20., -5.])
    """

    def __init__(
        self,
        ordinates: Sequence[float] | npt.ArrayLike,
        crs: Optional[CoordinateReferenceSystem] = None,
    ):
        values = np.array(ordinates, dtype=np.float64).reshape(-1)
        if values.size == 0:
            raise MismatchedDimensionError("A position needs at least one ordinate")
        self._ordinates = values
        self._crs: Optional[CoordinateReferenceSystem] = None
        self.crs = crs

    @classmethod
    def of_dimension(cls, dimension: int, crs: Optional[CoordinateReferenceSystem] = None) -> GeneralDirectPosition:
        """Create a position with ``dimension`` zero ordinates."""
        if dimension <= 0:
            raise MismatchedDimensionError(f"Dimension must be positive, got {dimension}")
        return cls(np.zeros(dimension), crs)

    @classmethod
    def from_crs(cls, crs: CoordinateReferenceSystem) -> GeneralDirectPosition:
        """Create a zero position with the dimension of ``crs``."""
        return cls(np.zeros(crs.dimension), crs)

    @property
    def dimension(self) -> int:
        return int(self._ordinates.size)

    @property
    def crs(self) -> Optional[CoordinateReferenceSystem]:
        return self._crs

    @crs.setter
    def crs(self, crs: Optional[CoordinateReferenceSystem]) -> None:
        if crs is not None:
            check_dimension("crs", self.dimension, crs.dimension)
        self._crs = crs

    @property
    def coordinates(self) -> npt.NDArray[np.float64]:
        """Copy of the ordinates; mutating it does not affect this position."""
        return self._ordinates.copy()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.dimension:
            raise IndexError(f"Ordinate index {index} out of range [0, {self.dimension})")

    def ordinate(self, index: int) -> float:
        self._check_index(index)
        return float(self._ordinates[index])

    def set_ordinate(self, index: int, value: float) -> None:
        self._check_index(index)
        self._ordinates[index] = value

    def set_location(self, other: GeneralDirectPosition) -> None:
        """Copy the ordinates and CRS of ``other`` into this position."""
        check_dimension("other", self.dimension, other.dimension)
        self._ordinates[:] = other._ordinates
        self._crs = other.crs

    def set_coordinates(self, ordinates: Sequence[float] | npt.ArrayLike) -> None:
        """Overwrite all ordinates, keeping the CRS."""
        values = np.asarray(ordinates, dtype=np.float64).reshape(-1)
        check_dimension("ordinates", self.dimension, values.size)
        self._ordinates[:] = values

    def copy(self) -> GeneralDirectPosition:
        return GeneralDirectPosition(self._ordinates.copy(), self._crs)

    def __len__(self) -> int:
        return self.dimension

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._ordinates)

    def __getitem__(self, index: int) -> float:
        return self.ordinate(index)

    def __setitem__(self, index: int, value: float) -> None:
        self.set_ordinate(index, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneralDirectPosition):
            return NotImplemented
        return (
            self.dimension == other.dimension
            and bool(np.array_equal(self._ordinates, other._ordinates, equal_nan=True))
            and self._crs == other._crs
        )

    def __hash__(self) -> int:
        return hash((_hashable(self._ordinates), self._crs))

    def __repr__(self) -> str:
        values = ", ".join(repr(float(v)) for v in self._ordinates)
        crs_name = self._crs.name if self._crs is not None else None
        return f"{type(self).__name__}([{values}], crs={crs_name!r})"


class DirectPosition2D(GeneralDirectPosition):
    """Two-dimensional position with ``x`` and ``y`` accessors."""

    def __init__(self, x: float = 0.0, y: float = 0.0, crs: Optional[CoordinateReferenceSystem] = None):
        super().__init__([x, y], crs)

    @property
    def x(self) -> float:
        return float(self._ordinates[0])

    @x.setter
    def x(self, value: float) -> None:
        self._ordinates[0] = value

    @property
    def y(self) -> float:
        return float(self._ordinates[1])

    @y.setter
    def y(self, value: float) -> None:
        self._ordinates[1] = value

    def copy(self) -> DirectPosition2D:
        return DirectPosition2D(self.x, self.y, self._crs)
