"""
Named parameter groups for parameterized math transforms.

A projection method publishes a list of ParameterDescriptor objects (name,
default, valid range, unit and aliases). Callers obtain a ParameterValueGroup
from the factory, set the values they know, and hand the group back to build
the transform. Lookup is tolerant: OGC names ("central_meridian"), EPSG names
("Longitude of natural origin") and spelling variants all resolve to the same
parameter.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

from crs_transform.exceptions import InvalidArgumentError, ParameterNotFoundError
from crs_transform.units import Unit

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: str) -> str:
    """Reduce a parameter name to lowercase alphanumerics for lookup."""
    return _NON_ALNUM.sub("", name.lower())


@dataclass(frozen=True)
class ParameterDescriptor:
    """Definition of one numeric operation parameter.

    Attributes:
        name: Canonical (OGC) parameter name.
        default: Value used when the parameter is not set. NaN marks a
            mandatory parameter.
        minimum: Smallest accepted value (inclusive).
        maximum: Largest accepted value (inclusive).
        unit: Unit the value is expressed in, or None if dimensionless.
        aliases: Alternative names, typically the EPSG ones.
        strictly_positive: Reject zero even when ``minimum`` is 0.
    """

    name: str
    default: float = math.nan
    minimum: float = -math.inf
    maximum: float = math.inf
    unit: Optional[Unit] = None
    aliases: Tuple[str, ...] = ()
    strictly_positive: bool = False

    @property
    def required(self) -> bool:
        return math.isnan(self.default)

    def matches(self, name: str) -> bool:
        key = normalize_name(name)
        if key == normalize_name(self.name):
            return True
        return any(key == normalize_name(alias) for alias in self.aliases)

    def validate(self, value: float) -> float:
        """Return ``value`` as a float after checking it against the valid range.

        Raises:
            InvalidArgumentError: If the value is not finite or out of range.
        """
        value = float(value)
        if not math.isfinite(value):
            raise InvalidArgumentError(f"Parameter '{self.name}' must be finite, got {value}")
        if value < self.minimum or value > self.maximum:
            raise InvalidArgumentError(
                f"Parameter '{self.name}' must be in range "
                f"[{self.minimum}, {self.maximum}], got {value}"
            )
        if self.strictly_positive and value <= 0:
            raise InvalidArgumentError(f"Parameter '{self.name}' must be positive, got {value}")
        return value


class ParameterValueGroup:
    """Values for the parameters of one operation method.

    Unset parameters fall back to their descriptor's default. Reading a
    mandatory parameter that was never set raises InvalidArgumentError.

    Example:
        >>> params = factory.get_default_parameters("Mercator_1SP")
        >>> params["semi_major"] = 6378137.0
        >>> params.set("Longitude of natural origin", 110.0)
    """

    def __init__(
        self,
        method: str,
        descriptors: Sequence[ParameterDescriptor],
        values: Optional[Mapping[str, float]] = None,
    ):
        self.method = method
        self._descriptors = tuple(descriptors)
        self._values: Dict[str, float] = {}
        if values:
            for name, value in values.items():
                self.set(name, value)

    @property
    def descriptors(self) -> Tuple[ParameterDescriptor, ...]:
        return self._descriptors

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self._descriptors)

    def descriptor(self, name: str) -> ParameterDescriptor:
        """Find the descriptor for a canonical name or alias.

        Raises:
            ParameterNotFoundError: If no descriptor matches.
        """
        for descriptor in self._descriptors:
            if descriptor.matches(name):
                return descriptor
        raise ParameterNotFoundError(
            f"Parameter '{name}' not found for method '{self.method}'. "
            f"Must be one of: {', '.join(self.names)}"
        )

    def set(self, name: str, value: float, unit: Optional[Unit] = None) -> ParameterValueGroup:
        """Set a parameter value, converting from ``unit`` when given.

        Returns:
            This group, so calls can be chained.
        """
        descriptor = self.descriptor(name)
        value = float(value)
        if unit is not None and descriptor.unit is not None:
            value *= unit.converter_to(descriptor.unit)
        self._values[descriptor.name] = descriptor.validate(value)
        return self

    def is_set(self, name: str) -> bool:
        return self.descriptor(name).name in self._values

    def value(self, name: str) -> float:
        descriptor = self.descriptor(name)
        if descriptor.name in self._values:
            return self._values[descriptor.name]
        if descriptor.required:
            raise InvalidArgumentError(
                f"Missing value for mandatory parameter '{descriptor.name}' "
                f"of method '{self.method}'"
            )
        return descriptor.default

    def __getitem__(self, name: str) -> float:
        return self.value(name)

    def __setitem__(self, name: str, value: float) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and any(d.matches(name) for d in self._descriptors)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def as_dict(self) -> Dict[str, float]:
        """Return every parameter's effective value; unset mandatory ones are NaN."""
        return {
            d.name: self._values.get(d.name, d.default)
            for d in self._descriptors
        }

    def copy(self) -> ParameterValueGroup:
        clone = ParameterValueGroup(self.method, self._descriptors)
        clone._values = dict(self._values)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterValueGroup):
            return NotImplemented
        if normalize_name(self.method) != normalize_name(other.method):
            return False
        mine, theirs = self.as_dict(), other.as_dict()
        if mine.keys() != theirs.keys():
            return False
        for name, value in mine.items():
            other_value = theirs[name]
            if math.isnan(value) and math.isnan(other_value):
                continue
            if value != other_value:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"ParameterValueGroup({self.method!r}, {values})"
