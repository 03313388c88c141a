"""Exception hierarchy for coordinate referencing and transformation errors."""


class ReferencingError(Exception):
    """Base crs_transform error."""


class InvalidArgumentError(ReferencingError, ValueError):
    """Raised when an argument violates a precondition (e.g. min > max)."""


class MismatchedDimensionError(ReferencingError, ValueError):
    """Raised when two objects that must share a dimension do not."""


class MismatchedReferenceSystemError(InvalidArgumentError):
    """Raised when two objects carry incompatible coordinate reference systems."""


class IncommensurableUnitsError(InvalidArgumentError):
    """Raised when converting between units of different kinds."""


class ParameterNotFoundError(InvalidArgumentError):
    """Raised when a named parameter is not part of a parameter group."""


class OperationNotFoundError(ReferencingError, LookupError):
    """Raised when no coordinate operation connects two reference systems."""


class TransformDomainError(ReferencingError, ArithmeticError):
    """Raised when a point lies outside the domain of a transform."""


class NoninvertibleTransformError(TransformDomainError):
    """Raised when a transform or matrix has no inverse."""
