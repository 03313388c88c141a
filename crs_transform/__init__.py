"""
Coordinate Reference System Transformation Package.

This package transforms coordinates between coordinate reference systems:
geographic (longitude/latitude), projected (easting/northing), engineering,
vertical, temporal and compound CRSs.

Supported map projections:
    - Mercator_1SP / Mercator_2SP
    - Lambert_Conformal_Conic_1SP / Lambert_Conformal_Conic_2SP
    - Lambert_Conformal_Conic_2SP_Belgium

Example Usage:
    >>> from crs_transform import (
    ...     CoordinateOperationFactory,
    ...     DirectPosition2D,
    ...     MathTransformFactory,
    ...     ProjectedCRS,
    ...     WGS84,
    ... )
    >>> from crs_transform.crs import axis
    >>>
    >>> # Describe the target CRS
    >>> params = MathTransformFactory().get_default_parameters("Mercator_1SP")
    >>> mercator = ProjectedCRS(
    ...     "World Mercator", (axis.EASTING, axis.NORTHING),
    ...     base_crs=WGS84, conversion=params,
    ... )
    >>>
    >>> # Find the operation and transform a point
    >>> operation = CoordinateOperationFactory().create_operation(WGS84, mercator)
    >>> operation.transform(DirectPosition2D(2.35, 48.85, WGS84))
    DirectPosition2D([261600.8..., 6218412.9...], crs='World Mercator')

Available Classes:
    Geometry:
        - GeneralDirectPosition / DirectPosition2D: Mutable positions
        - GeneralEnvelope / Envelope2D: Axis-aligned bounding boxes

    Reference systems:
        - GeographicCRS, ProjectedCRS, EngineeringCRS, VerticalCRS,
          TemporalCRS, CompoundCRS

    Operations:
        - AffineMatrix and the axis swap builders
        - MathTransform and its identity, affine, concatenated,
          pass-through and map projection variants
        - MathTransformFactory: Builds transforms from parameter groups
        - CoordinateOperationFactory: Finds operations between two CRSs
        - TransformedDirectPosition: Reprojects positions into a fixed CRS
"""

# Errors
from crs_transform.exceptions import (
    IncommensurableUnitsError,
    InvalidArgumentError,
    MismatchedDimensionError,
    MismatchedReferenceSystemError,
    NoninvertibleTransformError,
    OperationNotFoundError,
    ParameterNotFoundError,
    ReferencingError,
    TransformDomainError,
)

# Reference systems
from crs_transform.crs import (
    CARTESIAN_2D,
    CARTESIAN_3D,
    GENERIC_2D,
    GENERIC_3D,
    WGS84,
    WGS84_3D,
    CompoundCRS,
    CoordinateReferenceSystem,
    EngineeringCRS,
    GeographicCRS,
    ProjectedCRS,
    TemporalCRS,
    VerticalCRS,
)

# Geometry
from crs_transform.geometry import DirectPosition2D, Envelope2D, GeneralDirectPosition, GeneralEnvelope

# Operations
from crs_transform.operation import (
    AffineMatrix,
    CoordinateOperation,
    CoordinateOperationFactory,
    MathTransform,
    MathTransformFactory,
    ProjectionKind,
    TransformedDirectPosition,
    axis_swap_matrix,
    swap_and_scale_axes,
)

# Configuration
from crs_transform.config import ReferencingConfig, get_default_config

# Define public API
__all__ = [
    # Errors
    'ReferencingError',
    'InvalidArgumentError',
    'MismatchedDimensionError',
    'MismatchedReferenceSystemError',
    'IncommensurableUnitsError',
    'ParameterNotFoundError',
    'OperationNotFoundError',
    'TransformDomainError',
    'NoninvertibleTransformError',

    # Reference systems
    'CoordinateReferenceSystem',
    'GeographicCRS',
    'ProjectedCRS',
    'EngineeringCRS',
    'VerticalCRS',
    'TemporalCRS',
    'CompoundCRS',
    'WGS84',
    'WGS84_3D',
    'CARTESIAN_2D',
    'CARTESIAN_3D',
    'GENERIC_2D',
    'GENERIC_3D',

    # Geometry
    'GeneralDirectPosition',
    'DirectPosition2D',
    'GeneralEnvelope',
    'Envelope2D',

    # Operations
    'AffineMatrix',
    'axis_swap_matrix',
    'swap_and_scale_axes',
    'MathTransform',
    'MathTransformFactory',
    'ProjectionKind',
    'CoordinateOperation',
    'CoordinateOperationFactory',
    'TransformedDirectPosition',

    # Configuration
    'ReferencingConfig',
    'get_default_config',
]

# Package metadata
__version__ = '0.1.0'
__description__ = 'Coordinate reference system transformations and map projections'
