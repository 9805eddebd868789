"""Stiefel manifold geometry and its Euclidean embedding."""

from .base import Manifold
from .errors import (
    DimensionError,
    InvalidPointError,
    InvalidTangentVectorError,
    ManifoldError,
    NumericalStabilityError,
    SingularSystemError,
)
from .euclidean import Euclidean
from .methods import (
    CayleyRetraction,
    DifferentiatedRetractionVectorTransport,
    Field,
    InverseRetractionMethod,
    PadeRetraction,
    PolarInverseRetraction,
    PolarRetraction,
    ProjectionTransport,
    QRInverseRetraction,
    QRRetraction,
    RetractionMethod,
    VectorTransportMethod,
)
from .stiefel import Stiefel

_FIELD_NAMES = {
    "real": Field.REAL,
    "r": Field.REAL,
    "ℝ": Field.REAL,
    "complex": Field.COMPLEX,
    "c": Field.COMPLEX,
    "ℂ": Field.COMPLEX,
    "quaternion": Field.QUATERNION,
    "h": Field.QUATERNION,
    "ℍ": Field.QUATERNION,
}


def _resolve_field(field: Field | str) -> Field:
    if isinstance(field, Field):
        return field
    if isinstance(field, str) and field.lower() in _FIELD_NAMES:
        return _FIELD_NAMES[field.lower()]
    raise ValueError(f"Unknown field {field!r}, expected one of 'real', 'complex', 'quaternion'")


def create_stiefel(n: int, k: int, field: Field | str = Field.REAL) -> Stiefel:
    """Create a Stiefel manifold St(n, k, F) with dimension validation.

    Args:
        n: Number of rows (must be positive and >= k)
        k: Number of orthonormal columns (must be positive)
        field: Scalar field as a :class:`Field` or one of ``"real"``, ``"complex"``, ``"quaternion"``

    Returns:
        Stiefel: A Stiefel manifold instance

    Raises:
        TypeError: If n or k are not integers
        ValueError: If dimensions are invalid (k > n or non-positive) or the field is unknown

    Examples:
        >>> stiefel = create_stiefel(5, 2)             # St(5, 2, ℝ)
        >>> stiefel = create_stiefel(4, 3, "complex")  # St(4, 3, ℂ)
    """
    if not isinstance(n, int) or not isinstance(k, int) or isinstance(n, bool) or isinstance(k, bool):
        raise TypeError("Stiefel dimensions n and k must be integers")
    if k <= 0:
        raise ValueError(f"Stiefel k dimension must be positive, got k={k}")
    if n <= 0:
        raise ValueError(f"Stiefel n dimension must be positive, got n={n}")
    if k > n:
        raise ValueError(f"Stiefel requires k <= n, got k={k}, n={n}")
    return Stiefel(n, k, _resolve_field(field))


def create_euclidean(n: int, k: int = 1, field: Field | str = Field.REAL) -> Euclidean:
    """Create the Euclidean space of ``n x k`` matrices over ``field``.

    Raises:
        TypeError: If n or k are not integers
        ValueError: If a dimension is not positive or the field is unknown
    """
    if not isinstance(n, int) or not isinstance(k, int) or isinstance(n, bool) or isinstance(k, bool):
        raise TypeError("Euclidean dimensions n and k must be integers")
    if n <= 0 or k <= 0:
        raise ValueError(f"Euclidean dimensions must be positive, got n={n}, k={k}")
    return Euclidean(n, k, _resolve_field(field))


__all__ = [
    "CayleyRetraction",
    "DifferentiatedRetractionVectorTransport",
    "DimensionError",
    "Euclidean",
    "Field",
    "InvalidPointError",
    "InvalidTangentVectorError",
    "InverseRetractionMethod",
    "Manifold",
    "ManifoldError",
    "NumericalStabilityError",
    "PadeRetraction",
    "PolarInverseRetraction",
    "PolarRetraction",
    "ProjectionTransport",
    "QRInverseRetraction",
    "QRRetraction",
    "RetractionMethod",
    "SingularSystemError",
    "Stiefel",
    "VectorTransportMethod",
    "create_euclidean",
    "create_stiefel",
]
