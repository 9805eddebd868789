"""stiefelax: JAX-native geometry of the Stiefel manifold for Riemannian optimization.

Provides validation, dimension formulas, retractions (polar, QR, Cayley, Padé),
inverse retractions (polar, QR), vector transports (differentiated retractions
and projection) and sampling on St(n, k) over the real or complex numbers.

Quick start:
    >>> import jax
    >>> import stiefelax as sx
    >>> M = sx.create_stiefel(5, 2)
    >>> key_p, key_x = jax.random.split(jax.random.key(0))
    >>> p = M.random_point(key_p)
    >>> X = M.random_tangent(key_x, p)
    >>> q = M.retract(p, X, sx.QRRetraction(), t=0.1)
    >>> M.check_point(q) is None
    True
"""

from .manifolds import (
    CayleyRetraction,
    DifferentiatedRetractionVectorTransport,
    DimensionError,
    Euclidean,
    Field,
    InvalidPointError,
    InvalidTangentVectorError,
    Manifold,
    ManifoldError,
    NumericalStabilityError,
    PadeRetraction,
    PolarInverseRetraction,
    PolarRetraction,
    ProjectionTransport,
    QRInverseRetraction,
    QRRetraction,
    SingularSystemError,
    Stiefel,
    create_euclidean,
    create_stiefel,
)

__version__ = "0.1.0"

__all__ = [
    "CayleyRetraction",
    "DifferentiatedRetractionVectorTransport",
    "DimensionError",
    "Euclidean",
    "Field",
    "InvalidPointError",
    "InvalidTangentVectorError",
    "Manifold",
    "ManifoldError",
    "NumericalStabilityError",
    "PadeRetraction",
    "PolarInverseRetraction",
    "PolarRetraction",
    "ProjectionTransport",
    "QRInverseRetraction",
    "QRRetraction",
    "SingularSystemError",
    "Stiefel",
    "__version__",
    "create_euclidean",
    "create_stiefel",
]
