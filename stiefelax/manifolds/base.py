"""Base class for matrix manifolds embedded in a Euclidean space.

This module defines the contract concrete manifold implementations satisfy.
Operations that only depend on the ambient space (inner product, norm, zero
vector) are forwarded explicitly to the manifold returned by
:meth:`Manifold.get_embedding`.
"""

import logging
from typing import Any

import jax.numpy as jnp
from jaxtyping import Array, PRNGKeyArray

from ..core.type_system import ManifoldPoint, TangentVector, default_tolerance
from .errors import DimensionError, ManifoldError

logger = logging.getLogger(__name__)

__all__ = ["DimensionError", "Manifold", "ManifoldError", "isapprox"]


def isapprox(a: Array, b: Array, atol: float | None = None, rtol: float | None = None) -> bool:
    """Approximate equality in the Frobenius norm.

    ``a`` and ``b`` are considered equal when
    ``‖a − b‖ ≤ max(atol, rtol · max(‖a‖, ‖b‖))``. Missing tolerances default to
    the square root of the machine epsilon of the inputs.
    """
    tol = default_tolerance(a, b)
    atol = tol if atol is None else atol
    rtol = tol if rtol is None else rtol
    diff = float(jnp.linalg.norm(a - b))
    scale = max(float(jnp.linalg.norm(a)), float(jnp.linalg.norm(b)))
    return diff <= max(atol, rtol * scale)


class Manifold:
    """Abstract base class for Riemannian matrix manifolds.

    Subclasses implement validation, dimension information, retractions and
    transports. Validation methods *return* an error instance or ``None``;
    the boolean ``validate_*`` and raising ``assert_*`` wrappers are built on top.
    """

    def __init__(self) -> None:
        """Initialize manifold base class."""
        pass

    # Dimension information

    def manifold_dimension(self) -> int:
        """Real dimension of the manifold."""
        raise NotImplementedError("Subclasses must define manifold dimension")

    def representation_size(self) -> tuple[int, ...]:
        """Shape of the arrays representing points."""
        raise NotImplementedError("Subclasses must define the representation size")

    @property
    def dimension(self) -> int:
        """Intrinsic dimension of the manifold."""
        return self.manifold_dimension()

    def is_flat(self) -> bool:
        """Whether the Riemann curvature tensor vanishes everywhere."""
        return self.manifold_dimension() == 1

    # Embedding

    def get_embedding(self) -> "Manifold":
        """Return the Euclidean space this manifold is embedded in."""
        raise NotImplementedError("Subclasses must define their embedding")

    def embed(self, p: ManifoldPoint) -> Array:
        """Embed a point into the ambient space (the identity for embedded manifolds)."""
        return p

    def embed_vector(self, p: ManifoldPoint, X: TangentVector) -> Array:
        """Embed a tangent vector into the ambient space."""
        return X

    def inner(self, p: ManifoldPoint, X: TangentVector, Y: TangentVector) -> Array:
        """Riemannian inner product, the one of the embedding."""
        return self.get_embedding().inner(p, X, Y)

    def norm(self, p: ManifoldPoint, X: TangentVector) -> Array:
        """Norm of a tangent vector, the one of the embedding."""
        return self.get_embedding().norm(p, X)

    def zero_vector(self, p: ManifoldPoint) -> TangentVector:
        """Zero tangent vector at ``p``."""
        return self.get_embedding().zero_vector(p)

    # Validation

    def check_point(self, p: ManifoldPoint, atol: float | None = None, rtol: float | None = None) -> ManifoldError | None:
        """Return ``None`` if ``p`` is a point on the manifold, otherwise the violation."""
        raise NotImplementedError("Point validation not implemented")

    def check_vector(
        self, p: ManifoldPoint, X: TangentVector, atol: float | None = None, rtol: float | None = None
    ) -> ManifoldError | None:
        """Return ``None`` if ``X`` is a tangent vector at ``p``, otherwise the violation."""
        raise NotImplementedError("Tangent vector validation not implemented")

    def validate_point(self, p: ManifoldPoint, atol: float | None = None, rtol: float | None = None) -> bool:
        """Validate that ``p`` is a point on the manifold."""
        return self.check_point(p, atol=atol, rtol=rtol) is None

    def validate_tangent(
        self, p: ManifoldPoint, X: TangentVector, atol: float | None = None, rtol: float | None = None
    ) -> bool:
        """Validate that ``X`` is a tangent vector at ``p``."""
        return self.check_vector(p, X, atol=atol, rtol=rtol) is None

    def assert_point(self, p: ManifoldPoint, atol: float | None = None, rtol: float | None = None) -> None:
        """Raise the error reported by :meth:`check_point`, if any."""
        error = self.check_point(p, atol=atol, rtol=rtol)
        if error is not None:
            raise error

    def assert_vector(
        self, p: ManifoldPoint, X: TangentVector, atol: float | None = None, rtol: float | None = None
    ) -> None:
        """Raise the error reported by :meth:`check_vector`, if any."""
        error = self.check_vector(p, X, atol=atol, rtol=rtol)
        if error is not None:
            raise error

    def isapprox_vector(self, p: ManifoldPoint, X: TangentVector, Y: TangentVector, atol: float | None = None) -> bool:
        """Whether two tangent vectors at ``p`` agree up to ``atol`` in the manifold norm."""
        atol = default_tolerance(X, Y) if atol is None else atol
        return float(self.norm(p, X - Y)) <= atol

    # Geometry

    def proj(self, p: ManifoldPoint, Z: Array) -> TangentVector:
        """Orthogonal projection of an ambient matrix onto the tangent space at ``p``."""
        raise NotImplementedError("Subclasses must implement projection operation")

    def retract(self, p: ManifoldPoint, X: TangentVector, method: Any = None, t: float = 1.0) -> ManifoldPoint:
        """Map the tangent vector ``tX`` at ``p`` back onto the manifold."""
        raise NotImplementedError("Subclasses must implement retraction")

    def inverse_retract(self, p: ManifoldPoint, q: ManifoldPoint, method: Any = None) -> TangentVector:
        """Tangent vector at ``p`` that the matching retraction maps to ``q``."""
        raise NotImplementedError("Subclasses must implement inverse retraction")

    def vector_transport_to(
        self, p: ManifoldPoint, X: TangentVector, q: ManifoldPoint, method: Any = None
    ) -> TangentVector:
        """Transport ``X`` from the tangent space at ``p`` to the one at ``q``."""
        raise NotImplementedError("Subclasses must implement vector transport")

    def vector_transport_direction(
        self, p: ManifoldPoint, X: TangentVector, d: TangentVector, method: Any = None
    ) -> TangentVector:
        """Transport ``X`` to the tangent space at the retraction of ``d``."""
        raise NotImplementedError("Subclasses must implement vector transport")

    # Sampling

    def random_point(self, key: PRNGKeyArray, sigma: float = 1.0) -> ManifoldPoint:
        """Generate a random point on the manifold."""
        raise NotImplementedError("Subclasses must implement random point generation")

    def random_tangent(self, key: PRNGKeyArray, p: ManifoldPoint, sigma: float = 1.0) -> TangentVector:
        """Generate a random tangent vector at ``p``."""
        raise NotImplementedError("Subclasses must implement random tangent generation")

    def __repr__(self) -> str:
        """String representation of the manifold."""
        return f"{self.__class__.__name__}()"
