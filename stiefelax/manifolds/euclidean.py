"""Euclidean space of ``n x k`` matrices, the embedding of the Stiefel manifold."""

import jax.numpy as jnp
import jax.random as jr
from jaxtyping import Array, PRNGKeyArray

from ..core.type_system import complex_dtype, is_complex, real_dtype
from .base import Manifold
from .errors import DimensionError, InvalidPointError, ManifoldError, check_shape
from .methods import Field


def field_dtype(field: Field):
    """Default array dtype for points over ``field``."""
    if field is Field.REAL:
        return real_dtype()
    if field is Field.COMPLEX:
        return complex_dtype()
    raise ManifoldError(f"No array representation for matrices over {field}")


def standard_normal(key: PRNGKeyArray, shape: tuple[int, ...], field: Field, sigma: float = 1.0) -> Array:
    """Draw a ``sigma``-scaled standard normal array over ``field``.

    Complex draws have independent real and imaginary parts with total variance one.
    """
    return sigma * jr.normal(key, shape, dtype=field_dtype(field))


def check_field(array: Array, field: Field, name: str = "point") -> InvalidPointError | None:
    """Return an error if ``array`` holds complex data for a real ``field``."""
    if field is Field.REAL and is_complex(array):
        return InvalidPointError(
            f"The {name} has complex entries but the manifold is real",
            point=array,
            violated_constraint="field",
        )
    return None


class Euclidean(Manifold):
    """The space of ``n x k`` matrices over a field with the Frobenius inner product.

    Args:
        n: Number of rows.
        k: Number of columns.
        field: Scalar field.
    """

    def __init__(self, n: int, k: int, field: Field = Field.REAL):
        """Initialize the Euclidean space of ``n x k`` matrices."""
        if n <= 0 or k <= 0:
            raise DimensionError("Dimensions must be positive", expected="n, k >= 1", actual=(n, k))
        super().__init__()
        self._n = n
        self._k = k
        self._field = field

    @property
    def n(self) -> int:
        return self._n

    @property
    def k(self) -> int:
        return self._k

    @property
    def field(self) -> Field:
        return self._field

    def manifold_dimension(self) -> int:
        """Real dimension ``n·k·dim_ℝ(F)``."""
        return self._n * self._k * self._field.real_dimension

    def representation_size(self) -> tuple[int, int]:
        return (self._n, self._k)

    def is_flat(self) -> bool:
        """Euclidean spaces are flat."""
        return True

    def get_embedding(self) -> "Euclidean":
        return self

    def inner(self, p: Array, X: Array, Y: Array) -> Array:
        """Frobenius inner product ``Re tr(XᴴY)``."""
        return jnp.real(jnp.sum(jnp.conj(X) * Y))

    def norm(self, p: Array, X: Array) -> Array:
        return jnp.linalg.norm(X)

    def zero_vector(self, p: Array) -> Array:
        return jnp.zeros_like(p)

    def check_point(self, p: Array, atol: float | None = None, rtol: float | None = None) -> ManifoldError | None:
        shape_error = check_shape(p, self.representation_size(), "point")
        if shape_error is not None:
            return shape_error
        return check_field(p, self._field)

    def check_vector(
        self, p: Array, X: Array, atol: float | None = None, rtol: float | None = None
    ) -> ManifoldError | None:
        shape_error = check_shape(p, self.representation_size(), "point") or check_shape(
            X, self.representation_size(), "tangent vector"
        )
        if shape_error is not None:
            return shape_error
        return check_field(X, self._field, "tangent vector")

    def proj(self, p: Array, Z: Array) -> Array:
        return Z

    def retract(self, p: Array, X: Array, method: object = None, t: float = 1.0) -> Array:
        return p + t * X

    def inverse_retract(self, p: Array, q: Array, method: object = None) -> Array:
        return q - p

    def vector_transport_to(self, p: Array, X: Array, q: Array, method: object = None) -> Array:
        return X

    def vector_transport_direction(self, p: Array, X: Array, d: Array, method: object = None) -> Array:
        return X

    def random_point(self, key: PRNGKeyArray, sigma: float = 1.0) -> Array:
        return standard_normal(key, self.representation_size(), self._field, sigma)

    def random_tangent(self, key: PRNGKeyArray, p: Array, sigma: float = 1.0) -> Array:
        return standard_normal(key, self.representation_size(), self._field, sigma)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Euclidean):
            return NotImplemented
        return (self._n, self._k, self._field) == (other._n, other._k, other._field)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._n, self._k, self._field))

    def __repr__(self) -> str:
        return f"Euclidean({self._n}, {self._k}, {self._field})"
