"""Type aliases and dtype helpers for stiefelax.

Points and tangent vectors are plain JAX arrays of shape ``(n, k)``; the aliases
below document intent in signatures.
"""

from typing import Any

import jax
import jax.numpy as jnp
from jaxtyping import Array, Inexact

ManifoldPoint = Inexact[Array, "n k"]
"""Type alias for points on a matrix manifold."""

TangentVector = Inexact[Array, "n k"]
"""Type alias for tangent vectors on a matrix manifold."""

SquareMatrix = Inexact[Array, "k k"]
"""Type alias for the small ``k x k`` coefficient matrices."""


def real_dtype() -> Any:
    """Return the default real floating dtype under the current JAX configuration."""
    return jax.dtypes.canonicalize_dtype(jnp.float64)


def complex_dtype() -> Any:
    """Return the default complex dtype under the current JAX configuration."""
    return jax.dtypes.canonicalize_dtype(jnp.complex128)


def is_complex(array: Array) -> bool:
    """Whether ``array`` has a complex dtype."""
    return bool(jnp.issubdtype(array.dtype, jnp.complexfloating))


def default_tolerance(*arrays: Array) -> float:
    """Square root of the machine epsilon of the widest floating dtype among ``arrays``.

    Integer inputs are treated as the default real dtype.

    Examples:
        >>> default_tolerance(jnp.ones(3, dtype=jnp.float32))  # doctest: +ELLIPSIS
        0.000345...
    """
    dtypes = []
    for array in arrays:
        dtype = jnp.asarray(array).dtype
        if not jnp.issubdtype(dtype, jnp.inexact):
            dtype = real_dtype()
        dtypes.append(dtype)
    dtype = jnp.result_type(*dtypes) if dtypes else real_dtype()
    return float(jnp.sqrt(jnp.finfo(dtype).eps))


def ctranspose(a: Array) -> Array:
    """Conjugate transpose of the last two axes."""
    return jnp.conj(jnp.swapaxes(a, -2, -1))
