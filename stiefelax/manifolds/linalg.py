"""Small dense solvers used by the Stiefel geometry.

The Sylvester and Lyapunov equations arising in the inverse retraction and the
vector transports are ``k x k``, so they are solved through their Kronecker
(vectorized) form with a single dense LU solve. Row-major vectorization is used
throughout: ``vec(A X B) = (A ⊗ Bᵀ) vec(X)``.
"""

import logging

import jax.numpy as jnp
from jaxtyping import Array

from ..core.constants import NumericalConstants
from ..core.type_system import ctranspose
from .errors import SingularSystemError

logger = logging.getLogger(__name__)


def sylvester_operator(a: Array, b: Array) -> Array:
    """Return the ``k² x k²`` matrix of ``X ↦ AX + XB`` acting on row-major ``vec(X)``."""
    eye_a = jnp.eye(a.shape[0], dtype=a.dtype)
    eye_b = jnp.eye(b.shape[0], dtype=b.dtype)
    return jnp.kron(a, eye_b) + jnp.kron(eye_a, b.T)


def solve_sylvester(a: Array, b: Array, c: Array, *, check: bool = True) -> Array:
    """Solve the Sylvester equation ``AX + XB = C`` for ``X``.

    Args:
        a: Square matrix of shape ``(m, m)``.
        b: Square matrix of shape ``(r, r)``.
        c: Right-hand side of shape ``(m, r)``.
        check: Raise :class:`SingularSystemError` if the operator is (near-)singular.

    Returns:
        Solution ``X`` of shape ``(m, r)``.

    Raises:
        SingularSystemError: If ``A`` and ``-B`` (nearly) share an eigenvalue.
    """
    dtype = jnp.result_type(a, b, c)
    operator = sylvester_operator(a.astype(dtype), b.astype(dtype))
    if check:
        ensure_nonsingular(operator, "sylvester")
    x = jnp.linalg.solve(operator, c.astype(dtype).reshape(-1))
    return x.reshape(c.shape)


def solve_lyapunov(a: Array, c: Array, *, check: bool = True) -> Array:
    """Solve the continuous Lyapunov equation ``AX + XAᴴ = C`` for ``X``.

    Raises:
        SingularSystemError: If ``λᵢ + conj(λⱼ)`` (nearly) vanishes for eigenvalues of ``A``.
    """
    return solve_sylvester(a, ctranspose(a), c, check=check)


def hermitian_sqrt(a: Array) -> Array:
    """Principal square root of a Hermitian positive semi-definite matrix.

    Small negative eigenvalues caused by round-off are clipped to zero.
    """
    w, v = jnp.linalg.eigh(a)
    root = jnp.sqrt(jnp.clip(w, 0.0))
    return (v * root[None, :]) @ ctranspose(v)


def condition_number(matrix: Array) -> float:
    """2-norm condition number of ``matrix``, with ``inf`` for non-finite results."""
    cond = jnp.linalg.cond(matrix)
    if not bool(jnp.isfinite(cond)):
        return float("inf")
    return float(jnp.real(cond))


def ensure_nonsingular(matrix: Array, operation: str, max_condition: float | None = None) -> None:
    """Raise :class:`SingularSystemError` if ``matrix`` is too ill-conditioned to solve with.

    Args:
        matrix: Square system matrix.
        operation: Name of the operation, used in the error message.
        max_condition: Largest acceptable condition number. Defaults to
            ``NumericalConstants.MAX_CONDITION_NUMBER``, capped at ``0.1 / eps`` of
            the matrix dtype so that single precision systems are judged fairly.

    Raises:
        SingularSystemError: If the matrix holds non-finite values or its
            condition number exceeds ``max_condition``.
    """
    if not bool(jnp.all(jnp.isfinite(matrix))):
        logger.warning(f"Non-finite system matrix in '{operation}'")
        raise SingularSystemError(
            f"System matrix for '{operation}' contains non-finite entries",
            operation=operation,
            condition_number=float("inf"),
        )
    if max_condition is None:
        eps = float(jnp.finfo(matrix.dtype).eps)
        max_condition = min(NumericalConstants.MAX_CONDITION_NUMBER, 0.1 / eps)
    cond = condition_number(matrix)
    if cond > max_condition:
        logger.warning(f"Singular system in '{operation}' (condition number {cond:.3e})")
        raise SingularSystemError(
            f"System matrix for '{operation}' is singular to working precision",
            operation=operation,
            condition_number=cond,
            matrix_norm=float(jnp.linalg.norm(matrix)),
            recommended_action="Reduce the step size so that both points stay close together",
        )
