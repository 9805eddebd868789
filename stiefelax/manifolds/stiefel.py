"""Implementation of the Stiefel manifold St(n, k, F).

The Stiefel manifold consists of all ``n x k`` matrices ``p`` over the field F
(real or complex) with orthonormal columns, ``pᴴp = I_k``. The tangent space at
``p`` is ``T_p St = {X : pᴴX + Xᴴp = 0}``. The manifold is isometrically embedded
in the Euclidean space of ``n x k`` matrices; inner products, norms and zero
vectors are forwarded to :class:`~stiefelax.manifolds.euclidean.Euclidean`.

Retractions, inverse retractions and vector transports come in several
algorithms that agree to first order but differ in cost and domain of validity:

* polar factor (SVD) retraction and its Lyapunov-based inverse,
* QR retraction and its triangular back-substitution inverse,
* Cayley / Padé rational approximants of the matrix exponential,
* vector transports as push-forwards of the Cayley, polar and QR retractions,
  or by projection.

Numerical kernels are JIT-compiled; the checks that raise
:class:`~stiefelax.manifolds.errors.SingularSystemError` run eagerly around them.
"""

import logging
import math

import jax.numpy as jnp
from jax.scipy.linalg import solve_triangular
from jaxtyping import Array, PRNGKeyArray

from ..core.constants import NumericalConstants
from ..core.jit_decorator import jit_optimized
from ..core.type_system import ManifoldPoint, SquareMatrix, TangentVector, ctranspose
from .base import Manifold, isapprox
from .errors import DimensionError, InvalidPointError, InvalidTangentVectorError, ManifoldError, check_shape
from .euclidean import Euclidean, check_field, standard_normal
from .linalg import ensure_nonsingular, hermitian_sqrt, solve_lyapunov, solve_sylvester
from .methods import (
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

logger = logging.getLogger(__name__)


def _herm(a: Array) -> Array:
    return (a + ctranspose(a)) / 2


@jit_optimized()
def _project(p: Array, Z: Array) -> Array:
    return Z - p @ _herm(ctranspose(p) @ Z)


def qr_sign_correction(r_diag: Array) -> Array:
    """Signs ``D_ii`` applied to the columns of Q and rows of R in the QR retraction.

    Diagonal entries with ``Re R_ii ≥ -½`` map to ``+1`` and those below to ``-1``, so a
    vanishing ``R_ii`` gets the continuous choice ``+1`` and no entry maps to ``0``.
    """
    return jnp.where(jnp.real(r_diag) >= -NumericalConstants.QR_SIGN_SHIFT, 1.0, -1.0)


def _qr_factors(a: Array) -> tuple[Array, Array]:
    """Reduced QR factorization ``a = QR`` with the retraction's sign correction applied to both factors."""
    q, r = jnp.linalg.qr(a, mode="reduced")
    d = qr_sign_correction(jnp.diagonal(r)).astype(q.dtype)
    return q * d[None, :], d[:, None] * r


def _skew_generator(p: Array, X: Array) -> Array:
    """``W = P_p X pᴴ − p Xᴴ P_p`` with ``P_p = I − ½ p pᴴ``."""
    eye = jnp.eye(p.shape[0], dtype=jnp.result_type(p, X))
    pp = eye - 0.5 * (p @ ctranspose(p))
    return pp @ X @ ctranspose(p) - p @ ctranspose(X) @ pp


@jit_optimized()
def _retract_polar(p: Array, X: Array, t: float) -> Array:
    u, _, vh = jnp.linalg.svd(p + t * X, full_matrices=False)
    return u @ vh


@jit_optimized()
def _retract_qr(p: Array, X: Array, t: float) -> Array:
    q, _ = _qr_factors(p + t * X)
    return q


@jit_optimized(static_args=(3,))
def _retract_pade(p: Array, X: Array, t: float, m: int) -> Array:
    """Padé retraction ``q_m(W)⁻¹ p_m(W) p`` of order ``m``.

    The coefficients ``c_k = (2m−k)! m! / ((2m)! (m−k)! k!)`` are built
    incrementally; a common factor cancels in the solve.
    """
    w = _skew_generator(p, t * X)
    eye = jnp.eye(w.shape[0], dtype=w.dtype)
    pm = jnp.zeros_like(w)
    qm = jnp.zeros_like(w)
    w_power = (math.factorial(m) / math.factorial(2 * m)) * eye
    for k in range(m + 1):
        w_power = w_power * (2 if k == 0 else (m - k + 1) / ((2 * m - k + 1) * k))
        pm = pm + w_power
        qm = qm + w_power if k % 2 == 0 else qm - w_power
        w_power = w_power @ w
    return jnp.linalg.solve(qm, pm @ p)


def _solve_real_diagonal(block: Array, b: Array) -> Array:
    """Solve ``block · r = b + iβ e_last`` with the real ``β`` that makes ``r_last`` real.

    Only the real part of the last equation is prescribed; its imaginary part
    is fixed by requiring a real diagonal entry of ``R``. Real systems have ``β = 0``.
    """
    if not jnp.iscomplexobj(block):
        return jnp.linalg.solve(block, b)
    unit = jnp.zeros_like(b).at[-1].set(1)
    solution = jnp.linalg.solve(block, jnp.stack([b, unit], axis=1))
    particular, shift = solution[:, 0], solution[:, 1]
    beta = -jnp.imag(particular[-1]) / jnp.real(shift[-1])
    return particular + 1j * beta * shift


def _qr_inverse_factor_generic(a: Array) -> Array:
    """Upper triangular ``R`` with real diagonal and ``pᴴ(qR) + (qR)ᴴp = 2I``, column by column.

    Column ``i`` solves the leading ``(i+1) x (i+1)`` block of ``A`` against a
    right-hand side whose top entries come from the previously computed block of ``R``.
    """
    k = a.shape[0]
    r = jnp.zeros((k, k), dtype=a.dtype)
    for i in range(k):
        b = jnp.zeros(i + 1, dtype=a.dtype).at[i].set(1)
        if i > 0:
            b = b.at[:i].set(-jnp.conj(r[:i, :i].T @ a[i, :i]))
        r = r.at[: i + 1, i].set(_solve_real_diagonal(a[: i + 1, : i + 1], b))
    return r


@jit_optimized()
def _qr_inverse_factor(a: Array) -> Array:
    k = a.shape[0]
    if k == 1:
        return (1 / jnp.real(a)).astype(a.dtype)
    if k == 2:
        r11 = (1 / jnp.real(a[0, 0])).astype(a.dtype)
        col = _solve_real_diagonal(a, jnp.stack([-jnp.conj(r11 * a[1, 0]), jnp.ones((), dtype=a.dtype)]))
        zero = jnp.zeros((), dtype=a.dtype)
        return jnp.stack([jnp.stack([r11, col[0]]), jnp.stack([zero, col[1]])])
    return _qr_inverse_factor_generic(a)


@jit_optimized()
def _transport_cayley(p: Array, X: Array, d: Array) -> Array:
    wpd = _skew_generator(p, d)
    wpx = _skew_generator(p, X)
    q1 = jnp.eye(p.shape[0], dtype=wpd.dtype) - 0.5 * wpd
    return jnp.linalg.solve(q1, wpx) @ jnp.linalg.solve(q1, p)


def _antisymmetrize_upper(a: SquareMatrix) -> SquareMatrix:
    """Skew-Hermitian matrix with the strictly upper part of ``a`` and the imaginary part of its diagonal."""
    upper = jnp.triu(a, 1)
    diagonal = jnp.diag(jnp.diagonal(a - ctranspose(a)) / 2)
    return upper - ctranspose(upper) + diagonal


class Stiefel(Manifold):
    """Stiefel manifold St(n, k, F) of orthonormal k-frames in Fⁿ.

    Points are ``n x k`` matrices ``p`` with ``pᴴp = I_k``; tangent vectors at ``p``
    are ``n x k`` matrices ``X`` with ``pᴴX + Xᴴp = 0``. Instances are immutable and
    compare equal when ``(n, k, field)`` agree.

    Args:
        n: Number of rows (ambient dimension).
        k: Number of orthonormal columns, ``1 ≤ k ≤ n``.
        field: Scalar field, :attr:`Field.REAL` by default.

    Raises:
        DimensionError: If ``k > n`` or a dimension is not positive.

    Examples:
        >>> M = Stiefel(5, 2)
        >>> M.manifold_dimension()
        7
    """

    def __init__(self, n: int, k: int, field: Field = Field.REAL):
        """Initialize Stiefel manifold."""
        if n <= 0 or k <= 0:
            raise DimensionError("Dimensions must be positive", expected="n >= k >= 1", actual=(n, k))
        if k > n:
            raise DimensionError(f"Frame dimension k={k} cannot exceed ambient dimension n={n}")
        if not isinstance(field, Field):
            raise TypeError(f"field must be a Field, got {type(field).__name__}")

        super().__init__()
        self._n = n
        self._k = k
        self._field = field

    @property
    def n(self) -> int:
        """Number of rows."""
        return self._n

    @property
    def k(self) -> int:
        """Number of orthonormal columns."""
        return self._k

    @property
    def field(self) -> Field:
        """Scalar field of the entries."""
        return self._field

    # Dimension information

    def manifold_dimension(self) -> int:
        """Real dimension of St(n, k, F).

        ``nk − k(k+1)/2`` over ℝ, ``2nk − k²`` over ℂ and ``4nk − k(2k−1)`` over ℍ.
        """
        n, k = self._n, self._k
        if self._field is Field.REAL:
            return n * k - k * (k + 1) // 2
        if self._field is Field.COMPLEX:
            return 2 * n * k - k * k
        return 4 * n * k - k * (2 * k - 1)

    @property
    def ambient_dimension(self) -> int:
        """Real dimension of the embedding, ``n·k·dim_ℝ(F)``."""
        return self.get_embedding().manifold_dimension()

    def representation_size(self) -> tuple[int, int]:
        """Shape ``(n, k)`` of the matrices representing points and tangent vectors."""
        return (self._n, self._k)

    def is_flat(self) -> bool:
        """Whether the manifold is one-dimensional, e.g. St(2, 1, ℝ), the circle."""
        return self.manifold_dimension() == 1

    # Embedding

    def get_embedding(self) -> Euclidean:
        """The Euclidean space of ``n x k`` matrices over the same field."""
        return Euclidean(self._n, self._k, self._field)

    def change_representer(self, p: ManifoldPoint, X: TangentVector) -> TangentVector:
        """Riesz representer of the cotangent vector ``X``; the identity for the embedded metric."""
        return X

    def change_metric(self, p: ManifoldPoint, X: TangentVector) -> TangentVector:
        """Convert ``X`` from the Euclidean metric; the identity since the embedding is isometric."""
        return X

    # Validation

    def check_point(self, p: ManifoldPoint, atol: float | None = None, rtol: float | None = None) -> ManifoldError | None:
        """Check whether ``p`` is a point on the manifold.

        The shape is checked first, then the field and finally that ``pᴴp`` is
        approximately the identity.

        Args:
            p: Candidate point.
            atol: Absolute tolerance, ``√eps`` of the dtype by default.
            rtol: Relative tolerance, ``√eps`` of the dtype by default.

        Returns:
            ``None`` for a valid point, otherwise a :class:`DimensionError` or an
            :class:`InvalidPointError` whose ``constraint_value`` is ``‖pᴴp − I‖``.
        """
        error = check_shape(p, self.representation_size(), "point") or check_field(p, self._field)
        if error is not None:
            return error
        c = ctranspose(p) @ p
        eye = jnp.eye(self._k, dtype=c.dtype)
        if not isapprox(c, eye, atol=atol, rtol=rtol):
            residual = float(jnp.linalg.norm(c - eye))
            return InvalidPointError(
                f"The point does not lie on {self}, because pᴴp is not the identity (residual {residual:.3e})",
                point=p,
                violated_constraint="orthonormality",
                constraint_value=residual,
            )
        return None

    def check_vector(
        self, p: ManifoldPoint, X: TangentVector, atol: float | None = None, rtol: float | None = None
    ) -> ManifoldError | None:
        """Check whether ``X`` is a tangent vector at ``p``, i.e. ``pᴴX + Xᴴp ≈ 0``.

        Returns:
            ``None`` for a valid tangent vector, otherwise a :class:`DimensionError`
            or an :class:`InvalidTangentVectorError` whose ``orthogonality_error``
            is ``‖pᴴX + Xᴴp‖``.
        """
        error = (
            check_shape(p, self.representation_size(), "point")
            or check_shape(X, self.representation_size(), "tangent vector")
            or check_field(X, self._field, "tangent vector")
        )
        if error is not None:
            return error
        pX = ctranspose(p) @ X
        Xp = ctranspose(X) @ p
        if not isapprox(pX, -Xp, atol=atol, rtol=rtol):
            residual = float(jnp.linalg.norm(pX + Xp))
            return InvalidTangentVectorError(
                f"The matrix does not lie in the tangent space at p on {self}, "
                f"since pᴴX + Xᴴp is not zero (residual {residual:.3e})",
                tangent_vector=X,
                base_point=p,
                orthogonality_error=residual,
            )
        return None

    # Default methods

    def default_retraction_method(self) -> RetractionMethod:
        """:class:`PolarRetraction`."""
        return PolarRetraction()

    def default_inverse_retraction_method(self) -> InverseRetractionMethod:
        """:class:`PolarInverseRetraction`."""
        return PolarInverseRetraction()

    def default_vector_transport_method(self) -> VectorTransportMethod:
        """Differentiated :class:`PolarRetraction`."""
        return DifferentiatedRetractionVectorTransport(PolarRetraction())

    # Projection

    def proj(self, p: ManifoldPoint, Z: Array) -> TangentVector:
        """Project an ambient matrix onto the tangent space at ``p``.

        ``proj_p(Z) = Z − p·herm(pᴴZ)`` with ``herm(A) = (A + Aᴴ)/2``.
        """
        return _project(p, Z)

    # Retractions

    def retract(
        self, p: ManifoldPoint, X: TangentVector, method: RetractionMethod | None = None, t: float = 1.0
    ) -> ManifoldPoint:
        """Retract the tangent vector ``tX`` at ``p`` onto the manifold.

        * :class:`PolarRetraction`: the unitary polar factor ``UVᴴ`` of
          ``p + tX = UΣVᴴ``, the closest point in the Frobenius norm.
        * :class:`QRRetraction`: ``QD`` for ``p + tX = QR`` with
          ``D = diag(sign(sign(R_ii + ½)))``.
        * :class:`PadeRetraction` of order ``m`` (``m = 1`` is
          :class:`CayleyRetraction`): ``q_m(W)⁻¹ p_m(W) p`` with
          ``W = P_p (tX) pᴴ − p (tX)ᴴ P_p`` and ``P_p = I − ½ppᴴ``.

        Every method returns ``p`` for ``t = 0`` and agrees with ``p + tX`` to first order.

        Args:
            p: Point on the manifold.
            X: Tangent vector at ``p``.
            method: Retraction method, :meth:`default_retraction_method` if omitted.
            t: Step size.

        Returns:
            The retracted point.
        """
        method = self.default_retraction_method() if method is None else method
        logger.debug(f"{self}: retract with {method!r}, t={t}")
        if isinstance(method, PolarRetraction):
            return _retract_polar(p, X, t)
        if isinstance(method, QRRetraction):
            return _retract_qr(p, X, t)
        if isinstance(method, PadeRetraction):
            return _retract_pade(p, X, t, method.m)
        raise ValueError(f"Unknown retraction method: {method!r}")

    def inverse_retract(
        self, p: ManifoldPoint, q: ManifoldPoint, method: InverseRetractionMethod | None = None
    ) -> TangentVector:
        """Tangent vector at ``p`` that the matching retraction maps onto ``q``.

        Both methods are only defined for points close to each other.

        * :class:`PolarInverseRetraction`: with ``A = pᴴq``, solve the Lyapunov
          equation ``AB + BAᴴ = 2I`` and return ``qB − p``.
        * :class:`QRInverseRetraction`: build the upper triangular ``R`` with
          ``pᴴ(qR)`` having identity Hermitian part and ``R`` a real
          diagonal, column by column, and return ``qR − p``. Requires every
          leading principal minor of ``pᴴq`` to be nonsingular.

        Raises:
            SingularSystemError: If the Lyapunov operator or a leading principal
                minor is singular to working precision.
        """
        method = self.default_inverse_retraction_method() if method is None else method
        logger.debug(f"{self}: inverse_retract with {method!r}")
        if isinstance(method, PolarInverseRetraction):
            return self._inverse_retract_polar(p, q)
        if isinstance(method, QRInverseRetraction):
            return self._inverse_retract_qr(p, q)
        raise ValueError(f"Unknown inverse retraction method: {method!r}")

    def _inverse_retract_polar(self, p: Array, q: Array) -> Array:
        a = ctranspose(p) @ q
        b = solve_lyapunov(a, 2 * jnp.eye(self._k, dtype=a.dtype))
        return q @ b - p

    def _inverse_retract_qr(self, p: Array, q: Array) -> Array:
        a = ctranspose(p) @ q
        for i in range(1, self._k + 1):
            ensure_nonsingular(a[:i, :i], "qr_inverse_retraction")
        return q @ _qr_inverse_factor(a) - p

    # Vector transports

    def vector_transport_direction(
        self,
        p: ManifoldPoint,
        X: TangentVector,
        d: TangentVector,
        method: VectorTransportMethod | None = None,
    ) -> TangentVector:
        """Transport ``X`` from ``T_p`` to the tangent space at ``q = retr_p(d)``.

        * Differentiated :class:`CayleyRetraction`:
          ``(I − ½W_{p,d})⁻¹ W_{p,X} (I − ½W_{p,d})⁻¹ p``.
        * Differentiated :class:`PolarRetraction`: ``qΛ + (X − qqᴴX)S⁻¹`` where
          ``S = (I + dᴴd)^{1/2}`` and ``ΛS + SΛ = qᴴX − Xᴴq``.
        * Differentiated :class:`QRRetraction`: ``q ρ(T) + XR⁻¹ − qT`` where
          ``p + d = qR``, ``T = qᴴXR⁻¹`` and ``ρ(T)`` is the skew-Hermitian
          matrix sharing the strictly upper triangle of ``T``.
        * :class:`ProjectionTransport`: project ``X`` onto ``T_q`` with ``q``
          the default retraction of ``d``.

        The result is linear in ``X``.

        Raises:
            SingularSystemError: If a Sylvester or triangular solve is singular.
        """
        method = self.default_vector_transport_method() if method is None else method
        logger.debug(f"{self}: vector_transport_direction with {method!r}")
        if isinstance(method, ProjectionTransport):
            return self.proj(self.retract(p, d), X)
        if not isinstance(method, DifferentiatedRetractionVectorTransport):
            raise ValueError(f"Unknown vector transport method: {method!r}")
        retraction = method.retraction
        if isinstance(retraction, PolarRetraction):
            return self._transport_polar(_retract_polar(p, d, 1.0), X, d)
        if isinstance(retraction, QRRetraction):
            q, r = _qr_factors(p + d)
            return self._transport_qr(q, r, X)
        return _transport_cayley(p, X, d)

    def vector_transport_to(
        self,
        p: ManifoldPoint,
        X: TangentVector,
        q: ManifoldPoint,
        method: VectorTransportMethod | None = None,
    ) -> TangentVector:
        """Transport ``X`` from ``T_p`` to ``T_q``.

        Differentiated polar and QR transports first recover the direction
        ``d = retr_p⁻¹(q)`` with the matching inverse retraction and then apply
        the direction form. The Cayley retraction has no paired inverse
        retraction, so its differentiated transport is only available through
        :meth:`vector_transport_direction`. :class:`ProjectionTransport` projects
        ``X`` onto ``T_q``.

        Raises:
            ValueError: For the differentiated Cayley transport or unknown methods.
            SingularSystemError: If the inverse retraction or a solve is singular.
        """
        method = self.default_vector_transport_method() if method is None else method
        logger.debug(f"{self}: vector_transport_to with {method!r}")
        if isinstance(method, ProjectionTransport):
            return self.proj(q, X)
        if not isinstance(method, DifferentiatedRetractionVectorTransport):
            raise ValueError(f"Unknown vector transport method: {method!r}")
        retraction = method.retraction
        if isinstance(retraction, PolarRetraction):
            d = self._inverse_retract_polar(p, q)
            return self._transport_polar(q, X, d)
        if isinstance(retraction, QRRetraction):
            d = self._inverse_retract_qr(p, q)
            _, r = _qr_factors(p + d)
            return self._transport_qr(q, r, X)
        raise ValueError(
            f"{retraction!r} has no inverse retraction on {self}; use vector_transport_direction instead"
        )

    def _transport_polar(self, q: Array, X: Array, d: Array) -> Array:
        s = hermitian_sqrt(jnp.eye(self._k, dtype=d.dtype) + ctranspose(d) @ d)
        qX = ctranspose(q) @ X
        ensure_nonsingular(s, "polar_vector_transport")
        lam = solve_sylvester(s, s, qX - ctranspose(X) @ q)
        normal = X - q @ qX
        return q @ lam + jnp.linalg.solve(s.T, normal.T).T

    def _transport_qr(self, q: Array, r: Array, X: Array) -> Array:
        ensure_nonsingular(r, "qr_vector_transport")
        xrf = solve_triangular(r, X.T, trans="T", lower=False).T
        t = ctranspose(q) @ xrf
        return q @ _antisymmetrize_upper(t) + xrf - q @ t

    # Sampling

    def random_point(self, key: PRNGKeyArray, sigma: float = 1.0) -> ManifoldPoint:
        """Random point: the Q factor of a ``sigma``-scaled Gaussian ``n x k`` matrix.

        Args:
            key: JAX PRNG key.
            sigma: Standard deviation of the Gaussian draw.

        Raises:
            ManifoldError: For the quaternion field, which has no array representation.
        """
        gaussian = standard_normal(key, self.representation_size(), self._field, sigma)
        q, _ = jnp.linalg.qr(gaussian, mode="reduced")
        return q

    def random_tangent(self, key: PRNGKeyArray, p: ManifoldPoint, sigma: float = 1.0) -> TangentVector:
        """Random unit-norm tangent vector at ``p``.

        A ``sigma``-scaled Gaussian matrix is projected onto ``T_p`` and then
        rescaled to unit Frobenius norm, so ``sigma`` does not affect the
        magnitude of the result. On the zero-dimensional St(1, 1, ℝ) the only
        tangent vector is zero, which is returned instead.
        """
        if self.manifold_dimension() == 0:
            return self.zero_vector(p)
        gaussian = standard_normal(key, self.representation_size(), self._field, sigma)
        X = self.proj(p, gaussian)
        return X / jnp.linalg.norm(X)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stiefel):
            return NotImplemented
        return (self._n, self._k, self._field) == (other._n, other._k, other._field)

    def __hash__(self) -> int:
        return hash(("Stiefel", self._n, self._k, self._field))

    def __repr__(self) -> str:
        """Return string representation of Stiefel manifold."""
        return f"Stiefel({self._n}, {self._k}, {self._field})"
