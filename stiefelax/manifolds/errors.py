"""Manifold error hierarchy.

Validation errors (:class:`DimensionError`, :class:`InvalidPointError`,
:class:`InvalidTangentVectorError`) are *returned* by the ``check_*`` methods so
that a caller can recover, e.g. by rejecting a step and shrinking it. Numerical
failures inside retractions, inverse retractions and transports are *raised* as
:class:`SingularSystemError`.
"""

from jaxtyping import Array


class ManifoldError(Exception):
    """Base class of all stiefelax errors."""


class DimensionError(ManifoldError):
    """Array shape or manifold parameters do not match.

    Attributes:
        expected: Required shape or constraint.
        actual: Shape or parameters that were given.
    """

    def __init__(self, message: str, expected: int | tuple | str | None = None, actual: int | tuple | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        message = super().__str__()
        if self.expected is None or self.actual is None:
            return message
        return f"{message} (expected={self.expected}, actual={self.actual})"


class NumericalStabilityError(ManifoldError):
    """A computation cannot be carried out reliably in floating point.

    Attributes:
        condition_number: Condition number of the offending matrix, ``inf`` if non-finite.
        matrix_norm: Frobenius norm of the offending matrix.
        recommended_action: Hint on how to avoid the failure.
    """

    def __init__(
        self,
        message: str,
        condition_number: float | None = None,
        matrix_norm: float | None = None,
        recommended_action: str | None = None,
    ):
        super().__init__(message)
        self.condition_number = condition_number
        self.matrix_norm = matrix_norm
        self.recommended_action = recommended_action


class SingularSystemError(NumericalStabilityError):
    """A linear, Lyapunov or Sylvester solve met a (near-)singular operator.

    Raised for instance by the QR inverse retraction when a leading principal
    minor of ``pᴴq`` vanishes, or by the polar inverse retraction when the two
    points are too far apart for the Lyapunov equation to be solvable.

    Attributes:
        operation: Name of the failing solve, e.g. ``"qr_inverse_retraction"``.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        condition_number: float | None = None,
        matrix_norm: float | None = None,
        recommended_action: str | None = None,
    ):
        super().__init__(message, condition_number, matrix_norm, recommended_action)
        self.operation = operation


class InvalidPointError(ManifoldError):
    """A matrix is not a point of the manifold.

    Attributes:
        point: The rejected matrix.
        violated_constraint: ``"orthonormality"`` or ``"field"``.
        constraint_value: Size of the violation, ``‖pᴴp − I‖`` for orthonormality.
    """

    def __init__(
        self,
        message: str,
        point: Array | None = None,
        violated_constraint: str | None = None,
        constraint_value: float | None = None,
    ):
        super().__init__(message)
        self.point = point
        self.violated_constraint = violated_constraint
        self.constraint_value = constraint_value


class InvalidTangentVectorError(ManifoldError):
    """A matrix is not in the tangent space at the given base point.

    Attributes:
        tangent_vector: The rejected matrix ``X``.
        base_point: The base point ``p``.
        orthogonality_error: ``‖pᴴX + Xᴴp‖``.
    """

    def __init__(
        self,
        message: str,
        tangent_vector: Array | None = None,
        base_point: Array | None = None,
        orthogonality_error: float | None = None,
    ):
        super().__init__(message)
        self.tangent_vector = tangent_vector
        self.base_point = base_point
        self.orthogonality_error = orthogonality_error


def check_shape(array: Array, expected: tuple[int, ...], name: str = "array") -> DimensionError | None:
    """Return a :class:`DimensionError` if ``array`` does not have shape ``expected``.

    Args:
        array: Array to check.
        expected: Required shape.
        name: Name of the argument for the error message.

    Returns:
        ``None`` if the shape matches, otherwise the error describing the mismatch.
    """
    actual = tuple(getattr(array, "shape", ()))
    if actual != tuple(expected):
        return DimensionError(f"Shape mismatch for {name}", expected=tuple(expected), actual=actual)
    return None
