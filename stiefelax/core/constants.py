"""Configuration constants for the stiefelax library.

This module defines the numerical constants used throughout the library to
ensure consistent tolerances and to eliminate magic numbers.
"""


class NumericalConstants:
    """Numerical constants for stability and tolerance in matrix operations.

    Tolerances that are not given explicitly by a caller are derived from the
    floating point precision of the arrays involved, see
    :func:`stiefelax.core.type_system.default_tolerance`.
    """

    MAX_CONDITION_NUMBER: float = 1e12
    """Largest condition number accepted before a linear system counts as singular."""

    QR_SIGN_SHIFT: float = 0.5
    """Shift applied to the diagonal of R before taking signs in the QR retraction."""
