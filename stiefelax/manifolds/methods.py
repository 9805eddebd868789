"""Scalar fields and method tags selecting retraction, inverse retraction and transport algorithms."""

from dataclasses import dataclass
from enum import Enum


class Field(Enum):
    """Scalar field of a matrix manifold."""

    REAL = "ℝ"
    COMPLEX = "ℂ"
    QUATERNION = "ℍ"

    @property
    def real_dimension(self) -> int:
        """Dimension of the field as a real vector space."""
        return {Field.REAL: 1, Field.COMPLEX: 2, Field.QUATERNION: 4}[self]

    def __str__(self) -> str:
        return self.value


class RetractionMethod:
    """Base class of retraction tags."""


@dataclass(frozen=True)
class PolarRetraction(RetractionMethod):
    """Retraction through the unitary polar factor of ``p + tX``."""


@dataclass(frozen=True)
class QRRetraction(RetractionMethod):
    """Retraction through the sign-corrected Q factor of ``p + tX``."""


@dataclass(frozen=True)
class PadeRetraction(RetractionMethod):
    """Retraction through the Padé approximant of order ``m`` of the matrix exponential.

    Args:
        m: Approximation order, a positive integer.
    """

    m: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.m, int) or isinstance(self.m, bool) or self.m < 1:
            raise ValueError(f"Padé order must be a positive integer, got {self.m!r}")


@dataclass(frozen=True)
class CayleyRetraction(PadeRetraction):
    """Cayley transform retraction, the Padé retraction of order one."""

    m: int = 1

    def __post_init__(self) -> None:
        if self.m != 1:
            raise ValueError(f"Cayley retraction has order 1, got {self.m!r}")


class InverseRetractionMethod:
    """Base class of inverse retraction tags."""


@dataclass(frozen=True)
class PolarInverseRetraction(InverseRetractionMethod):
    """Inverse of :class:`PolarRetraction`, computed from a Lyapunov equation."""


@dataclass(frozen=True)
class QRInverseRetraction(InverseRetractionMethod):
    """Inverse of :class:`QRRetraction`, computed by a triangular column recurrence."""


class VectorTransportMethod:
    """Base class of vector transport tags."""


@dataclass(frozen=True)
class DifferentiatedRetractionVectorTransport(VectorTransportMethod):
    """Vector transport given by the push-forward of ``retraction``.

    Only :class:`CayleyRetraction` (or a :class:`PadeRetraction` of order one),
    :class:`PolarRetraction` and :class:`QRRetraction` have a differentiated
    form on the Stiefel manifold.
    """

    retraction: RetractionMethod

    def __post_init__(self) -> None:
        cayley = isinstance(self.retraction, PadeRetraction) and self.retraction.m == 1
        if not (cayley or isinstance(self.retraction, (PolarRetraction, QRRetraction))):
            raise ValueError(f"No differentiated vector transport for {self.retraction!r}")


@dataclass(frozen=True)
class ProjectionTransport(VectorTransportMethod):
    """Vector transport by orthogonal projection onto the target tangent space."""
