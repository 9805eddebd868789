"""Tests for the manifold error hierarchy."""

import jax.numpy as jnp
import pytest

from stiefelax.manifolds.errors import (
    DimensionError,
    InvalidPointError,
    InvalidTangentVectorError,
    ManifoldError,
    NumericalStabilityError,
    SingularSystemError,
    check_shape,
)


class TestManifoldErrorHierarchy:
    """Test the manifold error hierarchy."""

    def test_manifold_error_is_base_exception(self):
        error = ManifoldError("Test error")
        assert isinstance(error, Exception)
        assert str(error) == "Test error"

    def test_dimension_error_with_shapes(self):
        error = DimensionError("Shape mismatch", expected=(5, 2), actual=(5, 3))
        assert isinstance(error, ManifoldError)
        assert error.expected == (5, 2)
        assert error.actual == (5, 3)
        assert "expected=(5, 2)" in str(error)
        assert "actual=(5, 3)" in str(error)

    def test_dimension_error_without_shapes(self):
        assert str(DimensionError("bad")) == "bad"

    def test_singular_system_error(self):
        error = SingularSystemError("singular", operation="qr_inverse_retraction", condition_number=float("inf"))
        assert isinstance(error, NumericalStabilityError)
        assert isinstance(error, ManifoldError)
        assert error.operation == "qr_inverse_retraction"
        assert error.condition_number == float("inf")
        assert error.matrix_norm is None

    def test_invalid_point_error(self):
        point = jnp.ones((3, 2))
        error = InvalidPointError("not orthonormal", point=point, violated_constraint="orthonormality", constraint_value=1.5)
        assert isinstance(error, ManifoldError)
        assert error.point is point
        assert error.violated_constraint == "orthonormality"
        assert error.constraint_value == 1.5

    def test_invalid_tangent_vector_error(self):
        error = InvalidTangentVectorError("not tangent", orthogonality_error=0.25)
        assert isinstance(error, ManifoldError)
        assert error.orthogonality_error == 0.25
        assert error.base_point is None

    def test_errors_can_be_raised_and_caught_as_base(self):
        with pytest.raises(ManifoldError):
            raise SingularSystemError("boom")


class TestCheckShape:
    """Shape checks return errors instead of raising."""

    def test_matching_shape(self):
        assert check_shape(jnp.zeros((4, 2)), (4, 2)) is None

    def test_mismatch_returns_dimension_error(self):
        error = check_shape(jnp.zeros((4, 3)), (4, 2), "point")
        assert isinstance(error, DimensionError)
        assert error.expected == (4, 2)
        assert error.actual == (4, 3)
        assert "point" in str(error)

    def test_vector_instead_of_matrix(self):
        error = check_shape(jnp.zeros(4), (4, 1))
        assert isinstance(error, DimensionError)
        assert error.actual == (4,)
