"""Test module for type aliases and dtype helpers."""

import math

import jax.numpy as jnp

from stiefelax.core.type_system import (
    ManifoldPoint,
    SquareMatrix,
    TangentVector,
    complex_dtype,
    ctranspose,
    default_tolerance,
    is_complex,
    real_dtype,
)


class TestTypeAliases:
    """Test type alias definitions."""

    def test_aliases_exist(self):
        assert ManifoldPoint is not None
        assert TangentVector is not None
        assert SquareMatrix is not None


class TestDtypeHelpers:
    """Test dtype helpers under double precision."""

    def test_default_dtypes(self):
        assert real_dtype() == jnp.float64
        assert complex_dtype() == jnp.complex128

    def test_is_complex(self):
        assert is_complex(jnp.ones(2, dtype=jnp.complex64))
        assert not is_complex(jnp.ones(2))

    def test_default_tolerance_follows_widest_dtype(self):
        assert math.isclose(default_tolerance(jnp.ones(2)), math.sqrt(jnp.finfo(jnp.float64).eps))
        single = default_tolerance(jnp.ones(2, dtype=jnp.float32))
        assert math.isclose(single, math.sqrt(jnp.finfo(jnp.float32).eps), rel_tol=1e-6)
        mixed = default_tolerance(jnp.ones(2, dtype=jnp.float32), jnp.ones(2))
        assert mixed < single

    def test_default_tolerance_integer_input(self):
        assert default_tolerance(jnp.arange(3)) == default_tolerance(jnp.ones(3))

    def test_ctranspose(self):
        a = jnp.array([[1 + 2j, 3j], [4.0, 5 - 1j], [0.5, 1j]])
        result = ctranspose(a)
        assert result.shape == (2, 3)
        assert result[0, 0] == 1 - 2j
        assert result[1, 2] == -1j
