"""Test module for JIT decorator functionality."""

import jax.numpy as jnp
from jax import Array

from stiefelax.core.jit_decorator import JITOptimizer, clear_jit_cache, get_cache_info, jit_optimized


class TestJITOptimizer:
    """Test JIT optimizer class."""

    def test_default_cache_size(self):
        """Test JITOptimizer uses default cache size of 128."""
        assert JITOptimizer().cache_size == 128

    def test_compile_caches_function(self):
        """Compiling the same function twice returns the cached object."""
        optimizer = JITOptimizer()

        def simple_add(x: Array, y: Array) -> Array:
            return x + y

        first = optimizer.compile(simple_add)
        second = optimizer.compile(simple_add)
        assert first is second
        assert jnp.allclose(first(jnp.ones(3), jnp.ones(3)), 2.0 * jnp.ones(3))

    def test_lru_eviction(self):
        """The least recently used entry is evicted once the cache is full."""
        optimizer = JITOptimizer(cache_size=1)

        def first(x: Array) -> Array:
            return x

        def second(x: Array) -> Array:
            return 2 * x

        optimizer.compile(first)
        optimizer.compile(second)
        assert len(optimizer._cache) == 1
        assert next(iter(optimizer._cache))[0].endswith("second")

    def test_static_args(self):
        """Static arguments may drive Python control flow."""
        optimizer = JITOptimizer()

        def power(x: Array, m: int) -> Array:
            result = jnp.ones_like(x)
            for _ in range(m):
                result = result * x
            return result

        compiled = optimizer.compile(power, static_args=(1,))
        assert jnp.allclose(compiled(jnp.array([2.0]), 3), jnp.array([8.0]))


class TestJitOptimizedDecorator:
    """Test the jit_optimized decorator and global cache helpers."""

    def test_decorated_function_matches_eager(self):
        """Decorated kernels compute the same values as the plain function."""

        def scaled_sum(x: Array, v: Array, order: int) -> Array:
            return x + order * v

        decorated = jit_optimized(static_args=(2,))(scaled_sum)
        x = jnp.arange(3.0)
        assert jnp.allclose(decorated(x, x, 2), scaled_sum(x, x, 2))
        assert decorated._original_func is scaled_sum
        assert decorated._static_args == (2,)

    def test_cache_info_and_clear(self):
        """The global cache records compiled kernels and can be cleared."""
        clear_jit_cache()
        assert get_cache_info()["cache_size"] == 0

        @jit_optimized()
        def negate(x: Array) -> Array:
            return -x

        negate(jnp.ones(2))
        info = get_cache_info()
        assert info["cache_size"] == 1
        assert info["cache_capacity"] == 128
        assert any(name.endswith("negate") for name, _ in info["cached_functions"])

        clear_jit_cache()
        assert get_cache_info()["cache_size"] == 0
