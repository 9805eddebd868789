"""JIT decorator that keeps compilation concerns out of the geometry code.

Numerical kernels are written as plain ``jax.numpy`` functions and decorated
with :func:`jit_optimized`; compiled versions are kept in a bounded LRU cache
keyed by qualified name and static argument positions.
"""

import functools
import logging
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import jax

logger = logging.getLogger(__name__)


class JITOptimizer:
    """JIT compiler front-end with an LRU cache of compiled functions."""

    def __init__(self, cache_size: int = 128):
        """Initialize the optimizer.

        Args:
            cache_size: Maximum number of compiled functions to keep (default: 128).
        """
        self.cache_size = cache_size
        self._cache: OrderedDict[tuple[str, tuple[int, ...]], Callable[..., Any]] = OrderedDict()

    def compile(self, func: Callable[..., Any], static_args: tuple[int, ...] = ()) -> Callable[..., Any]:
        """Return the compiled version of ``func``, compiling it on first use.

        Args:
            func: Function to compile.
            static_args: Argument positions to treat as static.

        Returns:
            JIT-compiled function.
        """
        cache_key = (f"{func.__module__}.{func.__qualname__}", static_args)
        if cache_key in self._cache:
            self._cache.move_to_end(cache_key)
            return self._cache[cache_key]

        logger.debug(f"Compiling {cache_key[0]} with static_argnums={static_args}")
        compiled = jax.jit(func, static_argnums=static_args) if static_args else jax.jit(func)
        self._cache[cache_key] = compiled
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return compiled

    def clear_cache(self) -> None:
        """Drop every compiled function."""
        self._cache.clear()


_global_optimizer = JITOptimizer()


def jit_optimized(static_args: tuple[int, ...] = ()) -> Callable[..., Any]:
    """Decorator applying cached JIT compilation to a numerical kernel.

    Args:
        static_args: Argument positions treated as static during compilation,
            e.g. an integer approximation order.

    Examples:
        >>> @jit_optimized(static_args=(2,))
        ... def scaled(x, v, order):
        ...     return x + order * v
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _global_optimizer.compile(func, static_args)(*args, **kwargs)

        wrapper._original_func = func  # type: ignore[attr-defined]
        wrapper._static_args = static_args  # type: ignore[attr-defined]
        return wrapper

    return decorator


def clear_jit_cache() -> None:
    """Clear the global compilation cache."""
    _global_optimizer.clear_cache()


def get_cache_info() -> dict[str, Any]:
    """Return size, capacity and keys of the global compilation cache."""
    return {
        "cache_size": len(_global_optimizer._cache),
        "cache_capacity": _global_optimizer.cache_size,
        "cached_functions": list(_global_optimizer._cache.keys()),
    }
