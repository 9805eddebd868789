"""stiefelax core module: numerical constants, typing helpers and JIT management."""

from .constants import NumericalConstants
from .jit_decorator import clear_jit_cache, get_cache_info, jit_optimized

__all__ = [
    "NumericalConstants",
    "clear_jit_cache",
    "get_cache_info",
    "jit_optimized",
]
