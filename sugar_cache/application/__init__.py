"""
Application Module

Public cache facade and memoization decorators.
"""

from .cache import CacheOptions, InMemoryCacheOptions, SugarCache
from .memoization import CachedFunction, CallChain

__all__ = [
    "CacheOptions",
    "CachedFunction",
    "CallChain",
    "InMemoryCacheOptions",
    "SugarCache",
]
