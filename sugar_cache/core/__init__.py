"""
Core Module

Foundational components: configuration, logging, exceptions, protocols and
observability.
"""

from .exceptions import (
    ArgumentMismatchError,
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    CacheTransportError,
    ConfigurationError,
    InvalidTTLError,
    SugarCacheError,
)
from .logging import get_logger, log_stage, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "log_stage",
    "SugarCacheError",
    "ConfigurationError",
    "InvalidTTLError",
    "CacheError",
    "CacheConnectionError",
    "CacheTransportError",
    "CacheSerializationError",
    "ArgumentMismatchError",
]
