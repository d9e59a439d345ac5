"""
Exception Module

Structured exception hierarchy for the cache client.

Module Structure:
-----------------
- **base.py**: SugarCacheError base class + ConfigurationError, InvalidTTLError
- **cache.py**: Runtime cache exceptions (transport, serialization, arguments)

Usage:
------
```python
from sugar_cache.core.exceptions import CacheTransportError, ConfigurationError
```
"""

from sugar_cache.core.exceptions.base import (
    ConfigurationError,
    InvalidTTLError,
    SugarCacheError,
)
from sugar_cache.core.exceptions.cache import (
    ArgumentMismatchError,
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    CacheTransportError,
)

__all__ = [
    "SugarCacheError",
    "ConfigurationError",
    "InvalidTTLError",
    "CacheError",
    "CacheConnectionError",
    "CacheTransportError",
    "CacheSerializationError",
    "ArgumentMismatchError",
]
