"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Key layout, enums (tiers, TTL units, eviction schemes) and defaults

Usage:
------
```python
from sugar_cache.core.config import get_settings
from sugar_cache.core.config.constants import TimeUnit, EvictionScheme
```
"""

from sugar_cache.core.config.settings import (
    CacheSettings,
    LoggingSettings,
    RedisSettings,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "RedisSettings",
    "Settings",
    "get_settings",
    "reload_settings",
]
