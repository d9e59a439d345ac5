from sugar_cache.core.observability.observer import CacheObserver

__all__ = ["CacheObserver"]
