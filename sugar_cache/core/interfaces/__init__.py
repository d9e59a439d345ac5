from sugar_cache.core.interfaces.cache import CacheStore, MemoryProbe

__all__ = ["CacheStore", "MemoryProbe"]
