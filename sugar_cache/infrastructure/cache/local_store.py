"""
Local (in-process) cache tier.

Responsibility: fast, process-private storage in front of Redis.

Implementation Details:
- Plain dict keyed by ``<namespace>:memory:<composed key>``; values are kept
  as Python objects, no serialization
- Each write schedules its own expiry with ``loop.call_later``; a later
  write, delete or clear cancels the pending handle so a stale timer never
  removes a newer value
- Writes are dropped while the memory probe reports usage at or above the
  threshold, and any older entry for the key is removed: the tier stays
  correct-but-empty under pressure
- A disabled tier misses on every read and ignores every write

The mapping and timers are only touched from the event loop thread, so no
lock is needed.
"""

import asyncio
from typing import Any

from sugar_cache.core.config.constants import KEY_SEPARATOR, LOCAL_ENTRY_SEGMENT, Stage
from sugar_cache.core.interfaces import MemoryProbe
from sugar_cache.core.logging.logger import log_stage
from sugar_cache.core.observability import CacheObserver


class LocalStore:
    """
    In-memory cache tier with per-entry TTLs.

    Not shared across facade instances unless the caller shares the facade.
    """

    def __init__(
        self,
        namespace: str,
        memory_probe: MemoryProbe,
        observer: CacheObserver,
        enabled: bool = True,
        memory_threshold: float = 0.5,
    ):
        """
        Args:
            namespace: Effective namespace prefix
            memory_probe: Memory-pressure capability consulted before writes
            observer: Metrics/logging sink
            enabled: When False every operation is a no-op / miss
            memory_threshold: Usage ratio at which writes are dropped
        """
        self._prefix = f"{namespace}{KEY_SEPARATOR}{LOCAL_ENTRY_SEGMENT}{KEY_SEPARATOR}"
        self._probe = memory_probe
        self._observer = observer
        self._enabled = enabled
        self._threshold = memory_threshold

        self._entries: dict[str, Any] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _entry_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _cancel_timer(self, entry_key: str) -> None:
        handle = self._timers.pop(entry_key, None)
        if handle is not None:
            handle.cancel()

    def _expire(self, entry_key: str) -> None:
        self._timers.pop(entry_key, None)
        self._entries.pop(entry_key, None)
        log_stage(self._observer.logger, Stage.LOCAL_EXPIRE, "Local entry expired", level="debug",
                  cache_key=entry_key)

    # -------------------------------------------------------------------------
    # Point operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        if not self._enabled:
            return None
        return self._entries.get(self._entry_key(key))

    async def set(self, key: str, value: Any, ttl_ms: int | None) -> None:
        """
        Store a value unless memory pressure is at or above the threshold.

        Args:
            key: Composed key
            value: Value to store
            ttl_ms: Time-to-live in milliseconds (None keeps the entry until deleted)
        """
        if not self._enabled:
            return

        entry_key = self._entry_key(key)
        self._cancel_timer(entry_key)

        usage = self._probe.usage_ratio()
        if usage >= self._threshold:
            # an older value must not outlive a newer write to Redis
            self._entries.pop(entry_key, None)
            self._observer.record_memory_skip(key, usage)
            return

        self._entries[entry_key] = value

        if ttl_ms is not None:
            loop = asyncio.get_running_loop()
            self._timers[entry_key] = loop.call_later(ttl_ms / 1000, self._expire, entry_key)

    async def delete(self, key: str) -> None:
        if not self._enabled:
            return
        entry_key = self._entry_key(key)
        self._cancel_timer(entry_key)
        self._entries.pop(entry_key, None)

    async def clear(self) -> None:
        if not self._enabled:
            return
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._entries.clear()

    # -------------------------------------------------------------------------
    # Batched operations (per key; nothing to pipeline in memory)
    # -------------------------------------------------------------------------

    async def batch_get(self, keys: list[str]) -> list[Any | None]:
        return [await self.get(key) for key in keys]

    async def batch_set(self, keys: list[str], values: list[Any], ttl_ms: int | None) -> None:
        for key, value in zip(keys, values, strict=True):
            await self.set(key, value, ttl_ms)

    async def batch_delete(self, keys: list[str]) -> None:
        for key in keys:
            await self.delete(key)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def size(self) -> int:
        """Current number of entries."""
        return len(self._entries)

    def keys(self) -> list[str]:
        """Composed keys currently held (without the namespace prefix)."""
        return [k[len(self._prefix):] for k in self._entries]

    def pending_expiries(self) -> int:
        """Number of scheduled expiry timers."""
        return len(self._timers)
