"""
Value Serialization for the Redis tier (orjson).

Writes fail loudly; reads that cannot be parsed are misses.
"""

from typing import Any

import orjson

from sugar_cache.core.exceptions import CacheSerializationError

_MISSING = object()


def dumps(value: Any) -> str:
    """
    Serialize a value to JSON text.

    Raises:
        CacheSerializationError: If the value is not JSON-serializable
    """
    try:
        return orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
    except TypeError as e:
        raise CacheSerializationError.from_exception(
            e, message="Value is not serializable", value_type=type(value).__name__
        ) from e


def loads(raw: str | bytes | None) -> Any:
    """
    Parse stored JSON text.

    Returns:
        The decoded value, or ``MISSING`` when nothing is stored or the
        payload cannot be parsed
    """
    if raw is None:
        return _MISSING
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return _MISSING


def is_missing(value: Any) -> bool:
    return value is _MISSING
