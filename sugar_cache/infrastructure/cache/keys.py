"""
Cache Key Composition

Turns a mapping of logical key names to values into one composed key.

Algorithm:
    1. Check the mapping names against the declared key set
    2. Wrap values of hashtag-flagged names in braces (cluster hash tag)
    3. Sort entries by logical name
    4. Join the values (not the names) with ":"

The result depends only on the mapping's contents, never on the order its
entries were supplied in. Tier prefixes (namespace, ``cache``/``memory``
segment) are added by the tiers themselves.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sugar_cache.core.config.constants import HASHTAG_TEMPLATE, KEY_SEPARATOR
from sugar_cache.core.exceptions import ArgumentMismatchError, ConfigurationError

LogicalKeys = Mapping[str, Any]


class KeyComposer:
    """
    Composes cache keys for one declared logical key set.

    Example:
        composer = KeyComposer(["id", "category"], hashtags={"category"})
        composer.compose({"id": "42", "category": "books"})  # "{books}:42"
    """

    def __init__(self, keys: Iterable[str], hashtags: Iterable[str] = ()):
        self._keys = tuple(keys)
        key_set = frozenset(self._keys)

        if not self._keys:
            raise ConfigurationError("At least one logical key must be declared")
        if len(key_set) != len(self._keys):
            raise ConfigurationError(
                "Logical key names must be unique", details={"keys": list(self._keys)}
            )

        self._hashtags = frozenset(hashtags)
        unknown = self._hashtags - key_set
        if unknown:
            raise ConfigurationError(
                "Hashtags reference undeclared logical keys",
                details={"unknown": sorted(unknown), "keys": list(self._keys)},
            )

        self._key_set = key_set
        self._ordered = sorted(self._keys)

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    @property
    def hashtags(self) -> frozenset[str]:
        return self._hashtags

    def compose(self, mapping: LogicalKeys) -> str:
        """
        Compose a single key.

        Raises:
            ArgumentMismatchError: If the mapping's names differ from the declared keys
        """
        names = set(mapping)
        if names != self._key_set:
            raise ArgumentMismatchError(
                "Logical keys do not match the declared key set",
                details={
                    "missing": sorted(self._key_set - names),
                    "unexpected": sorted(names - self._key_set),
                },
            )

        parts = []
        for name in self._ordered:
            value = str(mapping[name])
            if name in self._hashtags:
                value = HASHTAG_TEMPLATE.format(value=value)
            parts.append(value)
        return KEY_SEPARATOR.join(parts)

    def compose_many(self, mappings: Iterable[LogicalKeys]) -> list[str]:
        return [self.compose(m) for m in mappings]
