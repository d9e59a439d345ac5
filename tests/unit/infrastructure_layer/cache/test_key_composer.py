"""
Unit Tests for KeyComposer

Tests key composition order, hash tags and validation.
"""

import pytest

from sugar_cache.core.exceptions import ArgumentMismatchError, ConfigurationError
from sugar_cache.infrastructure.cache.keys import KeyComposer


@pytest.mark.unit
class TestCompose:
    def test_values_joined_in_name_order(self):
        composer = KeyComposer(["userId", "category"])

        assert composer.compose({"userId": "42", "category": "books"}) == "books:42"

    def test_mapping_order_does_not_matter(self):
        composer = KeyComposer(["b", "a", "c"])

        first = composer.compose({"a": 1, "b": 2, "c": 3})
        second = composer.compose({"c": 3, "a": 1, "b": 2})

        assert first == second == "1:2:3"

    def test_values_are_stringified(self):
        composer = KeyComposer(["id", "active"])

        assert composer.compose({"id": 7, "active": True}) == "True:7"

    def test_hashtag_values_wrapped(self):
        composer = KeyComposer(["hashtag", "regular"], hashtags=["hashtag"])

        assert composer.compose({"hashtag": "foo", "regular": "no-hashtag"}) == "{foo}:no-hashtag"

    def test_compose_many(self):
        composer = KeyComposer(["id"])

        assert composer.compose_many([{"id": 1}, {"id": 2}]) == ["1", "2"]

    def test_missing_name_rejected(self):
        composer = KeyComposer(["id", "tenant"])

        with pytest.raises(ArgumentMismatchError) as exc_info:
            composer.compose({"id": 1})

        assert exc_info.value.details["missing"] == ["tenant"]

    def test_unexpected_name_rejected(self):
        composer = KeyComposer(["id"])

        with pytest.raises(ArgumentMismatchError) as exc_info:
            composer.compose({"id": 1, "extra": 2})

        assert exc_info.value.details["unexpected"] == ["extra"]


@pytest.mark.unit
class TestValidation:
    def test_empty_keys_rejected(self):
        with pytest.raises(ConfigurationError):
            KeyComposer([])

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ConfigurationError):
            KeyComposer(["id", "id"])

    def test_hashtag_must_be_declared(self):
        with pytest.raises(ConfigurationError) as exc_info:
            KeyComposer(["id"], hashtags=["tenant"])

        assert exc_info.value.details["unknown"] == ["tenant"]

    def test_properties(self):
        composer = KeyComposer(["id", "tenant"], hashtags=["tenant"])

        assert composer.keys == ("id", "tenant")
        assert composer.hashtags == frozenset({"tenant"})
