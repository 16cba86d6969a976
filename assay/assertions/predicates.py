"""
Predicate library.

Each predicate is a pure function ``(actual, expected) -> bool``. Part
matchers decide which of them are legal for a part and prepare the
expected value before it gets here.
"""

from __future__ import annotations

from typing import Any

from ..response.headers import Headers
from .models import Range
from .structured import JsonSchema, json_contains, json_equal


def is_equal(actual: Any, expected: Any) -> bool:
    if isinstance(actual, Headers) or isinstance(expected, Headers):
        return actual == expected
    return json_equal(actual, expected)


def is_not_equal(actual: Any, expected: Any) -> bool:
    return not is_equal(actual, expected)


def contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, Headers):
        return actual.contains_all(expected)
    return json_contains(actual, expected)


def does_not_contain(actual: Any, expected: Any) -> bool:
    if isinstance(actual, Headers):
        return actual.contains_none(expected)
    return not json_contains(actual, expected)


def is_between(actual: Any, expected: Range) -> bool:
    """Inclusive at both ends."""
    return expected.low <= actual <= expected.high


def is_less_than(actual: Any, expected: Any) -> bool:
    """Strict inequality."""
    return actual < expected


def matches_schema(actual: Any, expected: JsonSchema) -> bool:
    return expected.is_valid(actual)


def exists(actual: Any, expected: Any) -> bool:
    # Only reached when something was extracted
    return True


def does_not_exist(actual: Any, expected: Any) -> bool:
    return False
