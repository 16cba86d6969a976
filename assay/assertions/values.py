"""
Value kinds for expected values.

Every expected value handed to a predicate is classified into one kind.
Dispatch is keyed on (part, predicate, kind), so the same predicate can
accept an integer for one part and a header set for another.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from pathlib import PurePath
from typing import Any

from ..errors import UnsupportedAssertionError
from ..response.headers import HeaderValue, Headers
from .models import Range


class ValueKind(str, Enum):
    """Closed set of expected-value variants."""
    INTEGER = "integer"
    TEXT = "text"
    JSON = "json"
    HEADER_SET = "header set"
    HEADER_VALUE = "header value"
    DURATION = "duration"
    RANGE = "range"
    FILE = "file"


def classify(value: Any) -> ValueKind:
    """
    Determine the kind of an expected value.

    Raises:
        UnsupportedAssertionError: If the value matches no kind
    """
    # bool is an int subclass but is a JSON literal here
    if isinstance(value, bool) or value is None:
        return ValueKind.JSON
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, HeaderValue):
        return ValueKind.HEADER_VALUE
    if isinstance(value, Headers):
        return ValueKind.HEADER_SET
    if isinstance(value, timedelta):
        return ValueKind.DURATION
    if isinstance(value, Range):
        return ValueKind.RANGE
    if isinstance(value, PurePath):
        return ValueKind.FILE
    if isinstance(value, (float, dict, list, tuple)):
        return ValueKind.JSON
    raise UnsupportedAssertionError(
        f"Unsupported expected value of type {type(value).__name__}: {value!r}"
    )
