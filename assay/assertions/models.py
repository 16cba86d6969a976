"""
Assertion models.

This module defines the parts of a response that can be checked, the
predicates that can be applied to them, the expressions built by the DSL
and the outcome record produced by each evaluation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Part(str, Enum):
    """The aspect of a response an assertion checks."""
    STATUS = "status code"
    HEADERS = "headers"
    HEADER = "header"
    JSON_BODY = "json body"
    JSON_PATH = "json path"
    RESPONSE_TIME = "response time"

    @property
    def key(self) -> str:
        """Identifier used in suite files, e.g. ``json_body``."""
        return self.name.lower()

    @classmethod
    def from_key(cls, key: str) -> Part:
        return cls[key.upper()]


class Predicate(str, Enum):
    """Comparison operators, valued by their display label."""
    IS = "should be"
    IS_NOT = "should not be"
    CONTAINS = "should contain"
    DOES_NOT_CONTAIN = "should not contain"
    IS_BETWEEN = "should be between"
    IS_LESS_THAN = "should be less than"
    SCHEMA = "should match schema"
    EXISTS = "should exist"
    DOES_NOT_EXIST = "should not exist"

    @property
    def key(self) -> str:
        """Identifier used in suite files, e.g. ``is_between``."""
        return self.name.lower()

    @classmethod
    def from_key(cls, key: str) -> Predicate:
        return cls[key.upper()]


@dataclass(frozen=True)
class Range:
    """Closed interval [low, high]."""
    low: Any
    high: Any


@dataclass(frozen=True)
class Expression:
    """A predicate paired with the expected value it compares against."""
    predicate: Predicate
    value: Any = None


@dataclass(frozen=True)
class Outcome:
    """
    Result of applying one predicate to one part of a snapshot.

    Attributes:
        part: The part that was checked
        predicate: The predicate that was applied
        actual: Display form of the extracted value
        expected: Display form of the expected value
        passed: Whether the predicate held
        left: Raw extracted value (JSON-friendly)
        right: Raw expected value (JSON-friendly)
        subject: Header name or JSON path, when the part has one
        detail: Extra context, e.g. the first schema violation
    """
    part: Part
    predicate: Predicate
    actual: str
    expected: str
    passed: bool
    left: Any = None
    right: Any = None
    subject: str | None = None
    detail: str | None = None

    @property
    def failed(self) -> bool:
        return not self.passed

    @property
    def result(self) -> str:
        return "passed" if self.passed else "failed"

    def to_record(self) -> dict[str, Any]:
        """Structured form used by the JSON log format."""
        record: dict[str, Any] = {
            "part": self.part.value,
            "predicate": self.predicate.value,
            "left": self.left,
            "right": self.right,
            "result": self.result,
        }
        if self.subject is not None:
            record["subject"] = self.subject
        if self.detail is not None:
            record["detail"] = self.detail
        return record

    def __str__(self) -> str:
        part = self.part.value
        if self.subject is not None:
            part = f"{part} '{self.subject}'"
        lines = [
            f"part: {part}",
            f'{self.predicate.value}: "{self.expected}"',
            f'was: "{self.actual}"',
        ]
        if self.detail:
            lines.append(f"reason: {self.detail}")
        return "\n".join(lines)


# Display forms for values that could not be extracted
ABSENT = "absent"
NONE = "none"


def format_value(value: Any) -> str:
    """Format an extracted or expected value for display."""
    if value is None:
        return NONE
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, Range):
        return f"{format_value(value.low)} and {format_value(value.high)}"
    if isinstance(value, (list, dict, tuple, int, float)):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            return repr(value)
    return str(value)
