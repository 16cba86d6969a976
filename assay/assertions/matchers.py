"""
Part matchers and the dispatch table.

A part matcher knows how to pull a comparable value out of a snapshot.
The dispatch table decides, for each (part, predicate, value kind) triple,
how the expected value is prepared and which predicate function runs.
Triples missing from the table are rejected when the assertion is attached.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from ..errors import ConstructionError, UnsupportedAssertionError
from ..response.headers import Headers, validate_header_name, validate_header_value
from ..response.snapshot import Snapshot
from . import predicates
from .models import ABSENT, NONE, Expression, Outcome, Part, Predicate, Range, format_value
from .structured import JsonPath, JsonSchema, collapse_matches, load_json_document
from .values import ValueKind, classify

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Extraction
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Extracted:
    """The comparable value taken from a snapshot, or the reason it is missing."""
    value: Any
    present: bool
    display: str
    raw: Any = None
    possible: bool = True


class PartMatcher(ABC):
    """Extracts the value of one part of a snapshot."""

    part: Part
    subject: str | None = None

    @abstractmethod
    def extract(self, snapshot: Snapshot) -> Extracted:
        pass

    def legal_predicates(self) -> frozenset[Predicate]:
        return frozenset(predicate for part, predicate, _ in DISPATCH if part is self.part)


class StatusMatcher(PartMatcher):
    part = Part.STATUS

    def extract(self, snapshot: Snapshot) -> Extracted:
        return Extracted(snapshot.status, True, str(snapshot.status), snapshot.status)


class HeadersMatcher(PartMatcher):
    part = Part.HEADERS

    def extract(self, snapshot: Snapshot) -> Extracted:
        pairs = snapshot.headers.to_list()
        return Extracted(snapshot.headers, True, format_value(pairs), pairs)


class HeaderMatcher(PartMatcher):
    """Matches the value of a single header, looked up case-insensitively."""
    part = Part.HEADER

    def __init__(self, name: str):
        self.subject = validate_header_name(name)

    def extract(self, snapshot: Snapshot) -> Extracted:
        value = snapshot.headers.get(self.subject)
        if value is None:
            return Extracted(None, False, ABSENT)
        return Extracted(value, True, value, value)


class JsonBodyMatcher(PartMatcher):
    part = Part.JSON_BODY

    def extract(self, snapshot: Snapshot) -> Extracted:
        if not snapshot.has_body:
            return Extracted(None, False, NONE)
        body = snapshot._body
        return Extracted(body, True, format_value(body), body)


class JsonPathMatcher(PartMatcher):
    """Matches the value(s) selected by a JSON path in the body."""
    part = Part.JSON_PATH

    def __init__(self, path: str):
        self.path = JsonPath.compile(path)
        self.subject = path

    def extract(self, snapshot: Snapshot) -> Extracted:
        if not snapshot.has_body:
            return Extracted(None, False, NONE, possible=False)
        matches = self.path.find(snapshot._body)
        if not matches:
            return Extracted(None, False, ABSENT)
        value = collapse_matches(matches, self.path.singular)
        return Extracted(value, True, format_value(value), value)


class ResponseTimeMatcher(PartMatcher):
    part = Part.RESPONSE_TIME

    def extract(self, snapshot: Snapshot) -> Extracted:
        elapsed = snapshot.response_time_ms
        return Extracted(elapsed, True, str(elapsed), elapsed)


# ─────────────────────────────────────────────────────────────────────────────
# Expected value preparation
# ─────────────────────────────────────────────────────────────────────────────

def _as_is(value: Any) -> Any:
    return list(value) if isinstance(value, tuple) else value


def _status_code(value: Any) -> int:
    return int(value)


def _status_range(value: Range) -> Range:
    for bound in (value.low, value.high):
        if classify(bound) is not ValueKind.INTEGER:
            raise UnsupportedAssertionError(f"Status range bounds must be integers, got {bound!r}")
    if value.low > value.high:
        raise UnsupportedAssertionError(
            f"Invalid range: {value.low} is greater than {value.high}"
        )
    return Range(int(value.low), int(value.high))


def _header_set(value: Any) -> Headers:
    if not isinstance(value, (Headers, Mapping, list, tuple)):
        raise UnsupportedAssertionError(f"Cannot compare headers with {value!r}")
    return Headers.coerce(value)


def _json_document(value: Any) -> Any:
    return load_json_document(value, ConstructionError)


def _milliseconds(value: Any) -> int:
    # Whole milliseconds, truncated the same way as the measured time
    if isinstance(value, int):
        threshold = int(value)
    else:
        threshold = value // timedelta(milliseconds=1)
    if threshold < 0:
        raise UnsupportedAssertionError(f"Response time threshold cannot be negative: {value!r}")
    return threshold


def _presence(value: Any) -> None:
    if value is not None:
        raise UnsupportedAssertionError("exists/does_not_exist take no expected value")
    return None


def _render_plain(expected: Any) -> tuple[str, Any]:
    return format_value(expected), expected


def _render_range(expected: Range) -> tuple[str, Any]:
    return format_value(expected), [expected.low, expected.high]


def _render_headers(expected: Headers) -> tuple[str, Any]:
    pairs = expected.to_list()
    return format_value(pairs), pairs


def _render_schema(expected: JsonSchema) -> tuple[str, Any]:
    return format_value(expected.document), expected.document


@dataclass(frozen=True)
class Rule:
    """How one (part, predicate, kind) triple is prepared and evaluated."""
    coerce: Callable[[Any], Any]
    check: Callable[[Any, Any], bool]
    render: Callable[[Any], tuple[str, Any]] = _render_plain
    on_absent: bool = False


DISPATCH: dict[tuple[Part, Predicate, ValueKind], Rule] = {}


def _register(
    part: Part,
    predicate_list: tuple[Predicate, ...],
    kinds: tuple[ValueKind, ...],
    coerce: Callable[[Any], Any],
    render: Callable[[Any], tuple[str, Any]] = _render_plain,
) -> None:
    checks = {
        Predicate.IS: (predicates.is_equal, False),
        Predicate.IS_NOT: (predicates.is_not_equal, False),
        Predicate.CONTAINS: (predicates.contains, False),
        Predicate.DOES_NOT_CONTAIN: (predicates.does_not_contain, False),
        Predicate.IS_BETWEEN: (predicates.is_between, False),
        Predicate.IS_LESS_THAN: (predicates.is_less_than, False),
        Predicate.SCHEMA: (predicates.matches_schema, False),
        Predicate.EXISTS: (predicates.exists, False),
        Predicate.DOES_NOT_EXIST: (predicates.does_not_exist, True),
    }
    for predicate in predicate_list:
        check, on_absent = checks[predicate]
        for kind in kinds:
            DISPATCH[(part, predicate, kind)] = Rule(coerce, check, render, on_absent)


_EQUALITY = (Predicate.IS, Predicate.IS_NOT)
_CONTAINMENT = (Predicate.CONTAINS, Predicate.DOES_NOT_CONTAIN)

# Status
_register(Part.STATUS, _EQUALITY, (ValueKind.INTEGER,), _status_code)
_register(Part.STATUS, (Predicate.IS_BETWEEN,), (ValueKind.RANGE,), _status_range, _render_range)

# Header set
_register(
    Part.HEADERS,
    _EQUALITY + _CONTAINMENT,
    (ValueKind.HEADER_SET, ValueKind.JSON),
    _header_set,
    _render_headers,
)

# Single header
_register(Part.HEADER, _EQUALITY, (ValueKind.TEXT, ValueKind.HEADER_VALUE), validate_header_value)

# JSON body
_register(Part.JSON_BODY, _EQUALITY, (ValueKind.JSON, ValueKind.INTEGER), _as_is)
_register(Part.JSON_BODY, _EQUALITY, (ValueKind.TEXT, ValueKind.FILE), _json_document)
_register(
    Part.JSON_BODY,
    (Predicate.SCHEMA,),
    (ValueKind.JSON, ValueKind.TEXT, ValueKind.FILE),
    JsonSchema.compile,
    _render_schema,
)

# JSON path
_register(Part.JSON_PATH, _EQUALITY + _CONTAINMENT, (ValueKind.JSON, ValueKind.INTEGER), _as_is)
_register(Part.JSON_PATH, _EQUALITY, (ValueKind.TEXT, ValueKind.FILE), _json_document)
_register(Part.JSON_PATH, _CONTAINMENT, (ValueKind.TEXT,), _as_is)
_register(
    Part.JSON_PATH,
    (Predicate.SCHEMA,),
    (ValueKind.JSON, ValueKind.TEXT, ValueKind.FILE),
    JsonSchema.compile,
    _render_schema,
)
_register(Part.JSON_PATH, (Predicate.EXISTS,), (ValueKind.JSON,), _presence, lambda _: ("present", None))
_register(
    Part.JSON_PATH, (Predicate.DOES_NOT_EXIST,), (ValueKind.JSON,), _presence, lambda _: (ABSENT, None)
)

# Response time
_register(
    Part.RESPONSE_TIME,
    (Predicate.IS_LESS_THAN,),
    (ValueKind.INTEGER, ValueKind.DURATION),
    _milliseconds,
)


# ─────────────────────────────────────────────────────────────────────────────
# Binding and evaluation
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BoundAssertion:
    """An assertion whose expected value has been checked and prepared."""
    matcher: PartMatcher
    predicate: Predicate
    expected: Any
    rule: Rule

    def evaluate(self, snapshot: Snapshot) -> Outcome:
        """Apply the predicate to the snapshot. Never raises on mismatch."""
        extracted = self.matcher.extract(snapshot)
        if extracted.present:
            passed = self.rule.check(extracted.value, self.expected)
        elif extracted.possible:
            passed = self.rule.on_absent
        else:
            passed = False

        detail = None
        if not passed and extracted.present and isinstance(self.expected, JsonSchema):
            detail = self.expected.first_violation(extracted.value)

        expected_display, expected_raw = self.rule.render(self.expected)
        return Outcome(
            part=self.matcher.part,
            predicate=self.predicate,
            actual=extracted.display,
            expected=expected_display,
            passed=passed,
            left=extracted.raw,
            right=expected_raw,
            subject=self.matcher.subject,
            detail=detail,
        )


def bind(matcher: PartMatcher, expression: Expression) -> BoundAssertion:
    """
    Validate an expression against a part and prepare its expected value.

    Raises:
        UnsupportedAssertionError: If the triple is not in the dispatch table
        ConstructionError: If the expected value cannot be prepared
    """
    if not isinstance(expression, Expression):
        raise UnsupportedAssertionError(
            f"Expected an expression such as is_(...), got {expression!r}"
        )
    predicate = expression.predicate
    kind = classify(expression.value)
    rule = DISPATCH.get((matcher.part, predicate, kind))
    if rule is None:
        if predicate not in matcher.legal_predicates():
            message = f"Predicate '{predicate.key}' is not supported for the {matcher.part.value}"
        else:
            message = (
                f"Predicate '{predicate.key}' on the {matcher.part.value} "
                f"does not accept a {kind.value} value: {expression.value!r}"
            )
        logger.debug(f"Rejected assertion: {message}")
        raise UnsupportedAssertionError(message)
    return BoundAssertion(matcher, predicate, rule.coerce(expression.value), rule)
