"""
Structured value matching for JSON bodies.

Deep JSON equality, JSON path evaluation (via jsonpath-ng) and JSON schema
validation (via jsonschema).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any

from jsonpath_ng import parse as parse_jsonpath
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.jsonpath import Child, Fields, Index, Root, This
from jsonschema import validators
from jsonschema.exceptions import SchemaError, best_match

from ..errors import ConstructionError, InvalidJsonPathError, InvalidSchemaError

logger = logging.getLogger(__name__)


def json_equal(left: Any, right: Any) -> bool:
    """
    Deep structural equality for JSON-like values.

    Object key sets must match, arrays compare in order, and numbers compare
    by value, so ``1`` equals ``1.0``. Booleans never equal numbers.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(json_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (dict, list, tuple)) or isinstance(right, (dict, list, tuple)):
        return False
    return left == right


def json_contains(container: Any, item: Any) -> bool:
    """
    Container check on a JSON value.

    - strings: ``item`` is a substring
    - arrays: ``item`` is an element
    - objects: ``item`` is a key
    """
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    if isinstance(container, list):
        return any(json_equal(element, item) for element in container)
    if isinstance(container, dict):
        return isinstance(item, str) and item in container
    return False


def load_json_document(
    source: Any,
    error_cls: type[ConstructionError] = ConstructionError,
) -> Any:
    """
    Resolve a JSON document given as a value, a JSON string or a file path.

    Args:
        source: Structured value, JSON-encoded string, or path to a JSON file
        error_cls: Exception type raised on failure

    Raises:
        error_cls: If the file cannot be read or the text does not parse
    """
    if isinstance(source, PurePath):
        try:
            source = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise error_cls(f"Failed to read json file located at {source}: {e}") from e
    if isinstance(source, str):
        try:
            return json.loads(source)
        except json.JSONDecodeError as e:
            raise error_cls(f"Invalid JSON document: {e}") from e
    return source


# ─────────────────────────────────────────────────────────────────────────────
# JSON path
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class JsonPath:
    """A parsed JSON path expression."""
    expression: str
    _compiled: Any

    @classmethod
    def compile(cls, expression: str) -> JsonPath:
        """
        Parse a path such as ``$.users[*].id``.

        Raises:
            InvalidJsonPathError: If the expression does not parse
        """
        if not isinstance(expression, str) or not expression.strip():
            raise InvalidJsonPathError(f"Invalid JSON path: {expression!r}")
        try:
            compiled = parse_jsonpath(expression)
        except (JsonPathParserError, JsonPathLexerError) as e:
            raise InvalidJsonPathError(f"Invalid JSON path {expression!r}: {e}") from e
        except Exception as e:
            raise InvalidJsonPathError(
                f"Failed to parse JSON path {expression!r}: {type(e).__name__}: {e}"
            ) from e
        return cls(expression=expression, _compiled=compiled)

    def find(self, data: Any) -> list[Any]:
        """Return every value matched in ``data``, in document order."""
        return [match.value for match in self._compiled.find(data)]

    @property
    def singular(self) -> bool:
        """True when the path can select at most one value."""
        return _is_singular(self._compiled)


def _is_singular(node: Any) -> bool:
    if isinstance(node, (Root, This)):
        return True
    if isinstance(node, Fields):
        return len(node.fields) == 1 and node.fields[0] != "*"
    if isinstance(node, Index):
        return len(node.indices) == 1
    if isinstance(node, Child):
        return _is_singular(node.left) and _is_singular(node.right)
    # Slices, wildcards, descendants, unions and filters
    return False


def collapse_matches(matches: list[Any], singular: bool = True) -> Any:
    """
    A singular path compares as its one match. Wildcards, slices and
    descendant paths compare as the list of matches, however many there are.
    """
    if singular and len(matches) == 1:
        return matches[0]
    return list(matches)


# ─────────────────────────────────────────────────────────────────────────────
# JSON schema
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class JsonSchema:
    """A checked JSON schema ready to validate instances."""
    document: Any
    _validator: Any

    @classmethod
    def compile(cls, source: Any) -> JsonSchema:
        """
        Build a schema from a structured value, a JSON string or a file path.

        Raises:
            InvalidSchemaError: If the document is unreadable or not a valid schema
        """
        document = load_json_document(source, InvalidSchemaError)
        if not isinstance(document, (dict, bool)):
            raise InvalidSchemaError(
                f"A JSON schema must be an object or a boolean, got {type(document).__name__}"
            )
        validator_cls = validators.validator_for(document)
        try:
            validator_cls.check_schema(document)
        except SchemaError as e:
            raise InvalidSchemaError(f"Invalid JSON schema: {e.message}") from e
        return cls(document=document, _validator=validator_cls(document))

    def is_valid(self, instance: Any) -> bool:
        return self._validator.is_valid(instance)

    def first_violation(self, instance: Any) -> str | None:
        """Describe the most relevant violation, or None if the instance is valid."""
        error = best_match(self._validator.iter_errors(instance))
        if error is None:
            return None
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        return f"{location}: {error.message}"
