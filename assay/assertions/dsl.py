"""
Expression constructors.

These build the expressions passed to an assertion chain, e.g.
``chain.status(is_between(200, 299)).json_path("$.id", is_(1))``.
"""

from __future__ import annotations

from typing import Any

from .models import Expression, Predicate, Range


def is_(value: Any) -> Expression:
    """The actual value should equal ``value``."""
    return Expression(Predicate.IS, value)


def is_not(value: Any) -> Expression:
    """The actual value should not equal ``value``."""
    return Expression(Predicate.IS_NOT, value)


def contains(value: Any) -> Expression:
    """The actual value should contain ``value``."""
    return Expression(Predicate.CONTAINS, value)


def does_not_contain(value: Any) -> Expression:
    """The actual value should not contain ``value``."""
    return Expression(Predicate.DOES_NOT_CONTAIN, value)


def is_between(low: Any, high: Any) -> Expression:
    """The actual value should lie in the closed interval [low, high]."""
    return Expression(Predicate.IS_BETWEEN, Range(low, high))


def is_less_than(value: Any) -> Expression:
    """The actual value should be strictly less than ``value``."""
    return Expression(Predicate.IS_LESS_THAN, value)


def schema(document: Any) -> Expression:
    """The actual value should validate against the JSON schema ``document``."""
    return Expression(Predicate.SCHEMA, document)


def exists() -> Expression:
    """The JSON path should match at least one value."""
    return Expression(Predicate.EXISTS)


def does_not_exist() -> Expression:
    """The JSON path should match nothing."""
    return Expression(Predicate.DOES_NOT_EXIST)


def is_success() -> Expression:
    return is_between(200, 299)


def is_client_error() -> Expression:
    return is_between(400, 499)


def is_server_error() -> Expression:
    return is_between(500, 599)
