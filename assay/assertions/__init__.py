"""
Assertion Engine for HTTP Responses

This package evaluates typed assertions against a captured response
snapshot.

Supported parts and predicates:
    - status: is_, is_not, is_between (plus is_success, is_client_error, is_server_error)
    - headers: is_, is_not, contains, does_not_contain
    - header(name): is_, is_not
    - json_body: is_, is_not, schema
    - json_path(path): is_, is_not, contains, does_not_contain, schema, exists, does_not_exist
    - response_time: is_less_than

Usage:
    from assay.assertions import Assert, is_, is_between, is_less_than

    chain = Assert(snapshot)
    report = (
        chain.status(is_between(200, 299))
        .json_path("$.id", is_(101))
        .response_time(is_less_than(200))
        .finish()
    )

    if not report.ok:
        print(report.summary())
"""

# Models
from .models import Expression, Outcome, Part, Predicate, Range

# Value kinds
from .values import ValueKind, classify

# Structured matching
from .structured import JsonPath, JsonSchema, json_equal

# Matchers
from .matchers import DISPATCH, BoundAssertion, PartMatcher, bind

# DSL
from .dsl import (
    contains,
    does_not_contain,
    does_not_exist,
    exists,
    is_,
    is_between,
    is_client_error,
    is_less_than,
    is_not,
    is_server_error,
    is_success,
    schema,
)

# Engine
from .engine import Assert, ChainState

__all__ = [
    # Models
    "Expression",
    "Outcome",
    "Part",
    "Predicate",
    "Range",
    # Value kinds
    "ValueKind",
    "classify",
    # Structured matching
    "JsonPath",
    "JsonSchema",
    "json_equal",
    # Matchers
    "DISPATCH",
    "BoundAssertion",
    "PartMatcher",
    "bind",
    # DSL
    "contains",
    "does_not_contain",
    "does_not_exist",
    "exists",
    "is_",
    "is_between",
    "is_client_error",
    "is_less_than",
    "is_not",
    "is_server_error",
    "is_success",
    "schema",
    # Engine
    "Assert",
    "ChainState",
]
