"""
Exception hierarchy for Assay.

Assertion failures are never raised by the engine: they are recorded as
failing outcomes. The exceptions below cover caller mistakes that are
detected while a request or an assertion chain is being put together.
"""

from __future__ import annotations


class AssayError(Exception):
    """Base class for every error raised by Assay."""


class ConfigurationError(AssayError, ValueError):
    """Invalid configuration value (environment, suite file, CLI flag)."""


class ConstructionError(AssayError, ValueError):
    """A request, snapshot or assertion could not be built from the given input."""


class InvalidURLError(ConstructionError):
    """The base endpoint is not an absolute http(s) URL."""


class InvalidHeaderError(ConstructionError):
    """A header name or value contains characters HTTP does not allow."""


class SnapshotError(ConstructionError):
    """The response data cannot form a valid snapshot."""


class UnsupportedAssertionError(ConstructionError):
    """The predicate is not legal for the part or for the expected value's type."""


class InvalidJsonPathError(ConstructionError):
    """The JSON path expression does not parse."""


class InvalidSchemaError(ConstructionError):
    """The JSON schema document is unreadable or not a valid schema."""


class ChainCompletedError(AssayError, RuntimeError):
    """An assertion was attached to a chain that has already been completed."""


class AssertionFailures(AssertionError):
    """
    Raised on request by a chain report holding failed outcomes.

    Attributes:
        outcomes: The failed outcomes, in evaluation order
    """

    def __init__(self, outcomes: list):
        self.outcomes = outcomes
        lines = [f"{len(outcomes)} assertion(s) failed:"]
        for outcome in outcomes:
            lines.append(
                f"  - {outcome.part.value} {outcome.predicate.value}: "
                f"{outcome.expected!r}, was: {outcome.actual!r}"
            )
        super().__init__("\n".join(lines))
