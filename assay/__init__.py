"""
Assay - Fluent assertions for HTTP responses

This package captures an HTTP response once and checks it with a chain of
readable assertions, reporting every outcome as it is evaluated.

Subpackages:
    - response: Response capability, headers and the captured snapshot
    - assertions: Predicates, part matchers and the assertion chain
    - reporting: Log settings, outcome reporter and run reports
    - transport: aiohttp-based HTTP client
    - suite: Declarative YAML suites

Usage:
    from assay import HTTPClient, LogSettings, LogMode, is_, is_success

    async with HTTPClient("http://localhost:8080") as client:
        chain = await client.get("/users/1").check()
        report = (
            chain.status(is_success())
            .json_path("$.name", is_("Isaac"))
            .finish()
        )
    report.raise_for_failures()
"""

__version__ = "0.1.0"

# Re-export errors for convenience
from .errors import (
    AssayError,
    AssertionFailures,
    ChainCompletedError,
    ConfigurationError,
    ConstructionError,
    InvalidHeaderError,
    InvalidJsonPathError,
    InvalidSchemaError,
    InvalidURLError,
    SnapshotError,
    UnsupportedAssertionError,
)

# Re-export response for convenience
from .response import (
    HeaderValue,
    Headers,
    ResponseCapability,
    Snapshot,
    build_snapshot,
)

# Re-export assertions for convenience
from .assertions import (
    # Engine
    Assert,
    ChainState,
    # Models
    Expression,
    Outcome,
    Part,
    Predicate,
    Range,
    # DSL
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

# Re-export reporting for convenience
from .reporting import (
    ChainReport,
    LogFormat,
    LogMode,
    LogReporter,
    LogSettings,
    RunReport,
)

# Re-export transport for convenience
from .transport import (
    AuthConfig,
    AuthType,
    HTTPClient,
)

# Re-export suites for convenience
from .suite import (
    Suite,
    load_suite,
    run_suite,
    validate_suite_yaml,
)

__all__ = [
    # Package info
    "__version__",
    # Errors
    "AssayError",
    "AssertionFailures",
    "ChainCompletedError",
    "ConfigurationError",
    "ConstructionError",
    "InvalidHeaderError",
    "InvalidJsonPathError",
    "InvalidSchemaError",
    "InvalidURLError",
    "SnapshotError",
    "UnsupportedAssertionError",
    # Response
    "HeaderValue",
    "Headers",
    "ResponseCapability",
    "Snapshot",
    "build_snapshot",
    # Assertions - Engine
    "Assert",
    "ChainState",
    # Assertions - Models
    "Expression",
    "Outcome",
    "Part",
    "Predicate",
    "Range",
    # Assertions - DSL
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
    # Reporting
    "ChainReport",
    "LogFormat",
    "LogMode",
    "LogReporter",
    "LogSettings",
    "RunReport",
    # Transport
    "AuthConfig",
    "AuthType",
    "HTTPClient",
    # Suites
    "Suite",
    "load_suite",
    "run_suite",
    "validate_suite_yaml",
]
