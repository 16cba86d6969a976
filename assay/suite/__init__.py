"""
Declarative Suites

This package loads YAML suites of requests and expectations, validates
them, and runs them against a live service.

Usage:
    from assay.suite import load_suite, run_suite

    suite, result = load_suite("suites/users.yaml")
    if not result.is_valid:
        print(result)
    else:
        report = asyncio.run(run_suite(suite))
        print(report.summary())
"""

# Models
from .models import (
    Defaults,
    ExpectCheck,
    HttpMethod,
    RequestStep,
    Suite,
)

# Validation
from .validation import (
    SchemaValidator,
    ValidationError,
    ValidationResult,
)

# Parser
from .parser import SuiteParser

# Loader (main entry point)
from .loader import (
    load_suite,
    validate_suite_yaml,
)

# Runner
from .runner import (
    attach_check,
    build_expression,
    interpolate_value,
    run_suite,
)

__all__ = [
    # Models
    "Defaults",
    "ExpectCheck",
    "HttpMethod",
    "RequestStep",
    "Suite",
    # Validation
    "SchemaValidator",
    "ValidationError",
    "ValidationResult",
    # Parser
    "SuiteParser",
    # Loader
    "load_suite",
    "validate_suite_yaml",
    # Runner
    "attach_check",
    "build_expression",
    "interpolate_value",
    "run_suite",
]
