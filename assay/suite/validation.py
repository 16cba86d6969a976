"""
Schema validation for test suites.

This module checks raw parsed YAML against the suite schema and reports
every error with its location and a helpful suggestion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..assertions.matchers import DISPATCH
from ..assertions.models import Part, Predicate
from ..reporting.models import LogFormat, LogMode
from ..transport.models import AuthType
from .models import HttpMethod


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ValidationError:
    """Represents a single validation error with context."""
    path: str  # e.g., "requests[0].expect[1].predicate"
    message: str
    value: Any = None
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"❌ {self.path}: {self.message}"]
        if self.value is not None:
            parts.append(f"   Got: {repr(self.value)}")
        if self.suggestion:
            parts.append(f"   💡 {self.suggestion}")
        return "\n".join(parts)


@dataclass
class ValidationResult:
    """Result of schema validation."""
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(
        self,
        path: str,
        message: str,
        value: Any = None,
        suggestion: str | None = None
    ) -> None:
        self.errors.append(ValidationError(path, message, value, suggestion))

    def __str__(self) -> str:
        if self.is_valid:
            return "✅ Schema validation passed"
        lines = [f"Schema validation failed with {len(self.errors)} error(s):\n"]
        lines.extend(str(e) for e in self.errors)
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Schema Validator
# ─────────────────────────────────────────────────────────────────────────────

class SchemaValidator:
    """Validates raw parsed YAML against the suite schema."""

    REQUIRED_TOP_LEVEL = {"version", "name", "base_url", "requests"}
    OPTIONAL_TOP_LEVEL = {"env", "log", "defaults", "auth"}
    VALID_METHODS = {m.value for m in HttpMethod}
    VALID_PARTS = {p.key for p in Part}
    VALID_PREDICATES = {p.key for p in Predicate}
    VALID_LOG_MODES = {m.value for m in LogMode}
    VALID_LOG_FORMATS = {f.value for f in LogFormat}
    VALID_AUTH_TYPES = {t.value for t in AuthType}
    NO_VALUE_PREDICATES = {Predicate.EXISTS.key, Predicate.DOES_NOT_EXIST.key}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = ValidationResult()
        self.request_ids: set[str] = set()

    def validate(self) -> ValidationResult:
        """Run all validation checks and return result."""
        self._validate_top_level()
        if not self.result.is_valid:
            return self.result

        self._validate_version()
        self._validate_name()
        self._validate_base_url()
        self._validate_env()
        self._validate_log()
        self._validate_defaults()
        self._validate_auth()
        self._validate_requests()

        return self.result

    def _validate_top_level(self) -> None:
        """Check required and unknown top-level keys."""
        keys = set(self.data.keys())
        missing = self.REQUIRED_TOP_LEVEL - keys
        unknown = keys - self.REQUIRED_TOP_LEVEL - self.OPTIONAL_TOP_LEVEL

        for key in sorted(missing):
            self.result.add_error(
                key,
                f"Required field '{key}' is missing",
                suggestion=f"Add '{key}:' to your suite file"
            )

        for key in sorted(unknown):
            self.result.add_error(
                key,
                f"Unknown top-level field '{key}'",
                suggestion=f"Valid fields are: {', '.join(sorted(self.REQUIRED_TOP_LEVEL | self.OPTIONAL_TOP_LEVEL))}"
            )

    def _validate_version(self) -> None:
        version = self.data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            self.result.add_error(
                "version",
                "Must be an integer",
                value=version,
                suggestion="Use 'version: 1'"
            )
        elif version < 1:
            self.result.add_error(
                "version",
                "Must be >= 1",
                value=version
            )

    def _validate_name(self) -> None:
        name = self.data.get("name")
        if not isinstance(name, str):
            self.result.add_error(
                "name",
                "Must be a string",
                value=name
            )
        elif not name.strip():
            self.result.add_error(
                "name",
                "Cannot be empty",
                suggestion="Provide a descriptive name for your suite"
            )

    def _validate_base_url(self) -> None:
        url = self.data.get("base_url")
        if not isinstance(url, str):
            self.result.add_error(
                "base_url",
                "Must be a string",
                value=url
            )
        elif not (url.startswith("http://") or url.startswith("https://") or "{{" in url):
            self.result.add_error(
                "base_url",
                "Must be a valid HTTP(S) URL",
                value=url,
                suggestion="URL should start with 'http://' or 'https://'"
            )

    def _validate_env(self) -> None:
        env = self.data.get("env")
        if env is None:
            return
        if not isinstance(env, dict):
            self.result.add_error(
                "env",
                "Must be an object (key-value pairs)",
                value=env
            )

    def _validate_log(self) -> None:
        log = self.data.get("log")
        if log is None:
            return
        if not isinstance(log, dict):
            self.result.add_error(
                "log",
                "Must be an object",
                value=log
            )
            return

        mode = log.get("mode")
        if mode is not None and mode not in self.VALID_LOG_MODES:
            self.result.add_error(
                "log.mode",
                "Invalid log mode",
                value=mode,
                suggestion=f"Valid modes: {', '.join(sorted(self.VALID_LOG_MODES))}"
            )

        fmt = log.get("format")
        if fmt is not None and fmt not in self.VALID_LOG_FORMATS:
            self.result.add_error(
                "log.format",
                "Invalid log format",
                value=fmt,
                suggestion=f"Valid formats: {', '.join(sorted(self.VALID_LOG_FORMATS))}"
            )

    def _validate_defaults(self) -> None:
        defaults = self.data.get("defaults")
        if defaults is None:
            return
        if not isinstance(defaults, dict):
            self.result.add_error(
                "defaults",
                "Must be an object",
                value=defaults
            )
            return

        timeout = defaults.get("timeout_ms")
        if timeout is not None and (not isinstance(timeout, int) or timeout <= 0):
            self.result.add_error(
                "defaults.timeout_ms",
                "Must be a positive integer",
                value=timeout
            )

        headers = defaults.get("headers")
        if headers is not None:
            self._validate_headers("defaults.headers", headers)

    def _validate_auth(self) -> None:
        """Validate auth configuration."""
        auth = self.data.get("auth")
        if auth is None:
            return
        if not isinstance(auth, dict):
            self.result.add_error(
                "auth",
                "Must be an object",
                value=auth
            )
            return

        auth_type = auth.get("type")
        if auth_type not in self.VALID_AUTH_TYPES:
            self.result.add_error(
                "auth.type",
                "Invalid auth type",
                value=auth_type,
                suggestion=f"Valid types: {', '.join(sorted(self.VALID_AUTH_TYPES))}"
            )
            return

        required = {
            "bearer": ["token"],
            "api_key": ["key"],
            "basic": ["username", "password"],
        }[auth_type]
        for key in required:
            value = auth.get(key)
            if not value:
                self.result.add_error(
                    f"auth.{key}",
                    f"Required for {auth_type} auth",
                    suggestion=f"Add '{key}: \"...\"' or '{key}: \"{{{{env.{key.upper()}}}}}\"'"
                )
            elif not isinstance(value, str):
                self.result.add_error(
                    f"auth.{key}",
                    "Must be a string",
                    value=value
                )

    def _validate_headers(self, path: str, headers: Any) -> None:
        if not isinstance(headers, dict):
            self.result.add_error(
                path,
                "Must be an object of header names to values",
                value=headers
            )
            return
        for name, value in headers.items():
            if not isinstance(value, str):
                self.result.add_error(
                    f"{path}.{name}",
                    "Header values must be strings",
                    value=value,
                    suggestion="Quote numeric values, e.g. '\"15\"'"
                )

    def _validate_requests(self) -> None:
        requests = self.data.get("requests")
        if not isinstance(requests, list):
            self.result.add_error(
                "requests",
                "Must be a list",
                value=requests
            )
            return

        if len(requests) == 0:
            self.result.add_error(
                "requests",
                "Must contain at least one request"
            )
            return

        for i, request in enumerate(requests):
            self._validate_request(i, request)

    def _validate_request(self, index: int, request: Any) -> None:
        path = f"requests[{index}]"

        if not isinstance(request, dict):
            self.result.add_error(
                path,
                "Request must be an object",
                value=request
            )
            return

        request_id = request.get("id")
        if not isinstance(request_id, str) or not request_id.strip():
            self.result.add_error(
                f"{path}.id",
                "Request requires a non-empty string 'id'",
                value=request_id
            )
        elif request_id in self.request_ids:
            self.result.add_error(
                f"{path}.id",
                f"Duplicate request id '{request_id}'",
                suggestion="Each request id must be unique"
            )
        else:
            self.request_ids.add(request_id)

        method = request.get("method", "GET")
        if not isinstance(method, str) or method.upper() not in self.VALID_METHODS:
            self.result.add_error(
                f"{path}.method",
                "Invalid HTTP method",
                value=method,
                suggestion=f"Valid methods: {', '.join(sorted(self.VALID_METHODS))}"
            )

        request_path = request.get("path", "")
        if not isinstance(request_path, str):
            self.result.add_error(
                f"{path}.path",
                "Must be a string",
                value=request_path
            )

        if "headers" in request:
            self._validate_headers(f"{path}.headers", request["headers"])

        expect = request.get("expect", [])
        if not isinstance(expect, list):
            self.result.add_error(
                f"{path}.expect",
                "Must be a list of expectations",
                value=expect
            )
            return

        for i, check in enumerate(expect):
            self._validate_check(f"{path}.expect[{i}]", check)

    def _validate_check(self, path: str, check: Any) -> None:
        if not isinstance(check, dict):
            self.result.add_error(
                path,
                "Expectation must be an object",
                value=check
            )
            return

        part = check.get("part")
        if part not in self.VALID_PARTS:
            self.result.add_error(
                f"{path}.part",
                "Invalid part",
                value=part,
                suggestion=f"Valid parts: {', '.join(sorted(self.VALID_PARTS))}"
            )
            return

        predicate = check.get("predicate")
        if predicate not in self.VALID_PREDICATES:
            self.result.add_error(
                f"{path}.predicate",
                "Invalid predicate",
                value=predicate,
                suggestion=f"Valid predicates: {', '.join(sorted(self.VALID_PREDICATES))}"
            )
            return

        legal = self._legal_predicates(Part.from_key(part))
        if predicate not in legal:
            self.result.add_error(
                f"{path}.predicate",
                f"Predicate '{predicate}' is not supported for part '{part}'",
                suggestion=f"Valid predicates for '{part}': {', '.join(sorted(legal))}"
            )

        if part == Part.HEADER.key and not isinstance(check.get("name"), str):
            self.result.add_error(
                f"{path}.name",
                "The 'header' part requires a header 'name'",
                value=check.get("name")
            )

        if part == Part.JSON_PATH.key and not isinstance(check.get("path"), str):
            self.result.add_error(
                f"{path}.path",
                "The 'json_path' part requires a 'path' (JSONPath expression)",
                value=check.get("path")
            )

        if predicate in self.NO_VALUE_PREDICATES:
            return

        if "value" not in check:
            self.result.add_error(
                f"{path}.value",
                f"Predicate '{predicate}' requires a 'value' field"
            )
        elif predicate == Predicate.IS_BETWEEN.key:
            value = check["value"]
            if not isinstance(value, list) or len(value) != 2:
                self.result.add_error(
                    f"{path}.value",
                    "'is_between' requires a list of two bounds",
                    value=value,
                    suggestion="Use 'value: [200, 299]'"
                )

    @staticmethod
    def _legal_predicates(part: Part) -> set[str]:
        return {predicate.key for p, predicate, _ in DISPATCH if p is part}
