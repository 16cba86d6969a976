"""
Typed data structures for declarative test suites.

This module contains the enums and dataclasses that represent a parsed
suite file: where to send requests and what to expect of each response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..assertions.models import Part, Predicate
from ..reporting.models import LogSettings
from ..transport.models import AuthConfig


class HttpMethod(str, Enum):
    """HTTP methods a suite request may use."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# ─────────────────────────────────────────────────────────────────────────────
# Expectations
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ExpectCheck:
    """One expectation on a response."""
    part: Part
    predicate: Predicate
    value: Any = None
    name: str | None = None  # header name, for the 'header' part
    path: str | None = None  # JSON path, for the 'json_path' part

    def describe(self) -> str:
        subject = self.name or self.path
        target = f"{self.part.key}({subject})" if subject else self.part.key
        return f"{target} {self.predicate.key}"


# ─────────────────────────────────────────────────────────────────────────────
# Requests & Defaults
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class RequestStep:
    """A request to send and the expectations on its response."""
    id: str
    method: HttpMethod = HttpMethod.GET
    path: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    payload: Any = None
    has_payload: bool = False
    expect: list[ExpectCheck] = field(default_factory=list)


@dataclass
class Defaults:
    """Settings applied to every request."""
    timeout_ms: int = 30000
    headers: dict[str, str] = field(default_factory=dict)


# ─────────────────────────────────────────────────────────────────────────────
# Suite
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Suite:
    """Fully parsed and validated suite."""
    version: int
    name: str
    base_url: str
    env: dict[str, Any] = field(default_factory=dict)
    log: LogSettings = field(default_factory=LogSettings)
    defaults: Defaults = field(default_factory=Defaults)
    auth: AuthConfig | None = None
    requests: list[RequestStep] = field(default_factory=list)
