"""
Suite parser.

This module converts validated YAML data into typed Suite structures.
"""

from __future__ import annotations

from typing import Any

from ..assertions.models import Part, Predicate
from ..reporting.models import LogSettings
from ..transport.models import AuthConfig, AuthType
from .models import Defaults, ExpectCheck, HttpMethod, RequestStep, Suite


class SuiteParser:
    """Parses and converts validated YAML to a typed Suite."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def parse(self) -> Suite:
        """Convert validated data to a typed Suite."""
        return Suite(
            version=self.data["version"],
            name=self.data["name"],
            base_url=self.data["base_url"],
            env=self.data.get("env") or {},
            log=self._parse_log(),
            defaults=self._parse_defaults(),
            auth=self._parse_auth(self.data.get("auth")),
            requests=self._parse_requests(),
        )

    def _parse_log(self) -> LogSettings:
        log = self.data.get("log") or {}
        return LogSettings.from_values(log.get("mode"), log.get("format"))

    def _parse_auth(self, auth_data: dict | None) -> AuthConfig | None:
        """Parse auth configuration if present."""
        if auth_data is None:
            return None

        return AuthConfig(
            type=AuthType(auth_data["type"]),
            token=auth_data.get("token"),
            header=auth_data.get("header", "X-API-Key"),
            key=auth_data.get("key"),
            username=auth_data.get("username"),
            password=auth_data.get("password"),
        )

    def _parse_defaults(self) -> Defaults:
        defaults = self.data.get("defaults") or {}
        return Defaults(
            timeout_ms=defaults.get("timeout_ms", 30000),
            headers=dict(defaults.get("headers") or {}),
        )

    def _parse_requests(self) -> list[RequestStep]:
        return [self._parse_request(request) for request in self.data["requests"]]

    def _parse_request(self, request: dict) -> RequestStep:
        return RequestStep(
            id=request["id"],
            method=HttpMethod(request.get("method", "GET").upper()),
            path=request.get("path", ""),
            headers=dict(request.get("headers") or {}),
            payload=request.get("payload"),
            has_payload="payload" in request,
            expect=[self._parse_check(check) for check in request.get("expect") or []],
        )

    def _parse_check(self, check: dict) -> ExpectCheck:
        return ExpectCheck(
            part=Part.from_key(check["part"]),
            predicate=Predicate.from_key(check["predicate"]),
            value=check.get("value"),
            name=check.get("name"),
            path=check.get("path"),
        )
