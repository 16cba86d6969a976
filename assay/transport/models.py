"""
Transport models.

Authentication settings applied to outgoing requests.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum


class AuthType(str, Enum):
    """Supported authentication schemes."""
    BEARER = "bearer"
    API_KEY = "api_key"
    BASIC = "basic"


@dataclass(frozen=True)
class AuthConfig:
    """
    Authentication configuration for outgoing requests.

    Supports three auth types:
    - bearer: Uses Authorization: Bearer <token> header
    - api_key: Uses a custom header with the API key
    - basic: Uses Authorization: Basic <base64(user:pass)> header
    """
    type: AuthType
    # For bearer auth
    token: str | None = None
    # For api_key auth
    header: str = "X-API-Key"
    key: str | None = None
    # For basic auth
    username: str | None = None
    password: str | None = None

    def to_headers(self) -> dict[str, str]:
        """Headers carrying these credentials; empty if they are incomplete."""
        if self.type is AuthType.BEARER and self.token:
            return {"Authorization": f"Bearer {self.token}"}
        if self.type is AuthType.API_KEY and self.key:
            return {self.header: self.key}
        if self.type is AuthType.BASIC and self.username:
            credentials = base64.b64encode(
                f"{self.username}:{self.password or ''}".encode()
            ).decode("ascii")
            return {"Authorization": f"Basic {credentials}"}
        return {}
