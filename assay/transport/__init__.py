"""
HTTP Transport

This package sends HTTP requests with aiohttp and adapts the responses to
the response capability the assertion engine reads.

Usage:
    from assay.transport import HTTPClient
    from assay.assertions import is_, is_success

    async with HTTPClient("http://localhost:8080") as client:
        chain = await client.get("/users/1").bearer_auth("token-123").check()
        chain.status(is_success()).json_path("$.id", is_(1)).finish()
"""

# Client
from .http import (
    AiohttpResponse,
    HTTPClient,
    Request,
    join_url,
    parse_base_url,
)

# Models
from .models import AuthConfig, AuthType

__all__ = [
    # Client
    "AiohttpResponse",
    "HTTPClient",
    "Request",
    "join_url",
    "parse_base_url",
    # Models
    "AuthConfig",
    "AuthType",
]
