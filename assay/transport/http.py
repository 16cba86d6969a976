"""
HTTP transport built on aiohttp.

This module adapts aiohttp responses to the response capability and
provides a thin request builder that sends a request, times it and hands
the result to an assertion chain.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import IO, Any, Mapping

import aiohttp
from yarl import URL

from ..assertions import Assert
from ..errors import InvalidURLError
from ..reporting import LogSettings
from ..response import Headers, ResponseCapability
from .models import AuthConfig, AuthType

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Methods that never carry a request body
METHODS_NO_BODY = frozenset({"CONNECT", "HEAD", "GET", "OPTIONS", "TRACE"})


class AiohttpResponse(ResponseCapability):
    """Response capability over an ``aiohttp.ClientResponse``."""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    async def json(self) -> Any | None:
        """Decode the body if the response declares a JSON content type."""
        content_type = self._response.content_type.lower()
        if content_type != JSON_CONTENT_TYPE and not content_type.endswith("+json"):
            logger.debug(f"Skipping body decode for content type {content_type!r}")
            return None
        try:
            return await self._response.json(content_type=None)
        except ValueError as e:
            logger.debug(f"Failed to decode JSON body: {e}")
            return None


def parse_base_url(base_url: str) -> URL:
    """
    Validate an absolute http(s) base URL.

    Raises:
        InvalidURLError: If the URL is malformed or not http(s)
    """
    try:
        url = URL(base_url)
    except (TypeError, ValueError) as e:
        raise InvalidURLError(f"Invalid base URL {base_url!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidURLError(
            f"Invalid base URL {base_url!r}: expected an absolute http:// or https:// URL"
        )
    return url


def join_url(base: URL, path: str) -> URL:
    """Append ``path`` (which may carry a query string) to ``base``."""
    joined = f"{str(base).rstrip('/')}/{path.lstrip('/')}" if path else str(base)
    return parse_base_url(joined)


class Request:
    """
    One request being prepared by an ``HTTPClient``.

    Example:
        chain = await client.post("/users").payload({"name": "Isaac"}).check()
    """

    def __init__(self, client: HTTPClient, method: str, url: URL):
        self._client = client
        self.method = method.upper()
        self.url = url
        self._headers = client.default_headers
        self._payload: Any = None
        self._has_payload = False

    def headers(self, headers: Mapping[str, Any] | Headers | list[tuple[str, Any]]) -> Request:
        """Add request headers. Raises InvalidHeaderError for illegal names or values."""
        self._headers = self._headers.updated(Headers.coerce(headers))
        return self

    def payload(self, json_value: Any) -> Request:
        """Send ``json_value`` as the JSON body. Ignored for body-less methods."""
        if self.method in METHODS_NO_BODY:
            logger.warning(f"{self.method} does not support an HTTP body. No payload will be sent.")
            return self
        self._payload = json_value
        self._has_payload = True
        return self

    def bearer_auth(self, token: str) -> Request:
        return self.headers(AuthConfig(AuthType.BEARER, token=token).to_headers())

    def basic_auth(self, username: str, password: str | None = None) -> Request:
        return self.headers(
            AuthConfig(AuthType.BASIC, username=username, password=password).to_headers()
        )

    async def check(self) -> Assert:
        """
        Send the request and start an assertion chain on the response.

        Transport errors (connection failures, timeouts) propagate.
        """
        kwargs: dict[str, Any] = {"headers": dict(self._headers)}
        if self._has_payload:
            kwargs["json"] = self._payload

        session, owned = await self._client._acquire_session()
        try:
            started = time.perf_counter()
            async with session.request(self.method, self.url, **kwargs) as resp:
                await resp.read()
                elapsed = timedelta(seconds=time.perf_counter() - started)
                logger.info(f"{self.method} {self.url} -> {resp.status} in {elapsed.total_seconds() * 1000:.0f}ms")
                return await Assert.from_response(
                    AiohttpResponse(resp),
                    elapsed,
                    self._client.log_settings,
                    stream=self._client.stream,
                )
        finally:
            if owned:
                await session.close()

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, url={str(self.url)!r})"


class HTTPClient:
    """
    Sends requests against a base URL and returns assertion chains.

    Can be used directly (one session per request) or as an async context
    manager to share a session.

    Example:
        async with HTTPClient("http://localhost:8080") as client:
            chain = await client.get("/users/1").check()
            chain.status(is_(200)).json_path("$.id", is_(1)).finish()
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, Any] | None = None,
        auth: AuthConfig | None = None,
        log_settings: LogSettings | None = None,
        timeout_ms: int = 30000,
        stream: IO[str] | None = None,
    ):
        """
        Args:
            base_url: Absolute http(s) URL every request path is joined to
            headers: Headers sent with every request
            auth: Credentials sent with every request
            log_settings: Settings for the chains this client returns
            timeout_ms: Total timeout per request, in milliseconds
            stream: Output stream for chain reports

        Raises:
            InvalidURLError: If ``base_url`` is not an absolute http(s) URL
            InvalidHeaderError: If a default header is illegal
        """
        self.base_url = parse_base_url(base_url)
        default_headers = Headers(headers or {})
        if auth is not None:
            default_headers = default_headers.updated(Headers(auth.to_headers()))
        self.default_headers = default_headers
        self.log_settings = log_settings or LogSettings()
        self.timeout_ms = timeout_ms
        self.stream = stream
        self._session: aiohttp.ClientSession | None = None

    def _new_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_ms / 1000))

    async def _acquire_session(self) -> tuple[aiohttp.ClientSession, bool]:
        """Return the shared session, or a fresh one the caller must close."""
        if self._session is not None:
            return self._session, False
        return self._new_session(), True

    async def connect(self) -> None:
        """Create the shared HTTP session."""
        if self._session is None:
            self._session = self._new_session()

    async def disconnect(self) -> None:
        """Close the shared HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def request(self, method: str, path: str = "") -> Request:
        return Request(self, method, join_url(self.base_url, path))

    def get(self, path: str = "") -> Request:
        return self.request("GET", path)

    def post(self, path: str = "") -> Request:
        return self.request("POST", path)

    def put(self, path: str = "") -> Request:
        return self.request("PUT", path)

    def patch(self, path: str = "") -> Request:
        return self.request("PATCH", path)

    def delete(self, path: str = "") -> Request:
        return self.request("DELETE", path)

    def head(self, path: str = "") -> Request:
        return self.request("HEAD", path)

    def options(self, path: str = "") -> Request:
        return self.request("OPTIONS", path)

    async def __aenter__(self) -> HTTPClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    def __repr__(self) -> str:
        return f"HTTPClient(base_url={str(self.base_url)!r})"
