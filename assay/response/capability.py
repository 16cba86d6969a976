"""
Response capability interface.

This module defines the abstract base class that any HTTP client adapter
must implement so its responses can be asserted on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping


class ResponseCapability(ABC):
    """
    Abstract view of one completed HTTP exchange.

    Adapters wrap a concrete client response (aiohttp, a test double, ...)
    and expose exactly three accessors. The body accessor is one-shot: the
    snapshot builder calls it once and the adapter is not read again.
    """

    @property
    @abstractmethod
    def status(self) -> int:
        """The response status code."""
        pass

    @property
    @abstractmethod
    def headers(self) -> Mapping[str, str] | Iterable[tuple[str, str]]:
        """
        The response headers, in the order they were received.

        Either a mapping or an iterable of (name, value) pairs.
        """
        pass

    @abstractmethod
    async def json(self) -> Any | None:
        """
        Read and decode the body as JSON.

        Returns:
            The decoded value, or None when the body is absent, not
            declared as JSON, or does not parse. A literal JSON ``null``
            body also decodes to None and is treated as absent.
        """
        pass
