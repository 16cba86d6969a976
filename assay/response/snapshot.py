"""
Captured response snapshots.

A snapshot is the immutable record every assertion in a chain reads from.
It is built once, from a response capability and the measured elapsed time.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from ..errors import SnapshotError
from .capability import ResponseCapability
from .headers import Headers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable captured state of one HTTP response.

    Attributes:
        status: Status code in [100, 599]
        headers: Response headers (case-insensitive names)
        elapsed: Time from request dispatch to response completion
        has_body: Whether a JSON body was captured. A ``null`` body counts
            as no body, so it reads as "none" in every body check.
    """
    status: int
    headers: Headers = field(default_factory=Headers)
    _body: Any = field(default=None, repr=False)
    elapsed: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if isinstance(self.status, bool) or not isinstance(self.status, int):
            raise SnapshotError(f"Status must be an integer, got {self.status!r}")
        if not 100 <= self.status <= 599:
            raise SnapshotError(f"Status {self.status} is outside [100, 599]")
        if self.elapsed < timedelta(0):
            raise SnapshotError(f"Elapsed time cannot be negative: {self.elapsed}")
        # Keep the integer value, not an HTTPStatus member
        object.__setattr__(self, "status", int(self.status))

    @classmethod
    def create(
        cls,
        status: int,
        headers: Headers | Any = None,
        body: Any = None,
        elapsed: timedelta | int = timedelta(0),
    ) -> Snapshot:
        """
        Build a snapshot from plain values.

        Args:
            status: Status code
            headers: Headers, a mapping or (name, value) pairs
            body: Decoded JSON body, or None
            elapsed: Duration, or whole milliseconds
        """
        if not isinstance(headers, Headers):
            headers = Headers(headers, validate=False)
        if isinstance(elapsed, int):
            elapsed = timedelta(milliseconds=elapsed)
        return cls(status=status, headers=headers, _body=copy.deepcopy(body), elapsed=elapsed)

    @property
    def body(self) -> Any:
        """A copy of the JSON body, or None if there is none."""
        return copy.deepcopy(self._body)

    @property
    def has_body(self) -> bool:
        return self._body is not None

    @property
    def response_time_ms(self) -> int:
        """Elapsed time in whole milliseconds."""
        return self.elapsed // timedelta(milliseconds=1)


async def build_snapshot(response: ResponseCapability, elapsed: timedelta) -> Snapshot:
    """
    Capture a response into a snapshot.

    The capability's body is read exactly once here; callers must not read
    it again. A body that cannot be decoded is recorded as absent.

    Args:
        response: The completed response
        elapsed: Time from dispatch to completion

    Returns:
        The snapshot

    Raises:
        SnapshotError: If the status or elapsed time is out of range
    """
    status = response.status
    headers = Headers(response.headers, validate=False)

    try:
        body = await response.json()
    except ValueError as e:
        logger.debug(f"Response body is not valid JSON, recording it as absent: {e}")
        body = None

    snapshot = Snapshot.create(status=status, headers=headers, body=body, elapsed=elapsed)
    logger.debug(
        f"Captured snapshot: status={snapshot.status}, headers={len(headers)}, "
        f"body={'yes' if snapshot.has_body else 'no'}, elapsed={snapshot.response_time_ms}ms"
    )
    return snapshot
