"""Shared fixtures: a fake response capability and canned snapshots."""

from __future__ import annotations

import io
from datetime import timedelta
from typing import Any

import pytest

from assay.response import ResponseCapability, Snapshot


class FakeResponse(ResponseCapability):
    """In-memory response capability that counts body reads."""

    def __init__(self, status: int, headers: Any = None, body: Any = None, raises: Exception | None = None):
        self._status = status
        self._headers = headers or []
        self._body = body
        self._raises = raises
        self.json_calls = 0

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self):
        return self._headers

    async def json(self) -> Any | None:
        self.json_calls += 1
        if self._raises is not None:
            raise self._raises
        return self._body


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def created_snapshot() -> Snapshot:
    """201 Created with a small JSON body, answered in 120ms."""
    return Snapshot.create(
        status=201,
        headers=[("content-type", "application/json")],
        body={"id": 101},
        elapsed=timedelta(milliseconds=120),
    )


@pytest.fixture
def users_snapshot() -> Snapshot:
    return Snapshot.create(
        status=200,
        headers=[
            ("Content-Type", "application/json"),
            ("X-Request-Id", "abc-123"),
        ],
        body={
            "users": [
                {"id": 1, "name": "Isaac", "tags": ["admin", "ops"]},
                {"id": 2, "name": "Ada", "tags": []},
            ],
            "total": 2,
            "next": None,
        },
        elapsed=45,
    )


@pytest.fixture
def empty_snapshot() -> Snapshot:
    """204 No Content: no body at all."""
    return Snapshot.create(status=204, headers=[("server", "test")], elapsed=5)


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()
