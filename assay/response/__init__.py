"""
Captured HTTP Responses

This package turns a completed HTTP response into the immutable snapshot
that assertion chains read from.

Usage:
    from assay.response import Snapshot, build_snapshot

    snapshot = await build_snapshot(capability, elapsed)
    snapshot.status          # 201
    snapshot.headers.get("content-type")
    snapshot.response_time_ms
"""

# Capability
from .capability import ResponseCapability

# Headers
from .headers import (
    HeaderValue,
    Headers,
    validate_header_name,
    validate_header_value,
)

# Snapshot
from .snapshot import Snapshot, build_snapshot

__all__ = [
    # Capability
    "ResponseCapability",
    # Headers
    "HeaderValue",
    "Headers",
    "validate_header_name",
    "validate_header_value",
    # Snapshot
    "Snapshot",
    "build_snapshot",
]
