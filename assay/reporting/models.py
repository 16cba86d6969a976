"""
Reporting models.

Log settings control how outcomes reach the output stream and whether a
chain keeps evaluating after a failure. A chain report aggregates the
outcomes of one finished chain.
"""

from __future__ import annotations

import hashlib
import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..errors import AssertionFailures, ConfigurationError

if TYPE_CHECKING:
    from ..assertions.models import Outcome


class LogMode(str, Enum):
    """Whether a chain halts on the first failure."""
    FAIL_FAST = "fail_fast"  # report failures only, halt on the first one
    ALL_OUTCOMES = "all_outcomes"  # report everything, never halt


class LogFormat(str, Enum):
    """How outcomes are rendered."""
    TEXT = "text"
    JSON = "json"


@dataclass(frozen=True)
class LogSettings:
    """
    Chain-scoped reporting configuration.

    Mode and format are independent; all four combinations are valid.
    """
    mode: LogMode = LogMode.FAIL_FAST
    format: LogFormat = LogFormat.TEXT

    @property
    def fail_fast(self) -> bool:
        return self.mode is LogMode.FAIL_FAST

    def reports(self, outcome: Outcome) -> bool:
        """Whether ``outcome`` should be written to the output stream."""
        return outcome.failed or not self.fail_fast

    @classmethod
    def from_values(cls, mode: str | None = None, format: str | None = None) -> LogSettings:
        """
        Build settings from raw strings, e.g. from a suite file or CLI flag.

        Raises:
            ConfigurationError: If a value is not recognised
        """
        return cls(
            mode=_parse_enum(LogMode, mode, LogMode.FAIL_FAST, "log mode"),
            format=_parse_enum(LogFormat, format, LogFormat.TEXT, "log format"),
        )

    @classmethod
    def from_env(cls) -> LogSettings:
        """Read ``ASSAY_LOG_MODE`` and ``ASSAY_LOG_FORMAT``."""
        return cls.from_values(
            mode=os.environ.get("ASSAY_LOG_MODE"),
            format=os.environ.get("ASSAY_LOG_FORMAT"),
        )


def _parse_enum(enum_cls: type[Enum], value: str | None, default: Any, label: str) -> Any:
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid {label} {value!r}. Valid values: {valid}"
        ) from None


@dataclass
class ChainReport:
    """
    Summary of one completed assertion chain.

    Attributes:
        outcomes: Every evaluated outcome, in attachment order
        halted: Whether evaluation stopped at a failure
        skipped: Number of assertions attached after the chain halted
    """
    outcomes: list[Outcome] = field(default_factory=list)
    halted: bool = False
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def failures(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.failed]

    def raise_for_failures(self) -> None:
        """
        Raise if any outcome failed.

        Raises:
            AssertionFailures: Listing every failed outcome
        """
        if not self.ok:
            raise AssertionFailures(self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "total": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "skipped": self.skipped,
                "halted": self.halted,
            },
            "outcomes": [o.to_record() for o in self.outcomes],
        }

    def summary(self) -> str:
        status = "halted" if self.halted else "completed"
        return (
            f"{self.passed} passed, {self.failed} failed, "
            f"{self.skipped} skipped ({status})"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Suite Runs
# ─────────────────────────────────────────────────────────────────────────────

class RequestStatus(str, Enum):
    """Status of one request in a suite run."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    """Overall status of a suite run."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class RequestRecord:
    """
    Record of one request and the chain run on its response.

    Captures what was sent, how the response fared and any error that
    stopped the request from being checked.
    """
    request_id: str
    method: str
    url: str = ""
    status: RequestStatus = RequestStatus.PENDING

    # Timing
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_ms: float | None = None

    # Response
    status_code: int | None = None
    response_time_ms: int | None = None
    chain: ChainReport | None = None

    # Errors
    error_message: str | None = None

    def start(self) -> None:
        """Mark the request as started."""
        self.status = RequestStatus.RUNNING
        self.started_at = datetime.now(timezone.utc)

    def complete(self, status: RequestStatus) -> None:
        """Mark the request as completed with given status."""
        self.status = status
        self.ended_at = datetime.now(timezone.utc)
        if self.started_at:
            delta = self.ended_at - self.started_at
            self.duration_ms = delta.total_seconds() * 1000

    @property
    def failure_message(self) -> str | None:
        if self.chain is None or self.chain.ok:
            return None
        first = self.chain.failures[0]
        return f"{first.part.value} {first.predicate.value} {first.expected}, was {first.actual}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "request_id": self.request_id,
            "method": self.method,
            "url": self.url,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_ms": self.duration_ms,
            "status_code": self.status_code,
            "response_time_ms": self.response_time_ms,
            "chain": self.chain.to_dict() if self.chain else None,
            "error_message": self.error_message,
        }


@dataclass
class RunReport:
    """
    Complete record of a suite run.

    Contains metadata about the run, the suite being run and a record for
    each request.
    """
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Timing
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: datetime | None = None
    duration_ms: float | None = None

    # Suite info
    suite_name: str = ""
    suite_version: int = 1
    suite_hash: str = ""
    base_url: str = ""

    status: RunStatus = RunStatus.PENDING
    requests: list[RequestRecord] = field(default_factory=list)

    # Summary stats
    total_requests: int = 0
    passed_requests: int = 0
    failed_requests: int = 0
    error_requests: int = 0
    skipped_requests: int = 0

    def start(self) -> None:
        """Mark the run as started."""
        self.status = RunStatus.RUNNING
        self.started_at = datetime.now(timezone.utc)

    def complete(self) -> None:
        """Mark the run as completed and calculate final status."""
        self.ended_at = datetime.now(timezone.utc)
        delta = self.ended_at - self.started_at
        self.duration_ms = delta.total_seconds() * 1000

        self.total_requests = len(self.requests)
        self.passed_requests = self._count(RequestStatus.PASSED)
        self.failed_requests = self._count(RequestStatus.FAILED)
        self.error_requests = self._count(RequestStatus.ERROR)
        self.skipped_requests = self._count(RequestStatus.SKIPPED)

        if self.error_requests > 0:
            self.status = RunStatus.ERROR
        elif self.failed_requests > 0:
            self.status = RunStatus.FAILED
        else:
            self.status = RunStatus.PASSED

    def _count(self, status: RequestStatus) -> int:
        return sum(1 for r in self.requests if r.status == status)

    @property
    def passed(self) -> bool:
        return self.status == RunStatus.PASSED

    def add_request(self, record: RequestRecord) -> None:
        self.requests.append(record)

    def get_request(self, request_id: str) -> RequestRecord | None:
        """Get a request record by ID."""
        for record in self.requests:
            if record.request_id == request_id:
                return record
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_ms": self.duration_ms,
            "suite_name": self.suite_name,
            "suite_version": self.suite_version,
            "suite_hash": self.suite_hash,
            "base_url": self.base_url,
            "status": self.status.value,
            "summary": {
                "total": self.total_requests,
                "passed": self.passed_requests,
                "failed": self.failed_requests,
                "errors": self.error_requests,
                "skipped": self.skipped_requests,
            },
            "requests": [record.to_dict() for record in self.requests],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def save_json(self, path: str | Path) -> Path:
        """Write the report as JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json())
        return path

    def summary(self) -> str:
        """Generate a human-readable summary."""
        lines = [
            "═══════════════════════════════════════════════════════════",
            f"  Run Report: {self.suite_name}",
            "═══════════════════════════════════════════════════════════",
            f"  Run ID:     {self.run_id}",
            f"  Status:     {_status_icon(self.status)} {self.status.value.upper()}",
            f"  Duration:   {self.duration_ms:.0f}ms" if self.duration_ms else "  Duration:   N/A",
            f"  Base URL:   {self.base_url}",
            "───────────────────────────────────────────────────────────",
            f"  Requests: {self.passed_requests} passed, {self.failed_requests} failed, "
            f"{self.error_requests} errors, {self.skipped_requests} skipped",
            "───────────────────────────────────────────────────────────",
        ]

        for record in self.requests:
            icon = _request_icon(record.status)
            code = record.status_code if record.status_code is not None else "-"
            lines.append(f"  {icon} [{record.request_id}] {record.method} {record.url} -> {code}")
            if record.chain is not None:
                lines.append(f"      └─ {record.chain.summary()}")
            if record.failure_message:
                lines.append(f"      └─ {record.failure_message}")
            elif record.error_message:
                lines.append(f"      └─ Error: {record.error_message}")

        lines.append("═══════════════════════════════════════════════════════════")
        return "\n".join(lines)


def compute_suite_hash(suite_dict: dict[str, Any]) -> str:
    """SHA-256 of the normalised suite data, first 12 characters."""
    serialized = json.dumps(suite_dict, sort_keys=True, default=str)
    return hashlib.sha256(serialized.encode()).hexdigest()[:12]


def _status_icon(status: RunStatus) -> str:
    return {
        RunStatus.PENDING: "⏳",
        RunStatus.RUNNING: "🔄",
        RunStatus.PASSED: "✅",
        RunStatus.FAILED: "❌",
        RunStatus.ERROR: "⚠️",
    }.get(status, "❓")


def _request_icon(status: RequestStatus) -> str:
    return {
        RequestStatus.PENDING: "⏳",
        RequestStatus.RUNNING: "🔄",
        RequestStatus.PASSED: "✅",
        RequestStatus.FAILED: "❌",
        RequestStatus.ERROR: "⚠️",
        RequestStatus.SKIPPED: "⏭️",
    }.get(status, "❓")
