"""
Assertion chain.

An ``Assert`` wraps one snapshot and evaluates the assertions attached to
it, in attachment order, reporting each outcome as it goes. Under fail-fast
settings the first failure halts the chain and later assertions are only
validated, never evaluated.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from enum import Enum
from typing import IO, Any, Callable

from ..errors import ChainCompletedError
from ..reporting import ChainReport, LogReporter, LogSettings
from ..response.capability import ResponseCapability
from ..response.snapshot import Snapshot, build_snapshot
from .matchers import (
    HeaderMatcher,
    HeadersMatcher,
    JsonBodyMatcher,
    JsonPathMatcher,
    PartMatcher,
    ResponseTimeMatcher,
    StatusMatcher,
    bind,
)
from .models import Expression, Outcome

logger = logging.getLogger(__name__)


class ChainState(str, Enum):
    """Lifecycle of an assertion chain."""
    RUNNING = "running"
    HALTED = "halted"
    COMPLETED = "completed"


class Assert:
    """
    Fluent assertion chain over one captured response.

    Example:
        chain = Assert(snapshot, LogSettings(mode=LogMode.ALL_OUTCOMES))
        report = (
            chain.status(is_(201))
            .header("content-type", is_("application/json"))
            .json_path("$.id", is_(101))
            .response_time(is_less_than(200))
            .finish()
        )
        report.raise_for_failures()
    """

    def __init__(
        self,
        snapshot: Snapshot,
        log_settings: LogSettings | None = None,
        stream: IO[str] | None = None,
        reporter: LogReporter | None = None,
    ):
        """
        Args:
            snapshot: The response every assertion reads from
            log_settings: Halt and format behaviour, defaults to fail-fast text
            stream: Output stream for the default reporter
            reporter: A reporter to use instead of building one
        """
        if log_settings is None:
            log_settings = reporter.settings if reporter else LogSettings()
        self.snapshot = snapshot
        self.log_settings = log_settings
        self.reporter = reporter or LogReporter(log_settings, stream=stream)
        self._state = ChainState.RUNNING
        self._outcomes: list[Outcome] = []
        self._skipped = 0

    @classmethod
    async def from_response(
        cls,
        response: ResponseCapability,
        elapsed: timedelta,
        log_settings: LogSettings | None = None,
        stream: IO[str] | None = None,
    ) -> Assert:
        """Capture ``response`` and start a chain on it."""
        snapshot = await build_snapshot(response, elapsed)
        return cls(snapshot, log_settings, stream=stream)

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ChainState:
        return self._state

    @property
    def halted(self) -> bool:
        return self._state is ChainState.HALTED

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        """Evaluated outcomes, in attachment order."""
        return tuple(self._outcomes)

    # ─────────────────────────────────────────────────────────────────────
    # Parts
    # ─────────────────────────────────────────────────────────────────────

    def status(self, expression: Expression) -> Assert:
        """Assert on the status code."""
        return self._attach(StatusMatcher, expression)

    def headers(self, expression: Expression) -> Assert:
        """Assert on the whole header set."""
        return self._attach(HeadersMatcher, expression)

    def header(self, name: str, expression: Expression) -> Assert:
        """Assert on the value of the header ``name``."""
        return self._attach(HeaderMatcher, expression, name)

    def json_body(self, expression: Expression) -> Assert:
        """Assert on the whole JSON body."""
        return self._attach(JsonBodyMatcher, expression)

    def json_path(self, path: str, expression: Expression) -> Assert:
        """Assert on the value(s) selected by the JSON path ``path``."""
        return self._attach(JsonPathMatcher, expression, path)

    def response_time(self, expression: Expression) -> Assert:
        """Assert on the elapsed time, in whole milliseconds."""
        return self._attach(ResponseTimeMatcher, expression)

    # ─────────────────────────────────────────────────────────────────────
    # Completion
    # ─────────────────────────────────────────────────────────────────────

    def assert_fn(self, func: Callable[[Snapshot], Any]) -> ChainReport:
        """
        Run custom checks on the snapshot, then complete the chain.

        Whatever ``func`` raises propagates to the caller unchanged.

        Returns:
            The chain report
        """
        self._ensure_open()
        func(self.snapshot)
        return self.finish()

    def finish(self) -> ChainReport:
        """
        Complete the chain.

        Returns:
            The chain report

        Raises:
            ChainCompletedError: If the chain was already completed
        """
        self._ensure_open()
        halted = self.halted
        self._state = ChainState.COMPLETED
        logger.debug(
            f"Chain completed: {len(self._outcomes)} evaluated, "
            f"{self._skipped} skipped, halted={halted}"
        )
        return ChainReport(outcomes=list(self._outcomes), halted=halted, skipped=self._skipped)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self._state is ChainState.COMPLETED:
            raise ChainCompletedError("The assertion chain has already been completed")

    def _attach(self, matcher_cls: type[PartMatcher], expression: Expression, *args: Any) -> Assert:
        self._ensure_open()
        # Attachment errors surface even on a halted chain
        bound = bind(matcher_cls(*args), expression)

        if self._state is ChainState.HALTED:
            self._skipped += 1
            logger.debug(f"Chain halted, skipping {bound.matcher.part.value} assertion")
            return self

        outcome = bound.evaluate(self.snapshot)
        self._outcomes.append(outcome)
        self.reporter.report(outcome)

        if outcome.failed and self.log_settings.fail_fast:
            self._state = ChainState.HALTED
            logger.debug(f"Chain halted after failed {outcome.part.value} assertion")
        return self
