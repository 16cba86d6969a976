"""
Outcome reporter.

Writes each outcome to the output stream as soon as it is produced,
either as a human-readable block or as one JSON record per line.
"""

from __future__ import annotations

import json
import logging
from typing import IO, TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from .models import LogFormat, LogSettings

if TYPE_CHECKING:
    from ..assertions.models import Outcome

logger = logging.getLogger(__name__)


class LogReporter:
    """
    Emits outcomes according to the log settings.

    Example:
        reporter = LogReporter(LogSettings(LogMode.ALL_OUTCOMES, LogFormat.JSON))
        reporter.report(outcome)
        # {"part": "status code", "predicate": "should be", "left": 201, ...}
    """

    def __init__(
        self,
        settings: LogSettings | None = None,
        stream: IO[str] | None = None,
        console: Console | None = None,
    ):
        """
        Args:
            settings: Log settings, defaults to fail-fast text output
            stream: Text stream to write to, defaults to stdout
            console: A rich console to use instead of ``stream``
        """
        self.settings = settings or LogSettings()
        self.console = console or Console(file=stream, highlight=False, soft_wrap=True)
        self.written = 0

    def report(self, outcome: Outcome) -> bool:
        """
        Write one outcome if the settings call for it.

        Returns:
            True if the outcome was written
        """
        if not self.settings.reports(outcome):
            return False

        if self.settings.format is LogFormat.JSON:
            self.console.out(json.dumps(outcome.to_record(), default=str), highlight=False)
        else:
            style = "green" if outcome.passed else "bold red"
            self.console.print(Text(f"result: {outcome.result}", style=style))
            self.console.print(Text(str(outcome)))
            self.console.print()

        self.written += 1
        logger.debug(f"Reported {outcome.result} outcome for {outcome.part.value}")
        return True
