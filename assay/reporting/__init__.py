"""
Outcome Reporting

This package controls how assertion outcomes are written out, whether a
chain stops at its first failure, and how suite runs are recorded.

Usage:
    from assay.reporting import LogSettings, LogMode, LogFormat, LogReporter

    settings = LogSettings(mode=LogMode.ALL_OUTCOMES, format=LogFormat.JSON)
    reporter = LogReporter(settings)
    reporter.report(outcome)
"""

# Models
from .models import (
    ChainReport,
    LogFormat,
    LogMode,
    LogSettings,
    RequestRecord,
    RequestStatus,
    RunReport,
    RunStatus,
    compute_suite_hash,
)

# Reporter
from .reporter import LogReporter

__all__ = [
    # Models
    "ChainReport",
    "LogFormat",
    "LogMode",
    "LogSettings",
    # Run records
    "RequestRecord",
    "RequestStatus",
    "RunReport",
    "RunStatus",
    "compute_suite_hash",
    # Reporter
    "LogReporter",
]
