"""Backup and restore orchestration."""

from .backup import BackupOrchestrator
from .reporting import JobOutcomeReporter, LoggingOutcomeReporter, format_report, render_errors
from .restore import RestoreOrchestrator
from .status import parse_request_state, translate_status

__all__ = [
    "BackupOrchestrator",
    "RestoreOrchestrator",
    "JobOutcomeReporter",
    "LoggingOutcomeReporter",
    "format_report",
    "render_errors",
    "parse_request_state",
    "translate_status",
]
