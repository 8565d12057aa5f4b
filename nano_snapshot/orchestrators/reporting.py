"""Outcome reporting for backup and restore operations."""

from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from ..schemas import OperationOutcome
from .._utils import logger


def render_errors(errors: Iterable[Tuple[str, str]]) -> List[str]:
    """Render a structured failure list, one numbered line per entry.

    Args:
        errors: Ordered (name, value) pairs

    Returns:
        Lines formatted as ``"<n>. Error Name: <name>; Error Value: <value>"``
    """
    return [
        f"{index}. Error Name: {name}; Error Value: {value}"
        for index, (name, value) in enumerate(errors, start=1)
    ]


def format_report(outcome: OperationOutcome) -> str:
    """Outcome message followed by its rendered error lines."""
    return "\n".join([outcome.message, *render_errors(outcome.errors)])


class JobOutcomeReporter(ABC):
    """Receives one human-readable notification per finished call."""

    @abstractmethod
    def report_success(self, message: str) -> None:
        ...

    @abstractmethod
    def report_error(self, message: str) -> None:
        ...


class LoggingOutcomeReporter(JobOutcomeReporter):
    """Report outcomes through the package logger."""

    def report_success(self, message: str) -> None:
        logger.info(message)

    def report_error(self, message: str) -> None:
        logger.error(message)


def report_outcome(reporter: JobOutcomeReporter, outcome: OperationOutcome) -> None:
    if outcome.success:
        reporter.report_success(outcome.message)
    else:
        reporter.report_error(format_report(outcome))
