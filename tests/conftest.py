"""Global pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from nano_snapshot._cluster.memory import InMemoryClusterAdminClient
from nano_snapshot.config import ClusterConfig
from nano_snapshot.orchestrators import JobOutcomeReporter


class RecordingReporter(JobOutcomeReporter):
    """Reporter that keeps every notification for assertions."""

    def __init__(self):
        self.successes = []
        self.errors = []

    @property
    def calls(self) -> int:
        return len(self.successes) + len(self.errors)

    def report_success(self, message: str) -> None:
        self.successes.append(message)

    def report_error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def memory_config():
    return ClusterConfig(backend="memory", backup_location="/backups")


@pytest.fixture
def memory_client(memory_config):
    """In-memory cluster with one collection."""
    return InMemoryClusterAdminClient(memory_config, collections=["books"])
