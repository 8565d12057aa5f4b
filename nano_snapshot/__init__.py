from .base import BaseClusterAdminClient
from .config import ClusterConfig, validate_config
from .errors import (
    ClusterOperationFailedError,
    ErrorKind,
    InvalidArgumentError,
    PreconditionFailedError,
    ProtocolError,
    SnapshotError,
    TransportError,
)
from .orchestrators import BackupOrchestrator, JobOutcomeReporter, LoggingOutcomeReporter, RestoreOrchestrator
from .schemas import (
    AdminResponse,
    AsyncJobStatus,
    BackupSpec,
    ErrorDetail,
    OperationMode,
    OperationOutcome,
    RequestState,
    RequestStatusResponse,
    RestoreSpec,
)
from ._cluster import ClusterClientFactory

__version__ = "0.1.0"
__author__ = "nano-snapshot contributors"
