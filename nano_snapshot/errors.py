"""Error taxonomy for backup and restore operations.

Orchestrators raise these internally and convert them into a failed
``OperationOutcome`` at their boundary. Cluster clients raise
``TransportError`` (or ``ProtocolError``) for communication problems, and
``ClusterOperationFailedError`` only where the cluster rejects a call that
has no response object to return (listing, async submission, status query).
"""

from enum import Enum
from typing import Iterable, Optional, Tuple


class ErrorKind(str, Enum):
    """Failure categories carried by a failed outcome."""
    INVALID_ARGUMENT = "invalid_argument"
    PRECONDITION_FAILED = "precondition_failed"
    CLUSTER_OPERATION_FAILED = "cluster_operation_failed"
    TRANSPORT_FAILURE = "transport_failure"


class SnapshotError(Exception):
    """Base exception for snapshot operations."""
    kind: ErrorKind = ErrorKind.CLUSTER_OPERATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(SnapshotError):
    """Mutually exclusive or missing request fields."""
    kind = ErrorKind.INVALID_ARGUMENT


class PreconditionFailedError(SnapshotError):
    """Cluster state forbids the operation (e.g. collection already exists)."""
    kind = ErrorKind.PRECONDITION_FAILED


class ClusterOperationFailedError(SnapshotError):
    """The administration API reported a non-success status."""
    kind = ErrorKind.CLUSTER_OPERATION_FAILED

    def __init__(self, message: str, errors: Iterable[Tuple[str, str]] = ()):
        super().__init__(message)
        self.errors = tuple(errors)


class TransportError(SnapshotError):
    """The client could not reach or talk to the cluster."""
    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ProtocolError(TransportError):
    """The cluster answered with a payload the client could not understand."""
    pass


__all__ = [
    "ErrorKind",
    "SnapshotError",
    "InvalidArgumentError",
    "PreconditionFailedError",
    "ClusterOperationFailedError",
    "TransportError",
    "ProtocolError",
]
