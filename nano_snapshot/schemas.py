"""Value objects exchanged between callers, orchestrators and cluster clients.

Architecture:
- Request layer: BackupSpec/RestoreSpec - built per invocation, consumed once
- Client layer: AdminResponse/RequestStatusResponse - raw cluster answers
- Result layer: OperationOutcome/AsyncJobStatus - returned to the caller,
  never retained by the orchestrators
All models are frozen; a new poll produces a new AsyncJobStatus.
"""

from enum import Enum
from typing import Annotated, Any, Iterable, Mapping, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from .errors import ErrorKind


CollectionName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ErrorDetail(NamedTuple):
    """Single entry of a structured failure list."""
    name: str
    value: str


def normalize_errors(raw: Any) -> Tuple[ErrorDetail, ...]:
    """Convert a failure list into ordered ErrorDetail entries.

    Accepts a mapping (insertion order is kept) or an iterable of
    (name, value) pairs. Non-string values are rendered with str().
    """
    if raw is None:
        return ()
    if isinstance(raw, Mapping):
        items: Iterable = raw.items()
    else:
        items = raw
    details = []
    for item in items:
        if isinstance(item, ErrorDetail):
            details.append(item)
            continue
        name, value = item
        details.append(ErrorDetail(str(name), value if isinstance(value, str) else str(value)))
    return tuple(details)


class OperationMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


class RequestState(str, Enum):
    """Normalized state of an asynchronous cluster request."""
    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "notfound"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestState.COMPLETED, RequestState.FAILED, RequestState.NOT_FOUND)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class _ErrorsModel(_FrozenModel):
    errors: Tuple[ErrorDetail, ...] = ()

    @field_validator("errors", mode="before")
    @classmethod
    def _coerce_errors(cls, v):
        return normalize_errors(v)


class BackupSpec(_FrozenModel):
    """Backup request for a single collection."""
    collection: CollectionName
    location: Optional[str] = Field(
        default=None, description="Shared backup location; cluster default if omitted"
    )
    backup_name: Optional[str] = Field(
        default=None, description="Backup name; a snapshot.<timestamp> name is generated if omitted"
    )
    mode: OperationMode = OperationMode.SYNC


class RestoreSpec(_FrozenModel):
    """Restore request for a single collection."""
    collection: CollectionName
    location: Optional[str] = None
    backup_name: Optional[str] = Field(
        default=None, description="Backup name; latest snapshot.<timestamp> at location if omitted"
    )
    mode: OperationMode = OperationMode.SYNC
    force: bool = Field(default=False, description="Delete the collection first if it already exists")


class AdminResponse(_ErrorsModel):
    """Result of a synchronous administration call."""
    status: int = 0
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == 0 and not self.errors


class RequestStatusResponse(_ErrorsModel):
    """Raw status payload for an asynchronous request."""
    state: Optional[str] = None
    message: Optional[str] = None


class AsyncJobStatus(_ErrorsModel):
    """Snapshot of an asynchronous job's state at the time of one poll."""
    request_id: str
    state: RequestState
    message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


class OperationOutcome(_ErrorsModel):
    """Single result shape returned by every orchestrator call."""
    success: bool
    message: str = ""
    request_id: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    job: Optional[AsyncJobStatus] = None
