"""Pydantic models for API requests and responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from nano_snapshot.orchestrators import format_report
from nano_snapshot.schemas import AsyncJobStatus, OperationOutcome, RequestState


class JobOperation(str, Enum):
    BACKUP = "backup"
    RESTORE = "restore"


class ErrorItem(BaseModel):
    name: str
    value: str


class JobStatusResponse(BaseModel):
    request_id: str
    state: RequestState
    message: Optional[str] = None
    is_terminal: bool
    errors: List[ErrorItem] = Field(default_factory=list)

    @classmethod
    def from_status(cls, job: AsyncJobStatus) -> "JobStatusResponse":
        return cls(
            request_id=job.request_id,
            state=job.state,
            message=job.message,
            is_terminal=job.is_terminal,
            errors=[ErrorItem(name=name, value=value) for name, value in job.errors],
        )


class OperationResponse(BaseModel):
    """Wire form of an operation outcome."""
    success: bool
    message: str
    request_id: Optional[str] = None
    error_kind: Optional[str] = None
    errors: List[ErrorItem] = Field(default_factory=list)
    report: str = Field(description="Message followed by one numbered line per error")
    job: Optional[JobStatusResponse] = None

    @classmethod
    def from_outcome(cls, outcome: OperationOutcome) -> "OperationResponse":
        return cls(
            success=outcome.success,
            message=outcome.message,
            request_id=outcome.request_id,
            error_kind=outcome.error_kind.value if outcome.error_kind else None,
            errors=[ErrorItem(name=name, value=value) for name, value in outcome.errors],
            report=format_report(outcome),
            job=JobStatusResponse.from_status(outcome.job) if outcome.job else None,
        )


class JobRecord(BaseModel):
    """Async request tracked by the API."""
    request_id: str
    operation: JobOperation
    collection: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    state: RequestState = RequestState.SUBMITTED
    updated_at: Optional[datetime] = None
    message: Optional[str] = None
