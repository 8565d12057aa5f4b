"""HTTP mapping of operation outcomes and API errors."""

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from nano_snapshot.errors import ErrorKind
from nano_snapshot.schemas import OperationOutcome, RequestState

from .models import OperationResponse

STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: HTTP_400_BAD_REQUEST,
    ErrorKind.PRECONDITION_FAILED: HTTP_409_CONFLICT,
    ErrorKind.CLUSTER_OPERATION_FAILED: HTTP_502_BAD_GATEWAY,
    ErrorKind.TRANSPORT_FAILURE: HTTP_503_SERVICE_UNAVAILABLE,
}


class SnapshotAPIError(HTTPException):
    """Base exception for nano-snapshot API errors."""
    pass


class JobNotFoundError(SnapshotAPIError):
    def __init__(self, request_id: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Job {request_id} not found")


def status_code_for(outcome: OperationOutcome) -> int:
    """HTTP status code for an outcome, keyed by its error kind."""
    if outcome.success:
        return HTTP_200_OK
    if outcome.job and outcome.job.state == RequestState.NOT_FOUND:
        return HTTP_404_NOT_FOUND
    return STATUS_BY_KIND.get(outcome.error_kind, HTTP_502_BAD_GATEWAY)


def outcome_response(outcome: OperationOutcome) -> JSONResponse:
    body = OperationResponse.from_outcome(outcome)
    return JSONResponse(status_code=status_code_for(outcome), content=body.model_dump(mode="json"))
