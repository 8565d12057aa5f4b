"""Restore API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nano_snapshot.orchestrators import RestoreOrchestrator
from nano_snapshot.schemas import RestoreSpec

from ..dependencies import get_cluster_client, get_redis, get_restore_orchestrator
from ..exceptions import outcome_response
from ..jobs import JobTracker
from ..models import JobOperation, OperationResponse

router = APIRouter(prefix="/restore", tags=["restore"])


@router.post("", response_model=OperationResponse)
async def create_restore(
    spec: RestoreSpec,
    client=Depends(get_cluster_client),
    orchestrator: RestoreOrchestrator = Depends(get_restore_orchestrator),
    redis_client=Depends(get_redis),
) -> JSONResponse:
    """Restore a collection from a backup.

    An existing collection is only replaced when ``force`` is set; otherwise
    the call answers 409.
    """
    outcome = await orchestrator.restore(spec, client)
    if outcome.request_id:
        await JobTracker(redis_client).record(outcome.request_id, JobOperation.RESTORE, spec.collection)
    return outcome_response(outcome)


@router.get("/status/{request_id}", response_model=OperationResponse)
async def restore_status(
    request_id: str,
    client=Depends(get_cluster_client),
    orchestrator: RestoreOrchestrator = Depends(get_restore_orchestrator),
    redis_client=Depends(get_redis),
) -> JSONResponse:
    """Query the state of an async restore once."""
    outcome = await orchestrator.query_status(request_id, client)
    if outcome.job:
        await JobTracker(redis_client).update(outcome.job)
    return outcome_response(outcome)
