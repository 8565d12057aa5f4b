"""Backup API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nano_snapshot.orchestrators import BackupOrchestrator
from nano_snapshot.schemas import BackupSpec

from ..dependencies import get_backup_orchestrator, get_cluster_client, get_redis
from ..exceptions import outcome_response
from ..jobs import JobTracker
from ..models import JobOperation, OperationResponse

router = APIRouter(prefix="/backup", tags=["backup"])


@router.post("", response_model=OperationResponse)
async def create_backup(
    spec: BackupSpec,
    client=Depends(get_cluster_client),
    orchestrator: BackupOrchestrator = Depends(get_backup_orchestrator),
    redis_client=Depends(get_redis),
) -> JSONResponse:
    """Back up a collection.

    Async backups return a request id, which is tracked for the jobs endpoints.
    """
    outcome = await orchestrator.backup(spec, client)
    if outcome.request_id:
        await JobTracker(redis_client).record(outcome.request_id, JobOperation.BACKUP, spec.collection)
    return outcome_response(outcome)


@router.get("/status/{request_id}", response_model=OperationResponse)
async def backup_status(
    request_id: str,
    client=Depends(get_cluster_client),
    orchestrator: BackupOrchestrator = Depends(get_backup_orchestrator),
    redis_client=Depends(get_redis),
) -> JSONResponse:
    """Query the state of an async backup once."""
    outcome = await orchestrator.query_status(request_id, client)
    if outcome.job:
        await JobTracker(redis_client).update(outcome.job)
    return outcome_response(outcome)
