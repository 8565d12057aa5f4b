"""Job tracking router."""
import asyncio
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from nano_snapshot.orchestrators import BackupOrchestrator, RestoreOrchestrator
from nano_snapshot.schemas import RequestState

from ..config import settings
from ..dependencies import get_backup_orchestrator, get_cluster_client, get_redis, get_restore_orchestrator
from ..exceptions import JobNotFoundError
from ..jobs import JobTracker
from ..models import JobOperation, JobRecord, OperationResponse

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobRecord])
async def list_jobs(
    state: Optional[RequestState] = None,
    limit: int = Query(100, ge=1, le=1000),
    redis_client=Depends(get_redis),
):
    """List tracked async requests with optional state filter."""
    return await JobTracker(redis_client).list(state=state, limit=limit)


@router.get("/{request_id}", response_model=JobRecord)
async def get_job(
    request_id: str,
    redis_client=Depends(get_redis),
):
    """Get a tracked async request."""
    job = await JobTracker(redis_client).get(request_id)
    if not job:
        raise JobNotFoundError(request_id)
    return job


@router.get("/{request_id}/stream")
async def stream_job_status(
    request_id: str,
    operation: Optional[JobOperation] = None,
    client=Depends(get_cluster_client),
    redis_client=Depends(get_redis),
    backup_orchestrator: BackupOrchestrator = Depends(get_backup_orchestrator),
    restore_orchestrator: RestoreOrchestrator = Depends(get_restore_orchestrator),
):
    """Stream status changes of an async request via Server-Sent Events.

    The operation is taken from the tracked record; untracked requests need
    the ``operation`` query parameter. Streaming stops at a terminal state,
    when the status query itself fails, or after ``stream_timeout`` seconds.
    """
    tracker = JobTracker(redis_client)
    job = await tracker.get(request_id)
    if job:
        operation = job.operation
    if operation is None:
        raise JobNotFoundError(request_id)

    orchestrator = backup_orchestrator if operation == JobOperation.BACKUP else restore_orchestrator

    async def event_generator():
        loop = asyncio.get_running_loop()
        deadline = loop.time() + settings.stream_timeout
        last_state = None

        while True:
            outcome = await orchestrator.query_status(request_id, client)
            if outcome.job is None:
                yield f"data: {OperationResponse.from_outcome(outcome).model_dump_json()}\n\n"
                break

            await tracker.update(outcome.job)

            # Send update if state changed
            if outcome.job.state != last_state:
                yield f"data: {OperationResponse.from_outcome(outcome).model_dump_json()}\n\n"
                last_state = outcome.job.state

            if outcome.job.is_terminal:
                break

            if loop.time() >= deadline:
                detail = {"request_id": request_id, "detail": f"No terminal state after {settings.stream_timeout}s"}
                yield f"event: timeout\ndata: {json.dumps(detail)}\n\n"
                break

            await asyncio.sleep(settings.stream_poll_interval)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
