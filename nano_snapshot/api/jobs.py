"""Tracking of async backup and restore requests."""
import os
from datetime import datetime, timezone
from typing import List, Optional

import redis.asyncio as redis
from pydantic import ValidationError

from nano_snapshot._utils import logger
from nano_snapshot.schemas import AsyncJobStatus, RequestState

from .models import JobOperation, JobRecord

KEY_PREFIX = "snapshot-job:"


class JobTracker:
    """Records async request ids in Redis so they can be listed and streamed later.

    Without a Redis client every method is a no-op.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis = redis_client
        # Configurable TTL via environment variable (default: 7 days)
        self.job_ttl = int(os.getenv("REDIS_JOB_TTL", "604800"))

    @staticmethod
    def _key(request_id: str) -> str:
        return f"{KEY_PREFIX}{request_id}"

    async def _save(self, record: JobRecord) -> None:
        await self.redis.setex(self._key(record.request_id), self.job_ttl, record.model_dump_json())

    async def record(self, request_id: str, operation: JobOperation, collection: str) -> Optional[JobRecord]:
        """Store a newly issued async request."""
        if not self.redis:
            return None

        job = JobRecord(request_id=request_id, operation=operation, collection=collection)
        await self._save(job)
        logger.info(f"Tracking {operation.value} request {request_id} for collection {collection}")
        return job

    async def get(self, request_id: str) -> Optional[JobRecord]:
        """Retrieve a tracked request from Redis."""
        if not self.redis:
            return None

        job_data = await self.redis.get(self._key(request_id))
        if job_data:
            return JobRecord.model_validate_json(job_data)
        return None

    async def update(self, status: AsyncJobStatus) -> bool:
        """Store the latest polled state of a tracked request."""
        if not self.redis:
            return False

        job = await self.get(status.request_id)
        if not job:
            return False

        job = job.model_copy(update={
            "state": status.state,
            "message": status.message,
            "updated_at": datetime.now(timezone.utc),
        })
        await self._save(job)
        return True

    async def list(
        self,
        state: Optional[RequestState] = None,
        limit: int = 100
    ) -> List[JobRecord]:
        """List tracked requests, newest first, optionally filtered by last known state."""
        if not self.redis:
            return []

        # Use SCAN instead of KEYS to avoid blocking Redis
        cursor = 0
        job_keys = []

        while True:
            cursor, keys = await self.redis.scan(
                cursor, match=f"{KEY_PREFIX}*", count=100
            )
            job_keys.extend(keys)

            # Stop if we have enough keys or finished scanning
            if cursor == 0 or len(job_keys) >= limit * 2:  # Get extra to account for filtering
                break

        jobs = []
        for key in job_keys:
            job_data = await self.redis.get(key)
            if not job_data:
                continue
            try:
                job = JobRecord.model_validate_json(job_data)
            except ValidationError as e:
                logger.warning(f"Failed to parse job data for {key}: {e}")
                continue
            if state is None or job.state == state:
                jobs.append(job)

        jobs.sort(key=lambda x: x.created_at, reverse=True)
        return jobs[:limit]
