"""Dependency injection for FastAPI."""

from typing import TYPE_CHECKING, Optional

from fastapi import Request

from nano_snapshot.orchestrators import BackupOrchestrator, RestoreOrchestrator

if TYPE_CHECKING:
    import redis.asyncio as redis
    from nano_snapshot.base import BaseClusterAdminClient


async def get_cluster_client(request: Request) -> "BaseClusterAdminClient":
    """Get cluster admin client from app state."""
    return request.app.state.cluster_client


async def get_redis(request: Request) -> Optional["redis.Redis"]:
    """Get Redis client from app state if available."""
    return getattr(request.app.state, "redis_client", None)


async def get_backup_orchestrator() -> BackupOrchestrator:
    return BackupOrchestrator()


async def get_restore_orchestrator() -> RestoreOrchestrator:
    return RestoreOrchestrator()
