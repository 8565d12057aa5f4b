"""Cluster administration client abstraction."""

from abc import ABC, abstractmethod
from typing import Optional

from .schemas import AdminResponse, RequestStatusResponse


class BaseClusterAdminClient(ABC):
    """Capability-typed client for a cluster's collection administration API.

    Implementations raise ``TransportError`` when the cluster cannot be reached
    or answers with an unreadable payload. Failures of mutating calls are
    returned as non-success responses; calls that return a plain value raise
    ``ClusterOperationFailedError`` when the cluster rejects them.

    The caller owns the client lifecycle; orchestrators never close it.
    """

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> AdminResponse:
        ...

    @abstractmethod
    async def backup_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        """Back up a collection and wait for the cluster to finish."""
        ...

    @abstractmethod
    async def backup_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        """Submit a backup and return its request id."""
        ...

    @abstractmethod
    async def restore_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        """Restore a collection and wait for the cluster to finish."""
        ...

    @abstractmethod
    async def restore_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        """Submit a restore and return its request id."""
        ...

    @abstractmethod
    async def optimize_collection(self, name: str) -> AdminResponse:
        ...

    @abstractmethod
    async def query_async_status(self, request_id: str) -> RequestStatusResponse:
        ...

    async def close(self) -> None:
        """Release client resources."""
        return None

    async def __aenter__(self) -> "BaseClusterAdminClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
