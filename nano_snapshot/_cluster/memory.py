"""In-memory cluster simulation for development and tests."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ..base import BaseClusterAdminClient
from ..config import ClusterConfig
from ..schemas import AdminResponse, ErrorDetail, RequestState, RequestStatusResponse, normalize_errors
from .._utils import generate_request_id, generate_snapshot_name, logger, resolve_latest_snapshot

DEFAULT_LOCATION = "default"
FAILURE_STATUS = 500

ACTIONS = {"delete", "backup", "restore", "optimize"}


@dataclass
class _Job:
    action: str
    result: AdminResponse
    polls: int = 0


class InMemoryClusterAdminClient(BaseClusterAdminClient):
    """Simulated cluster keeping collections, backups and async jobs in dicts.

    Async requests execute on submission; polling then walks the job through
    SUBMITTED and RUNNING before reporting its terminal state.
    """

    def __init__(
        self,
        config: Optional[ClusterConfig] = None,
        *,
        collections: Iterable[str] = (),
        polls_to_complete: int = 3,
    ):
        if polls_to_complete < 1:
            raise ValueError(f"polls_to_complete must be at least 1, got {polls_to_complete}")
        self.config = config or ClusterConfig(backend="memory")
        self.polls_to_complete = polls_to_complete
        self.collections: Dict[str, Dict[str, int]] = {name: self._layout() for name in collections}
        # location -> backup name -> snapshot metadata
        self.backups: Dict[str, Dict[str, Dict[str, object]]] = defaultdict(dict)
        self.optimized: List[str] = []
        self._jobs: Dict[str, _Job] = {}
        self._failures: Dict[str, Tuple[ErrorDetail, ...]] = {}

    def _layout(self) -> Dict[str, int]:
        return {
            "shards": self.config.shard_count,
            "replication_factor": self.config.replication_factor,
        }

    def _location(self, location: Optional[str]) -> str:
        return location or self.config.backup_location or DEFAULT_LOCATION

    def fail_next(self, action: str, errors: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        """Make the next call of ``action`` report a failure."""
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action}. Available: {sorted(ACTIONS)}")
        self._failures[action] = normalize_errors(errors or ())

    def expire(self, request_id: str) -> None:
        """Forget a tracked request, as the cluster does once it ages out."""
        self._jobs.pop(request_id, None)

    def _injected_failure(self, action: str) -> Optional[AdminResponse]:
        if action not in self._failures:
            return None
        return AdminResponse(status=FAILURE_STATUS, errors=self._failures.pop(action))

    # Operations

    def _delete(self, name: str) -> AdminResponse:
        failure = self._injected_failure("delete")
        if failure:
            return failure
        if name not in self.collections:
            return AdminResponse(status=400, errors=[("Collection not found", name)])
        del self.collections[name]
        logger.debug(f"Deleted collection {name}")
        return AdminResponse()

    def _backup(self, name: str, location: Optional[str], backup_name: Optional[str]) -> AdminResponse:
        failure = self._injected_failure("backup")
        if failure:
            return failure
        if name not in self.collections:
            return AdminResponse(status=400, errors=[("Collection not found", name)])
        backup_name = backup_name or generate_snapshot_name()
        self.backups[self._location(location)][backup_name] = {
            "collection": name,
            "layout": dict(self.collections[name]),
            "created_at": datetime.now(timezone.utc),
        }
        logger.debug(f"Backed up {name} to {self._location(location)}/{backup_name}")
        return AdminResponse()

    def _restore(self, name: str, location: Optional[str], backup_name: Optional[str]) -> AdminResponse:
        failure = self._injected_failure("restore")
        if failure:
            return failure
        stored = self.backups.get(self._location(location), {})
        backup_name = backup_name or resolve_latest_snapshot(stored)
        if not backup_name:
            return AdminResponse(status=400, errors=[("No snapshot found", self._location(location))])
        if backup_name not in stored:
            return AdminResponse(status=400, errors=[("Backup not found", backup_name)])
        if name in self.collections:
            return AdminResponse(status=400, errors=[("Collection exists", name)])
        self.collections[name] = self._layout()
        logger.debug(f"Restored {name} from {self._location(location)}/{backup_name}")
        return AdminResponse()

    def _submit(self, action: str, result: AdminResponse) -> str:
        request_id = generate_request_id()
        self._jobs[request_id] = _Job(action=action, result=result)
        return request_id

    # Capabilities

    async def collection_exists(self, name: str) -> bool:
        return name in self.collections

    async def delete_collection(self, name: str) -> AdminResponse:
        return self._delete(name)

    async def backup_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        return self._backup(name, location, backup_name)

    async def backup_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        return self._submit("backup", self._backup(name, location, backup_name))

    async def restore_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        return self._restore(name, location, backup_name)

    async def restore_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        return self._submit("restore", self._restore(name, location, backup_name))

    async def optimize_collection(self, name: str) -> AdminResponse:
        failure = self._injected_failure("optimize")
        if failure:
            return failure
        if name not in self.collections:
            return AdminResponse(status=400, errors=[("Collection not found", name)])
        self.optimized.append(name)
        return AdminResponse()

    async def query_async_status(self, request_id: str) -> RequestStatusResponse:
        job = self._jobs.get(request_id)
        if job is None:
            return RequestStatusResponse(
                state=RequestState.NOT_FOUND.value,
                message=f"Did not find [{request_id}] in any tasks queue",
            )

        job.polls += 1
        if job.polls < self.polls_to_complete:
            state = RequestState.SUBMITTED if job.polls == 1 else RequestState.RUNNING
            return RequestStatusResponse(state=state.value, message=f"found [{request_id}] in {state.value} tasks")

        if job.result.success:
            return RequestStatusResponse(
                state=RequestState.COMPLETED.value,
                message=f"found [{request_id}] in completed tasks",
            )
        return RequestStatusResponse(
            state=RequestState.FAILED.value,
            message=f"found [{request_id}] in failed tasks",
            errors=job.result.errors,
        )
