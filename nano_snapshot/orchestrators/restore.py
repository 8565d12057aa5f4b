"""Restore orchestration for cluster collections."""

from typing import Optional

from ..base import BaseClusterAdminClient
from ..errors import ClusterOperationFailedError, PreconditionFailedError, SnapshotError, TransportError
from ..schemas import OperationMode, OperationOutcome, RestoreSpec
from .._utils import logger
from .base import BaseOrchestrator


class RestoreOrchestrator(BaseOrchestrator):
    """Drive a collection restore, synchronously or as a tracked async job.

    An existing collection is never overwritten unless ``force`` is set, in
    which case it is deleted first. Synchronous restores are followed by an
    optimize; an optimize failure is reported as a warning only.
    """

    operation = "Restore"

    async def restore(
        self,
        spec: RestoreSpec,
        client: BaseClusterAdminClient,
        *,
        request_id: Optional[str] = None,
    ) -> OperationOutcome:
        """Restore a collection from a backup.

        Args:
            spec: What to restore and how
            client: Cluster admin client, owned by the caller
            request_id: Must be None; status queries go through ``query_status``

        Returns:
            OperationOutcome; ``request_id`` is set for async issuances
        """
        return await self._run(self._restore(spec, client, request_id), failure_label="Restore failed.")

    async def _restore(
        self,
        spec: RestoreSpec,
        client: BaseClusterAdminClient,
        request_id: Optional[str],
    ) -> OperationOutcome:
        self._reject_status_request(request_id)

        name = spec.collection
        logger.info(
            f"Restoring collection [{name}] from [{spec.location or 'default location'}] / "
            f"[{spec.backup_name or 'latest snapshot'}]."
        )
        await self._ensure_restorable(spec, client)

        if spec.mode == OperationMode.ASYNC:
            request_id = await client.restore_collection_async(name, spec.location, spec.backup_name)
            message = f"Restore request Id: {request_id}"
            logger.info(message)
            return OperationOutcome(success=True, request_id=request_id, message=message)

        response = await client.restore_collection(name, spec.location, spec.backup_name)
        logger.debug(f"Restore status: {response.status}")
        if not response.success:
            raise ClusterOperationFailedError(response.message or "", response.errors)

        warning = await self._optimize(name, client)
        if warning:
            return OperationOutcome(success=True, message=f"Restore complete. Warning: {warning}")
        return OperationOutcome(success=True, message="Restore complete.")

    async def _ensure_restorable(self, spec: RestoreSpec, client: BaseClusterAdminClient) -> None:
        """Make room for the restore, deleting the collection only when forced."""
        name = spec.collection
        if not await client.collection_exists(name):
            return
        if not spec.force:
            raise PreconditionFailedError(
                f"Collection [{name}] was not replaced: collection already exists and force is not set."
            )

        logger.info(f"Deleting existing collection [{name}] before restore")
        reason = f"Collection [{name}] was not replaced: unable to delete existing collection."
        try:
            response = await client.delete_collection(name)
        except TransportError as e:
            raise TransportError(f"{reason} {e.message}", cause=e.cause or e) from e
        if not response.success:
            raise ClusterOperationFailedError(
                " ".join(part for part in (reason, response.message) if part),
                response.errors,
            )

    async def _optimize(self, name: str, client: BaseClusterAdminClient) -> Optional[str]:
        """Optimize a restored collection; return a warning if that fails."""
        logger.info(f"Optimizing of collection [{name}] is in progress.")
        try:
            response = await client.optimize_collection(name)
        except SnapshotError as e:
            warning = f"unable to optimize collection [{name}]: {e.message}"
        except Exception as e:
            warning = f"unable to optimize collection [{name}]: {type(e).__name__}: {e}"
        else:
            if response.success:
                return None
            warning = f"unable to optimize collection [{name}] (status {response.status})"
            if response.message:
                warning = f"{warning}: {response.message}"
        logger.warning(f"Restore of [{name}] succeeded but {warning}")
        return warning
