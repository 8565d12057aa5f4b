"""Backup orchestration for cluster collections."""

from typing import Optional

from ..base import BaseClusterAdminClient
from ..errors import ClusterOperationFailedError
from ..schemas import BackupSpec, OperationMode, OperationOutcome
from .._utils import logger
from .base import BaseOrchestrator


class BackupOrchestrator(BaseOrchestrator):
    """Drive a collection backup, synchronously or as a tracked async job."""

    operation = "Backup"

    async def backup(
        self,
        spec: BackupSpec,
        client: BaseClusterAdminClient,
        *,
        request_id: Optional[str] = None,
    ) -> OperationOutcome:
        """Back up a collection.

        Backups are additive, so no existence check is made.

        Args:
            spec: What to back up and how
            client: Cluster admin client, owned by the caller
            request_id: Must be None; status queries go through ``query_status``

        Returns:
            OperationOutcome; ``request_id`` is set for async issuances
        """
        return await self._run(self._backup(spec, client, request_id), failure_label="Backup failed.")

    async def _backup(
        self,
        spec: BackupSpec,
        client: BaseClusterAdminClient,
        request_id: Optional[str],
    ) -> OperationOutcome:
        self._reject_status_request(request_id)

        name = spec.collection
        logger.info(
            f"Backing up collection [{name}] to [{spec.location or 'default location'}] "
            f"using backup name [{spec.backup_name or 'generated snapshot name'}]."
        )

        if spec.mode == OperationMode.ASYNC:
            request_id = await client.backup_collection_async(name, spec.location, spec.backup_name)
            message = f"Backup request Id: {request_id}"
            logger.info(message)
            return OperationOutcome(success=True, request_id=request_id, message=message)

        response = await client.backup_collection(name, spec.location, spec.backup_name)
        logger.debug(f"Backup status: {response.status}")
        if not response.success:
            raise ClusterOperationFailedError(response.message or "", response.errors)
        return OperationOutcome(success=True, message="Backup complete.")
