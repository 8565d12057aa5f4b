"""Shared orchestration: outcome boundary and async status queries."""

from typing import Awaitable, Optional

from ..base import BaseClusterAdminClient
from ..errors import ErrorKind, InvalidArgumentError, SnapshotError
from ..schemas import OperationOutcome, RequestState
from .._utils import logger
from .reporting import JobOutcomeReporter, LoggingOutcomeReporter, report_outcome
from .status import translate_status


class BaseOrchestrator:
    """Common behavior of the backup and restore orchestrators.

    Every public call returns an ``OperationOutcome``; errors raised while
    driving the cluster are converted at a single boundary and the reporter
    is notified exactly once per call.
    """

    operation: str = "Operation"

    def __init__(self, reporter: Optional[JobOutcomeReporter] = None):
        """Initialize orchestrator.

        Args:
            reporter: Receives the final message of each call. Defaults to
                logging through the package logger.
        """
        self.reporter = reporter or LoggingOutcomeReporter()

    async def _run(self, work: Awaitable[OperationOutcome], failure_label: str) -> OperationOutcome:
        try:
            outcome = await work
        except SnapshotError as e:
            logger.warning(f"{self.operation} call failed ({e.kind.value}): {e.message}")
            outcome = OperationOutcome(
                success=False,
                error_kind=e.kind,
                message=" ".join(part for part in (failure_label, e.message) if part),
                errors=getattr(e, "errors", ()),
            )
        except Exception as e:
            # Anything a client lets through unwrapped is treated as a transport failure
            logger.error(f"{self.operation} call failed unexpectedly: {type(e).__name__}: {e}")
            outcome = OperationOutcome(
                success=False,
                error_kind=ErrorKind.TRANSPORT_FAILURE,
                message=f"{failure_label} {type(e).__name__}: {e}",
            )
        report_outcome(self.reporter, outcome)
        return outcome

    @staticmethod
    def _reject_status_request(request_id: Optional[str]) -> None:
        if request_id is not None:
            raise InvalidArgumentError(
                "A status query cannot be combined with a new request; query the request id on its own."
            )

    async def query_status(
        self,
        request_id: Optional[str],
        client: BaseClusterAdminClient,
    ) -> OperationOutcome:
        """Query the state of an async request once.

        Polling until a terminal state, and any timeout, is up to the caller.

        Args:
            request_id: Id returned by an async issuance
            client: Cluster admin client

        Returns:
            OperationOutcome carrying the translated ``AsyncJobStatus`` in ``job``
        """
        return await self._run(
            self._query_status(request_id, client),
            failure_label=f"{self.operation} status failed.",
        )

    async def _query_status(
        self,
        request_id: Optional[str],
        client: BaseClusterAdminClient,
    ) -> OperationOutcome:
        if not request_id or not request_id.strip():
            raise InvalidArgumentError("A request id is required to query status.")

        response = await client.query_async_status(request_id)
        job = translate_status(request_id, response)
        message = f"{self.operation} status for request Id [{request_id}] is [{job.state.value}]."
        logger.info(message)

        if job.state == RequestState.FAILED:
            return OperationOutcome(
                success=False,
                error_kind=ErrorKind.CLUSTER_OPERATION_FAILED,
                message=f"{message} {self.operation} status failed.",
                errors=job.errors,
                job=job,
            )
        if job.state == RequestState.NOT_FOUND:
            return OperationOutcome(
                success=False,
                error_kind=ErrorKind.CLUSTER_OPERATION_FAILED,
                message=f"{message} The request id is unknown or has expired.",
                errors=job.errors,
                job=job,
            )
        return OperationOutcome(success=True, message=message, errors=job.errors, job=job)
