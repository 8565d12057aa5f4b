"""Tests for the restore orchestrator."""

from unittest.mock import AsyncMock

import pytest

from nano_snapshot.base import BaseClusterAdminClient
from nano_snapshot.errors import ClusterOperationFailedError, ErrorKind, ProtocolError, TransportError
from nano_snapshot.orchestrators import RestoreOrchestrator
from nano_snapshot.schemas import AdminResponse, OperationMode, RequestState, RestoreSpec


def make_client(exists=False, restore=None, delete=None, optimize=None):
    """Spec'd async mock client with healthy defaults."""
    client = AsyncMock(spec=BaseClusterAdminClient)
    client.collection_exists.return_value = exists
    client.delete_collection.return_value = delete or AdminResponse()
    client.restore_collection.return_value = restore or AdminResponse()
    client.restore_collection_async.return_value = "req-1"
    client.optimize_collection.return_value = optimize or AdminResponse()
    return client


@pytest.mark.asyncio
async def test_sync_restore_of_new_collection(reporter):
    client = make_client()
    orchestrator = RestoreOrchestrator(reporter)

    outcome = await orchestrator.restore(RestoreSpec(collection="catalog", location="/b", backup_name="nightly"), client)

    assert outcome.success
    assert outcome.message == "Restore complete."
    assert outcome.request_id is None
    assert outcome.errors == ()
    client.delete_collection.assert_not_awaited()
    client.restore_collection.assert_awaited_once_with("catalog", "/b", "nightly")
    client.optimize_collection.assert_awaited_once_with("catalog")
    assert reporter.successes == ["Restore complete."]
    assert reporter.calls == 1


@pytest.mark.asyncio
async def test_async_restore_then_poll_until_completed(memory_client, reporter):
    """Scenario: async restore of a missing collection completes after polling."""
    memory_client.backups["/backups"]["snapshot.20240101000000000"] = {"collection": "books"}
    orchestrator = RestoreOrchestrator(reporter)

    outcome = await orchestrator.restore(
        RestoreSpec(collection="catalog", location="/backups", mode=OperationMode.ASYNC),
        memory_client,
    )
    assert outcome.success
    assert outcome.request_id
    assert outcome.message == f"Restore request Id: {outcome.request_id}"

    states = []
    for _ in range(5):
        status = await orchestrator.query_status(outcome.request_id, memory_client)
        states.append(status.job.state)
        if status.job.is_terminal:
            break

    assert states == [RequestState.SUBMITTED, RequestState.RUNNING, RequestState.COMPLETED]
    assert status.success
    assert status.message == f"Restore status for request Id [{outcome.request_id}] is [completed]."
    assert "catalog" in memory_client.collections


@pytest.mark.asyncio
async def test_sync_restore_failure_carries_errors(reporter):
    """Scenario: the cluster reports a structured failure."""
    client = make_client(restore=AdminResponse(status=400, errors=[("Collection not found", "bad")]))

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="bad"), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.CLUSTER_OPERATION_FAILED
    assert outcome.errors == (("Collection not found", "bad"),)
    assert outcome.message.startswith("Restore failed.")
    client.optimize_collection.assert_not_awaited()
    assert reporter.successes == []
    assert reporter.errors == [f"{outcome.message}\n1. Error Name: Collection not found; Error Value: bad"]


@pytest.mark.asyncio
async def test_non_zero_status_without_failure_list(reporter):
    client = make_client(restore=AdminResponse(status=500))

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert not outcome.success
    assert outcome.errors == ()
    assert outcome.message == "Restore failed."


@pytest.mark.asyncio
async def test_optimize_transport_failure_is_a_warning(reporter):
    """Scenario: restore succeeds but optimize cannot reach the cluster."""
    client = make_client()
    client.optimize_collection.side_effect = TransportError("connection reset")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert outcome.success
    assert outcome.message.startswith("Restore complete. Warning:")
    assert "catalog" in outcome.message
    assert "connection reset" in outcome.message
    assert reporter.calls == 1


@pytest.mark.asyncio
async def test_optimize_non_success_is_a_warning(reporter):
    client = make_client(optimize=AdminResponse(status=500, message="merge failed"))

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert outcome.success
    assert "unable to optimize collection [catalog]" in outcome.message
    assert "merge failed" in outcome.message


@pytest.mark.asyncio
async def test_optimize_rejection_is_a_warning(reporter):
    client = make_client()
    client.optimize_collection.side_effect = ClusterOperationFailedError("optimize rejected")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert outcome.success
    assert outcome.error_kind is None
    assert outcome.message.startswith("Restore complete. Warning:")
    assert "optimize rejected" in outcome.message
    assert reporter.errors == []


@pytest.mark.asyncio
async def test_optimize_unexpected_error_is_a_warning(reporter):
    client = make_client()
    client.optimize_collection.side_effect = ConnectionResetError("reset by peer")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert outcome.success
    assert "ConnectionResetError: reset by peer" in outcome.message
    assert reporter.calls == 1


@pytest.mark.asyncio
async def test_unexpected_client_error_becomes_transport_failure(reporter):
    client = make_client()
    client.collection_exists.side_effect = ConnectionResetError("reset by peer")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="catalog"), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.TRANSPORT_FAILURE
    assert outcome.message == "Restore failed. ConnectionResetError: reset by peer"
    assert reporter.calls == 1


@pytest.mark.asyncio
async def test_existing_collection_without_force(reporter):
    client = make_client(exists=True)

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="books"), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.PRECONDITION_FAILED
    assert "collection already exists" in outcome.message
    client.delete_collection.assert_not_awaited()
    client.restore_collection.assert_not_awaited()
    client.restore_collection_async.assert_not_awaited()


@pytest.mark.asyncio
async def test_force_deletes_before_restore(memory_client, reporter):
    memory_client.backups["/backups"]["snapshot.20240101000000000"] = {"collection": "books"}

    outcome = await RestoreOrchestrator(reporter).restore(
        RestoreSpec(collection="books", location="/backups", force=True),
        memory_client,
    )

    assert outcome.success
    assert outcome.message == "Restore complete."
    assert memory_client.optimized == ["books"]


@pytest.mark.asyncio
async def test_force_deletes_then_restores_once(reporter):
    client = make_client(exists=True)

    outcome = await RestoreOrchestrator(reporter).restore(
        RestoreSpec(collection="books", backup_name="nightly", force=True), client
    )

    assert outcome.success
    client.delete_collection.assert_awaited_once_with("books")
    client.restore_collection.assert_awaited_once_with("books", None, "nightly")
    called = [c[0] for c in client.mock_calls]
    assert called == ["collection_exists", "delete_collection", "restore_collection", "optimize_collection"]


@pytest.mark.asyncio
async def test_force_delete_failure(reporter):
    client = make_client(exists=True, delete=AdminResponse(status=500, errors={"node1": "locked"}))

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="books", force=True), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.CLUSTER_OPERATION_FAILED
    assert "unable to delete existing collection" in outcome.message
    assert outcome.errors == (("node1", "locked"),)
    client.restore_collection.assert_not_awaited()


@pytest.mark.asyncio
async def test_force_delete_transport_failure(reporter):
    client = make_client(exists=True)
    client.delete_collection.side_effect = TransportError("timed out")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="books", force=True), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.TRANSPORT_FAILURE
    assert "unable to delete existing collection" in outcome.message
    assert "timed out" in outcome.message


@pytest.mark.asyncio
async def test_restore_with_request_id_is_invalid(reporter):
    client = make_client()

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="books"), client, request_id="req-1")

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.INVALID_ARGUMENT
    assert client.mock_calls == []
    assert reporter.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("request_id", [None, "", "   "])
async def test_status_without_request_id_is_invalid(request_id, reporter):
    client = make_client()

    outcome = await RestoreOrchestrator(reporter).query_status(request_id, client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.INVALID_ARGUMENT
    assert client.mock_calls == []


@pytest.mark.asyncio
async def test_transport_failure_on_existence_check(reporter):
    client = make_client()
    client.collection_exists.side_effect = TransportError("Unable to reach cluster")

    outcome = await RestoreOrchestrator(reporter).restore(RestoreSpec(collection="books"), client)

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.TRANSPORT_FAILURE
    assert "Unable to reach cluster" in outcome.message
    assert reporter.calls == 1


@pytest.mark.asyncio
async def test_async_submission_protocol_error(reporter):
    client = make_client()
    client.restore_collection_async.side_effect = ProtocolError("Unexpected response")

    outcome = await RestoreOrchestrator(reporter).restore(
        RestoreSpec(collection="books", mode=OperationMode.ASYNC), client
    )

    assert not outcome.success
    assert outcome.error_kind == ErrorKind.TRANSPORT_FAILURE
    assert outcome.request_id is None


@pytest.mark.asyncio
async def test_failed_status_carries_errors(memory_client, reporter):
    memory_client.backups["/backups"]["snapshot.20240101000000000"] = {"collection": "books"}
    memory_client.fail_next("restore", [("shard1", "disk full"), ("shard2", "timeout")])
    orchestrator = RestoreOrchestrator(reporter)
    memory_client.polls_to_complete = 1

    issued = await orchestrator.restore(
        RestoreSpec(collection="catalog", location="/backups", mode=OperationMode.ASYNC),
        memory_client,
    )
    status = await orchestrator.query_status(issued.request_id, memory_client)

    assert not status.success
    assert status.error_kind == ErrorKind.CLUSTER_OPERATION_FAILED
    assert status.job.state == RequestState.FAILED
    assert status.errors == (("shard1", "disk full"), ("shard2", "timeout"))
    assert status.message.endswith("Restore status failed.")
    assert reporter.errors[-1].endswith(
        "1. Error Name: shard1; Error Value: disk full\n2. Error Name: shard2; Error Value: timeout"
    )


@pytest.mark.asyncio
async def test_terminal_status_is_stable(memory_client):
    memory_client.backups["/backups"]["snapshot.20240101000000000"] = {"collection": "books"}
    memory_client.polls_to_complete = 1
    orchestrator = RestoreOrchestrator()

    issued = await orchestrator.restore(
        RestoreSpec(collection="catalog", location="/backups", mode=OperationMode.ASYNC),
        memory_client,
    )
    first = await orchestrator.query_status(issued.request_id, memory_client)
    second = await orchestrator.query_status(issued.request_id, memory_client)

    assert first.job.state == second.job.state == RequestState.COMPLETED


@pytest.mark.asyncio
async def test_unknown_request_id(memory_client, reporter):
    outcome = await RestoreOrchestrator(reporter).query_status("does-not-exist", memory_client)

    assert not outcome.success
    assert outcome.job.state == RequestState.NOT_FOUND
    assert "unknown or has expired" in outcome.message
