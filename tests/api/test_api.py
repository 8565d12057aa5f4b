"""Tests for the FastAPI REST API."""

import json

import pytest
from fastapi.testclient import TestClient

from nano_snapshot._cluster.memory import InMemoryClusterAdminClient
from nano_snapshot.api.app import create_app
from nano_snapshot.api.config import settings
from nano_snapshot.config import ClusterConfig
from nano_snapshot.errors import TransportError


@pytest.fixture
def cluster():
    return InMemoryClusterAdminClient(ClusterConfig(backend="memory", backup_location="/backups"), collections=["books"])


@pytest.fixture
def mock_app(cluster):
    """Create test FastAPI app with an in-memory cluster and no Redis."""
    app = create_app()
    app.state.cluster_client = cluster
    app.state.redis_client = None
    return app


@pytest.fixture
def client(mock_app):
    """Create test client."""
    return TestClient(mock_app)


def parse_events(body: str):
    """Split an SSE body into (event, data) tuples."""
    events = []
    for block in body.strip().split("\n\n"):
        event, data = "message", None
        for line in block.splitlines():
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        events.append((event, data))
    return events


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == settings.api_title


def test_liveness(client):
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_sync_backup(client, cluster):
    response = client.post("/api/v1/backup", json={"collection": "books", "backup_name": "nightly"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Backup complete."
    assert data["request_id"] is None
    assert "nightly" in cluster.backups["/backups"]


def test_backup_failure_maps_to_bad_gateway(client):
    response = client.post("/api/v1/backup", json={"collection": "missing"})

    assert response.status_code == 502
    data = response.json()
    assert data["error_kind"] == "cluster_operation_failed"
    assert data["errors"] == [{"name": "Collection not found", "value": "missing"}]
    assert data["report"] == "Backup failed.\n1. Error Name: Collection not found; Error Value: missing"


def test_blank_collection_rejected(client):
    response = client.post("/api/v1/restore", json={"collection": "  "})
    assert response.status_code == 422


def test_restore_existing_collection_conflict(client, cluster):
    response = client.post("/api/v1/restore", json={"collection": "books"})

    assert response.status_code == 409
    assert response.json()["error_kind"] == "precondition_failed"
    assert "books" in cluster.collections


def test_forced_restore(client, cluster):
    client.post("/api/v1/backup", json={"collection": "books"})

    response = client.post("/api/v1/restore", json={"collection": "books", "force": True})

    assert response.status_code == 200
    assert response.json()["message"] == "Restore complete."
    assert cluster.optimized == ["books"]


def test_async_restore_and_status(client, cluster):
    client.post("/api/v1/backup", json={"collection": "books"})
    cluster.polls_to_complete = 1

    response = client.post("/api/v1/restore", json={"collection": "catalog", "mode": "async"})
    assert response.status_code == 200
    request_id = response.json()["request_id"]
    assert request_id

    response = client.get(f"/api/v1/restore/status/{request_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["job"]["state"] == "completed"
    assert data["job"]["is_terminal"] is True
    assert data["message"] == f"Restore status for request Id [{request_id}] is [completed]."


def test_unknown_status(client):
    response = client.get("/api/v1/backup/status/nope")

    assert response.status_code == 404
    assert response.json()["job"]["state"] == "notfound"


def test_transport_failure_maps_to_unavailable(mock_app, client):
    class Unreachable(InMemoryClusterAdminClient):
        async def backup_collection(self, name, location=None, backup_name=None):
            raise TransportError("Unable to reach cluster at http://solr:8983/solr")

    mock_app.state.cluster_client = Unreachable()

    response = client.post("/api/v1/backup", json={"collection": "books"})

    assert response.status_code == 503
    assert response.json()["error_kind"] == "transport_failure"


def test_jobs_without_redis(client):
    assert client.get("/api/v1/jobs").json() == []
    assert client.get("/api/v1/jobs/abc").status_code == 404


def test_stream_requires_known_operation(client):
    response = client.get("/api/v1/jobs/abc/stream")
    assert response.status_code == 404


def test_stream_until_terminal(client, cluster, monkeypatch):
    monkeypatch.setattr(settings, "stream_poll_interval", 0.01)
    request_id = client.post("/api/v1/backup", json={"collection": "books", "mode": "async"}).json()["request_id"]

    response = client.get(f"/api/v1/jobs/{request_id}/stream", params={"operation": "backup"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    states = [data["job"]["state"] for _, data in parse_events(response.text)]
    assert states == ["submitted", "running", "completed"]


def test_stream_timeout(client, cluster, monkeypatch):
    monkeypatch.setattr(settings, "stream_timeout", 0.0)
    request_id = client.post("/api/v1/backup", json={"collection": "books", "mode": "async"}).json()["request_id"]

    response = client.get(f"/api/v1/jobs/{request_id}/stream", params={"operation": "backup"})

    events = parse_events(response.text)
    assert events[0][1]["job"]["state"] == "submitted"
    assert events[-1][0] == "timeout"
    assert events[-1][1]["request_id"] == request_id


def test_stream_unknown_request(client, monkeypatch):
    monkeypatch.setattr(settings, "stream_poll_interval", 0.01)

    response = client.get("/api/v1/jobs/nope/stream", params={"operation": "restore"})

    (event, data), = parse_events(response.text)
    assert data["job"]["state"] == "notfound"
    assert data["success"] is False
