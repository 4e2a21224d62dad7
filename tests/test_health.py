# =============================================================================
# tests/test_health.py - Health Endpoint Tests
# =============================================================================

from lib.memory_store import InMemoryStore
from lib.store import StoreError


class UnreachableStore(InMemoryStore):
    def ping(self):
        raise StoreError("connection refused")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"


def test_ready(client):
    body = client.get("/health/ready").json()

    assert body["status"] == "ready"
    assert body["checks"]["database"] == "healthy"


def test_ready_degraded_when_store_down(app, client):
    app.state.store = UnreachableStore()

    response = client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["status"] == "degraded"
    assert body["checks"]["database"].startswith("unhealthy: connection refused")


def test_live(client):
    body = client.get("/health/live").json()

    assert body == {"success": True, "status": "alive", "timestamp": body["timestamp"]}


def test_root(client):
    body = client.get("/").json()

    assert body["success"] is True
    assert body["docs"] == "/docs"
