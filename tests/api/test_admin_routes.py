import pytest
from unittest.mock import patch, MagicMock
from fastapi.testclient import TestClient
from betpay.main import app
from betpay.api.admin_routes import require_admin
from betpay.core.confirmation import open_gate
from betpay.settings import settings

client = TestClient(app)

@pytest.fixture
def skip_auth():
    app.dependency_overrides[require_admin] = lambda: None
    yield
    app.dependency_overrides = {}

@patch("betpay.api.admin_routes.load_wizard")
def test_admin_wizard_snapshot(mock_load, skip_auth, session, fill):
    fill(session)
    open_gate(session)
    session.submissionAttempts = 2
    session.lastError = "Erreur lors de la création du dépôt"
    session.toast("error", session.lastError)
    mock_load.return_value = session

    resp = client.get("/admin/wizard/wiz-1")
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"] == "CONFIRMING"
    assert data["submissionAttempts"] == 2
    assert data["carrier"] == "moov"
    assert data["completed"] == {"platform": True, "accountId": True, "network": True, "phone": True, "amount": True}
    assert data["pendingToasts"] == 1
    # support reads never consume the user's toasts
    assert len(session.toasts) == 1

@patch("betpay.api.admin_routes.load_wizard")
def test_admin_wizard_missing(mock_load, skip_auth):
    mock_load.return_value = None
    assert client.get("/admin/wizard/gone").status_code == 404

@patch("betpay.observability.metrics.get_redis")
def test_admin_metrics(mock_get_redis, skip_auth):
    mr = MagicMock()
    mock_get_redis.return_value = mr

    def get_side_effect(k):
        return {
            "metrics:submission:attempts": "10",
            "metrics:submission:succeeded": "8",
            "metrics:submission:failed": "2",
            "metrics:channel:ussd": "5",
            "metrics:channel:hosted_link": "3",
        }.get(k)
    mr.get.side_effect = get_side_effect

    def lrange_side_effect(k, start, end):
        if k == "metrics:submission:latencies":
            return ["100", "200", "300", "400"]
        if k == "metrics:submission:failed_recent":
            return ["wiz-9", "wiz-7"]
        return []
    mr.lrange.side_effect = lrange_side_effect

    resp = client.get("/admin/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["submission_attempts"] == 10
    assert data["submission_success_rate"] == 80.0
    assert data["p50_submission_latency"] == 0.2
    assert data["p95_submission_latency"] == 0.4
    assert data["channels"] == {"hosted_link": 3, "ussd": 5, "none": 0, "withdrawal": 0}
    assert data["recent_failed_submissions"] == ["wiz-9", "wiz-7"]

def test_admin_rbac():
    with patch.object(settings, "ADMIN_RBAC_ENABLED", True), \
         patch.object(settings, "ADMIN_API_KEY", "admin-secret"):
        assert client.get("/admin/metrics").status_code == 403
        assert client.get("/admin/metrics", headers={"x-admin-key": "wrong"}).status_code == 403

    with patch.object(settings, "ADMIN_RBAC_ENABLED", True), \
         patch.object(settings, "ADMIN_API_KEY", ""):
        assert client.get("/admin/metrics", headers={"x-admin-key": ""}).status_code == 403
