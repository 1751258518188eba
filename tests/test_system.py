from sqlalchemy.exc import OperationalError

from projectdesk.core.version import APP_VERSION


def test_health_reports_database_time(client):
    response = client.get("/system/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["healthy"] is True
    assert body["data"]["timestamp"]


def test_health_returns_503_when_database_is_down(client, db_session, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise OperationalError("SELECT CURRENT_TIMESTAMP", {}, Exception("connection refused"))

    monkeypatch.setattr(db_session, "execute", _fail)

    response = client.get("/system/health")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["data"]["healthy"] is False
    assert "connection refused" not in response.text


def test_version_payload(client):
    response = client.get("/system/version")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    payload = body["data"]
    assert payload["version"] == APP_VERSION
    assert set(payload) == {"version", "gitSha", "buildTime", "env"}


def test_responses_carry_request_id_and_security_headers(client):
    response = client.get("/system/version", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
