from types import SimpleNamespace

from sukejuru.apis.meta.status import StatusCheck
from sukejuru.config import app_cfg


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "OK"}


def test_status_all_services_up(client, upstream):
    response = client.get("/api/status")

    assert response.status_code == 200
    assert response.json() == {"services": {
        "database": {"status": "OK"},
        "openai": {"status": "OK"},
        "supabase-auth": {"status": "OK"},
        "google-oauth": {"status": "OK"},
    }}
    [health] = upstream.calls_to("https://baas.test/auth/v1/health")
    assert health.headers["apikey"] == "anon-key"


def test_status_without_openai_key(client, monkeypatch):
    monkeypatch.setattr(app_cfg, "OPENAI_API_KEY", "")

    services = client.get("/api/status").json()["services"]

    assert services["openai"] == {"status": "Disabled"}


def test_status_is_unavailable_when_required_service_down(client, upstream, monkeypatch):
    monkeypatch.setattr(client.app.state, "llm_client", None)

    response = client.get("/api/status")

    assert response.status_code == 503
    assert response.json()["services"]["openai"] == {"status": "Down"}


def test_optional_service_down_keeps_status_ok(client, monkeypatch):
    monkeypatch.setattr(app_cfg, "GOOGLE_CLIENT_SECRET", "")

    response = client.get("/api/status")

    assert response.status_code == 200
    assert response.json()["services"]["google-oauth"] == {"status": "Down"}


async def test_failing_check_reports_down(monkeypatch):
    async def broken() -> dict:
        raise RuntimeError("boom")

    monkeypatch.setitem(StatusCheck._checks, "broken", broken)

    results = await StatusCheck.run(SimpleNamespace())

    assert results["broken"] == {"status": "Down"}
