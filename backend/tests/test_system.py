import pytest
from fastapi.testclient import TestClient
from gridrr_admin.config import settings
from gridrr_admin.main import app
from gridrr_admin.services.storage import check_bucket, get_storage

sync_client = TestClient(app)


@pytest.mark.asyncio
async def test_health_reports_database(client):
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert data["env"] == "test"


@pytest.mark.asyncio
async def test_health_is_not_guarded(client):
    # no session cookie, still reachable
    r = await client.get("/health", headers={"X-Request-ID": "req-42"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "req-42"
    assert r.json()["request_id"] == "req-42"


def test_generated_request_id():
    r = sync_client.get("/version")
    assert len(r.headers["X-Request-ID"]) == 36


def test_version():
    r = sync_client.get("/version")
    assert r.status_code == 200
    assert r.json() == {
        "name": settings.app_name,
        "display_name": "Gridrr Admin",
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }


@pytest.fixture
def bad_storage_endpoint(monkeypatch):
    # minio refuses endpoints that carry a path
    monkeypatch.setattr(settings, "storage_endpoint", "http://minio:9000/not/allowed")
    get_storage.cache_clear()
    yield
    get_storage.cache_clear()


def test_bucket_check_logs_misconfigured_endpoint(bad_storage_endpoint):
    assert check_bucket() is False


def test_startup_survives_misconfigured_storage(bad_storage_endpoint):
    with TestClient(app) as c:
        assert c.get("/version").status_code == 200
        task = app.state.bucket_check
    assert task.done()
