from __future__ import annotations
import pytest
from fastapi.testclient import TestClient

from latam_jobs.api.deps import get_orchestrator, require_user
from latam_jobs.core.config import settings
from latam_jobs.db.database import get_db
from latam_jobs.main import app
from latam_jobs.models.run_record import RunRecord
from latam_jobs.services.ingest_service import SourceRunOrchestrator
from latam_jobs.utils.auth import create_access_token, verify_access_token

PREFIX = "/api/v1"


class RecordingFetcher:
    def __init__(self, postings):
        self.postings = postings
        self.calls = []

    def fetch(self, source, deadline):
        self.calls.append(source.name)
        return self.postings


@pytest.fixture
def fetcher(ashby_postings):
    return RecordingFetcher(ashby_postings)


@pytest.fixture
def client(session_factory, fetcher):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    orchestrator = SourceRunOrchestrator(session_factory=session_factory, fetcher_factory=lambda _provider: fetcher)
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[require_user] = lambda: "tester"
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    # Not used as a context manager, so the startup hook never touches the real database.
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_rerun_disabled_source_is_rejected(client, fetcher, db, add_source):
    source_id = add_source("Paused", is_enabled=False)

    resp = client.post(f"{PREFIX}/sources/{source_id}/rerun")

    assert resp.status_code == 400
    assert fetcher.calls == []
    assert db.query(RunRecord).count() == 0


def test_rerun_unknown_source_is_404(client):
    assert client.post(f"{PREFIX}/sources/404/rerun").status_code == 404


def test_rerun_is_acknowledged_and_runs_in_background(client, fetcher, db, add_source):
    source_id = add_source("Acme")

    resp = client.post(f"{PREFIX}/sources/{source_id}/rerun")

    assert resp.status_code == 202
    assert resp.json() == {"success": True, "message": "re-run dispatched for source Acme", "source_id": source_id}
    # TestClient finishes background tasks before returning.
    assert fetcher.calls == ["Acme"]
    record = db.query(RunRecord).one()
    assert record.status == "SUCCESS"
    assert record.jobs_processed == 3


def test_toggle_flips_enabled(client, add_source):
    source_id = add_source("Acme")

    first = client.patch(f"{PREFIX}/sources/{source_id}/toggle")
    second = client.patch(f"{PREFIX}/sources/{source_id}/toggle")

    assert first.status_code == 200
    assert first.json()["is_enabled"] is False
    assert second.json()["is_enabled"] is True
    assert client.patch(f"{PREFIX}/sources/999/toggle").status_code == 404


def test_sources_health_listing(client, add_source):
    source_id = add_source("Acme")
    add_source("Beta")
    client.post(f"{PREFIX}/sources/{source_id}/rerun")

    resp = client.get(f"{PREFIX}/sources/health")

    assert resp.status_code == 200
    rows = {r["name"]: r for r in resp.json()}
    assert rows["Acme"]["health_status"] == "Healthy"
    assert rows["Acme"]["latest_run"]["jobs_found"] == 4
    assert rows["Beta"]["health_status"] == "Unknown"
    assert rows["Beta"]["latest_run"] is None


def test_jobs_listing_filters_by_region(client, add_source):
    source_id = add_source("Acme")
    client.post(f"{PREFIX}/sources/{source_id}/rerun")

    resp = client.get(f"{PREFIX}/jobs", params={"hiring_region": "LATAM"})

    assert resp.status_code == 200
    assert [j["provider_native_id"] for j in resp.json()] == ["a-2"]


def test_endpoints_require_a_token():
    assert TestClient(app).get(f"{PREFIX}/sources").status_code == 401
    assert TestClient(app).post(f"{PREFIX}/sources/1/rerun").status_code == 401


def test_access_token_round_trip():
    token = create_access_token("admin")

    assert verify_access_token(token) == "admin"
    assert verify_access_token(token + "x") is None


def test_login_issues_token_for_admin(monkeypatch):
    monkeypatch.setattr(settings, "auth_username", "admin")
    monkeypatch.setattr(settings, "auth_password", "s3cret")
    client = TestClient(app)

    ok = client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "s3cret"})
    bad = client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "nope"})

    assert ok.status_code == 200
    assert verify_access_token(ok.json()["access_token"]) == "admin"
    assert bad.status_code == 401
