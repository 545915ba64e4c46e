import pytest
from fastapi.testclient import TestClient

from select_start import config
from select_start.main import app
from select_start.services.cache import ReportType

READ_KEY = "read-key"
ADMIN_KEY = "admin-key"


@pytest.fixture
def client(service, monkeypatch):
    monkeypatch.setattr(config, "API_KEY", READ_KEY)
    monkeypatch.setattr(config, "ADMIN_API_KEY", ADMIN_KEY)
    app.state.service = service
    # No context manager: startup would try to reach MongoDB
    yield TestClient(app)
    del app.state.service


def read(client, path, key=READ_KEY, **params):
    headers = {"x-api-key": key} if key is not None else {}
    return client.get(path, headers=headers, params=params)


def force_update(client, body, key=ADMIN_KEY):
    headers = {"x-api-key": key} if key is not None else {}
    return client.post("/api/admin/force-update", headers=headers, json=body)


def test_health_needs_no_key_and_touches_nothing(client, store):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert "timestamp" in r.json()
    assert sum(store.calls.values()) == 0


@pytest.mark.parametrize("path", ["/api/leaderboard/monthly", "/api/leaderboard/yearly", "/api/nominations"])
@pytest.mark.parametrize("key", [None, "wrong", ADMIN_KEY])
def test_reads_need_read_key(client, path, key):
    r = read(client, path, key=key)
    assert r.status_code == 401


def test_reads_rejected_when_key_not_configured(client, monkeypatch):
    monkeypatch.setattr(config, "API_KEY", None)
    assert read(client, "/api/nominations", key="").status_code == 401


def test_monthly_leaderboard(client):
    r = read(client, "/api/leaderboard/monthly")
    assert r.status_code == 200
    body = r.json()
    assert [e["username"] for e in body["leaderboard"]] == ["alice", "carol"]
    assert body["leaderboard"][0]["rank"] == 1
    assert body["challenge"]["endDate"] == "April 30th, 2025 at 11:59 PM"
    assert body["lastUpdated"] == "2025-04-10T12:00:00.000Z"


def test_monthly_refresh_flags_recompute(client, store):
    read(client, "/api/leaderboard/monthly")
    read(client, "/api/leaderboard/monthly")
    assert store.calls["users"] == 1

    read(client, "/api/leaderboard/monthly", refresh="true")
    read(client, "/api/leaderboard/monthly", forceRefresh="true")
    assert store.calls["users"] == 3


def test_monthly_without_challenge_is_404(client, store):
    store.challenges = []
    r = read(client, "/api/leaderboard/monthly")
    assert r.status_code == 404
    assert r.json()["detail"] == "No current challenge found"


def test_store_unavailable_is_503(client, store):
    store.unavailable = True
    assert read(client, "/api/nominations").status_code == 503


def test_yearly_with_year(client):
    r = read(client, "/api/leaderboard/yearly", year=2024)
    assert r.status_code == 200
    assert r.json()["year"] == 2024
    assert r.json()["leaderboard"] == []


def test_yearly_bad_year(client):
    assert read(client, "/api/leaderboard/yearly", year=1066).status_code == 400


def test_nominations(client):
    r = read(client, "/api/nominations")
    assert r.status_code == 200
    assert r.json()["gamesList"][0]["nominatedBy"] == ["alice", "carol"]


@pytest.mark.parametrize("key", [None, "wrong", READ_KEY])
def test_admin_needs_admin_key(client, key):
    assert force_update(client, {"target": "all"}, key=key).status_code == 403


@pytest.mark.parametrize("body", [{"target": "monthly"}, {"target": ""}, {}, None])
def test_admin_rejects_bad_target(client, body):
    r = force_update(client, body)
    assert r.status_code == 400


def test_admin_clears_named_entries(client, service):
    for path in ("/api/leaderboard/monthly", "/api/leaderboard/yearly", "/api/nominations"):
        read(client, path)

    r = force_update(client, {"target": "nominations"})
    assert r.status_code == 200
    assert r.json()["status"] == "success"
    assert r.json()["cleared"] == ["nominations"]
    assert service.cache.state(ReportType.NOMINATIONS) == "empty"
    assert service.cache.state(ReportType.MONTHLY) == "fresh"

    r = force_update(client, {"target": "all"})
    assert r.json()["cleared"] == ["monthly", "yearly", "nominations"]
    assert all(service.cache.state(t) == "empty" for t in ReportType)

    # clearing again is fine
    assert force_update(client, {"target": "leaderboards"}).status_code == 200


def test_read_after_admin_invalidation_hits_store(client, store):
    read(client, "/api/leaderboard/monthly")
    force_update(client, {"target": "leaderboards"})
    read(client, "/api/leaderboard/monthly")
    assert store.calls["challenge"] == 2


def test_admin_key_checked_before_body(client):
    assert force_update(client, {"target": 5}, key=None).status_code == 403
    assert force_update(client, {"target": 5}, key=READ_KEY).status_code == 403
    # with the admin key the malformed body is reported
    assert force_update(client, {"target": 5}).status_code == 422


def test_read_key_checked_before_query(client):
    assert read(client, "/api/leaderboard/yearly", key=None, year="abc").status_code == 401
    assert read(client, "/api/leaderboard/monthly", key="wrong", refresh="maybe").status_code == 401
    assert read(client, "/api/leaderboard/yearly", year="abc").status_code == 422
