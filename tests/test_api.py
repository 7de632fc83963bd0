from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.api.deps import require_auth
from app.db.session import get_db
from app.main import app
from app.utils.timestamps import utcnow, isoformat_utc

SCANNER_HEADERS = {"X-Scanner-Key": "test-scanner-key"}


@pytest.fixture()
def user():
    return {"user_id": 1, "username": "admin", "role_level": 100, "roles": []}


@pytest.fixture()
def client(db, user):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[require_auth] = lambda: user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _create_event_now(client, ev_id="ev1", quota=0):
    now = utcnow()
    res = client.post("/api/v1/events/", json={
        "ev_id": ev_id,
        "ev_name": "Live Event",
        "ev_quota": quota,
        "sessions": [{
            "es_start_time": isoformat_utc(now - timedelta(hours=1)),
            "es_end_time": isoformat_utc(now + timedelta(hours=1)),
        }],
    })
    assert res.status_code == 201
    return res.json()["data"]


def _create_student(client, st_id="alice", badge="B001"):
    res = client.post("/api/v1/students/", json={
        "st_id": st_id,
        "st_badge_id": badge,
        "st_first_name": st_id.title(),
    })
    assert res.status_code == 201
    return res.json()["data"]


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["name"] == "Event Attendance Service"


def test_scan_requires_scanner_key(client):
    res = client.post("/api/v1/scans/", json={"uid": "B001", "timestamp": isoformat_utc(utcnow())})
    assert res.status_code == 401

    res = client.post(
        "/api/v1/scans/",
        json={"uid": "B001", "timestamp": isoformat_utc(utcnow())},
        headers={"X-Scanner-Key": "wrong"},
    )
    assert res.status_code == 401


def test_scan_to_attendance_flow(client):
    event = _create_event_now(client, quota=10)
    session_id = event["sessions"][0]["es_id"]
    _create_student(client)
    res = client.post("/api/v1/students/alice/enrollments/ev1")
    assert res.status_code == 201
    assert res.json()["data"]["enrolled_event_ids"] == ["ev1"]

    res = client.post("/api/v1/maintenance/refresh-active-sessions")
    assert res.status_code == 200
    assert res.json()["data"]["active_session_count"] == 1

    res = client.get("/api/v1/attendance/active-sessions")
    assert res.status_code == 200
    assert session_id in res.json()["data"]["sessions"]["ev1"]

    res = client.post(
        "/api/v1/scans/",
        json={"uid": "B001", "timestamp": isoformat_utc(utcnow())},
        headers=SCANNER_HEADERS,
    )
    assert res.status_code == 200
    assert res.json()["data"]["outcome"] == "checked_in"

    res = client.get(f"/api/v1/attendance/ev1/{session_id}/alice")
    assert res.status_code == 200
    record = res.json()["data"]
    assert record["ar_check_in_time"] is not None
    assert record["ar_status"] == "late"

    res = client.get(f"/api/v1/attendance/ev1/{session_id}")
    assert res.status_code == 200
    assert [s["st_id"] for s in res.json()["data"]["late"]] == ["alice"]

    res = client.get("/api/v1/scans/", params={"badge_id": "B001"})
    assert res.status_code == 200
    assert res.json()["total"] == 1

    res = client.get("/api/v1/events/ev1")
    assert res.json()["data"]["ev_quota"] == 9


def test_scan_outcomes_are_not_errors(client):
    res = client.post("/api/v1/scans/", json={"uid": "UNKNOWN"}, headers=SCANNER_HEADERS)
    assert res.status_code == 200
    assert res.json()["data"]["outcome"] == "rejected"

    res = client.post(
        "/api/v1/scans/",
        json={"uid": "UNKNOWN", "timestamp": isoformat_utc(utcnow())},
        headers=SCANNER_HEADERS,
    )
    assert res.json()["data"]["outcome"] == "unknown_badge"


def test_session_change_conflicts_after_attendance(client):
    _create_event_now(client)
    _create_student(client)
    client.post("/api/v1/students/alice/enrollments/ev1")
    client.post("/api/v1/maintenance/refresh-active-sessions")
    client.post(
        "/api/v1/scans/",
        json={"uid": "B001", "timestamp": isoformat_utc(utcnow())},
        headers=SCANNER_HEADERS,
    )

    now = utcnow()
    res = client.put("/api/v1/events/ev1", json={"sessions": [{
        "es_start_time": isoformat_utc(now),
        "es_end_time": isoformat_utc(now + timedelta(hours=2)),
    }]})

    assert res.status_code == 409
    assert res.json()["success"] is False


def test_event_crud(client):
    _create_event_now(client)

    res = client.get("/api/v1/events/", params={"search": "live"})
    assert res.status_code == 200
    assert res.json()["total"] == 1

    res = client.put("/api/v1/events/ev1", json={"ev_name": "Renamed"})
    assert res.json()["data"]["ev_name"] == "Renamed"

    assert client.delete("/api/v1/events/ev1").status_code == 204
    assert client.get("/api/v1/events/ev1").status_code == 404


def test_invalid_session_window_is_422(client):
    now = utcnow()
    res = client.post("/api/v1/events/", json={
        "ev_name": "Broken",
        "sessions": [{"es_start_time": isoformat_utc(now), "es_end_time": isoformat_utc(now)}],
    })
    assert res.status_code == 422


def test_duplicate_badge_is_409(client):
    _create_student(client)

    res = client.post("/api/v1/students/", json={"st_badge_id": "B001", "st_first_name": "Eve"})

    assert res.status_code == 409


def test_student_lifecycle(client):
    _create_event_now(client)
    _create_student(client)
    client.post("/api/v1/students/alice/enrollments/ev1")

    res = client.put("/api/v1/students/alice", json={"st_email": "alice@example.com"})
    assert res.json()["data"]["st_email"] == "alice@example.com"

    res = client.delete("/api/v1/students/alice/enrollments/ev1")
    assert res.json()["data"]["enrolled_event_ids"] == []

    res = client.get("/api/v1/students/")
    assert res.json()["total"] == 1

    assert client.delete("/api/v1/students/alice").status_code == 204
    assert client.get("/api/v1/students/alice").status_code == 404


def test_maintenance_jobs(client):
    res = client.post("/api/v1/maintenance/sweep-absences")
    assert res.status_code == 200
    assert res.json()["data"]["marked_absent"] == 0

    res = client.post("/api/v1/maintenance/replay-scans", json={"limit": 10})
    assert res.status_code == 200
    assert res.json()["data"]["processed"] == 0

    res = client.post("/api/v1/maintenance/cleanup-scan-ledger", params={"days_old": 3})
    assert res.status_code == 200
    assert res.json()["data"]["deleted_count"] == 0

    res = client.get("/api/v1/attendance/analysis/weekly")
    assert res.status_code == 200
    assert len(res.json()["data"]["days"]) == 7


def test_admin_endpoints_require_role_level(client, user):
    user["role_level"] = 1

    assert client.get("/api/v1/events/").status_code == 200
    assert client.get("/api/v1/students/").status_code == 403
    assert client.post("/api/v1/maintenance/sweep-absences").status_code == 403
    assert client.get("/api/v1/attendance/analysis/weekly").status_code == 403
