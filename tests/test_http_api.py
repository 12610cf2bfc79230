from __future__ import annotations

from datetime import date, datetime

import pytest

from tests.fakes import build_world
from training_attendance.main import create_app

IMAGE = "data:image/jpeg;base64,/9j/AAAA"


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    world = build_world(now=datetime(2025, 1, 1, 8, 0))
    app = create_app(world.container)
    return world, app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_login(api):
    _, client = api

    r = client.get("/api/sessions")

    assert r.status_code == 401
    assert r.get_json()["success"] is False


def test_admin_routes_reject_students(api):
    _, client = api
    _login(client, 5, "STUDENT")

    r = client.get("/api/classes")

    assert r.status_code == 403
    assert r.get_json()["error"] == "AuthorizationError"


def test_admin_creates_class_and_session(api):
    world, client = api
    _login(client, 1, "ADMIN")

    r = client.post("/api/classes", json={"name": "Lớp A", "class_type": "Cơ bản", "academic_year": "2025"})
    assert r.status_code == 201
    class_id = r.get_json()["data"]["class_id"]

    r = client.post(
        "/api/sessions",
        json={"class_id": class_id, "date": "2025-01-05", "name": "Ca sáng", "start_time": "09:00", "end_time": "11:00"},
    )
    body = r.get_json()
    assert r.status_code == 201
    assert body["data"]["start_time"] == "09:00"
    assert body["data"]["registration_deadline"] == "2025-01-05T07:00:00"


def test_validation_errors_map_to_400(api):
    world, client = api
    c = world.db.add_class()
    _login(client, 1, "ADMIN")

    r = client.post(
        "/api/sessions",
        json={"class_id": c.class_id, "date": "05/01/2025", "name": "Ca", "start_time": "09:00", "end_time": "11:00"},
    )

    assert r.status_code == 400
    assert r.get_json()["error"] == "ValidationError"


def test_student_check_in_and_face_mismatch(api):
    world, client = api
    c = world.db.add_class()
    s = world.db.add_student()
    session = world.db.add_session(class_id=c.class_id, session_date=date(2025, 1, 1))
    _login(client, s.student_id, "STUDENT")

    r = client.post(
        "/api/attendance/check-in",
        json={"session_id": session.session_id, "image": IMAGE, "lat": 10.0, "lng": 106.0},
    )
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "PRESENT"

    world.matcher.score = 0.5
    r = client.post("/api/attendance/check-in", json={"session_id": session.session_id, "image": IMAGE})
    body = r.get_json()
    assert r.status_code == 422
    assert body["error"] == "FaceMismatchError"
    assert body["score"] == 0.5


def test_registration_deadline_and_conflict_statuses(api):
    world, client = api
    c = world.db.add_class()
    s = world.db.add_student()
    early = world.db.add_session(class_id=c.class_id, session_date=date(2025, 1, 1))
    later = world.db.add_session(class_id=c.class_id, session_date=date(2025, 1, 3))
    _login(client, s.student_id, "STUDENT")

    assert client.post("/api/registrations", json={"session_id": early.session_id}).status_code == 422
    assert client.post("/api/registrations", json={"session_id": later.session_id}).status_code == 201
    assert client.post("/api/registrations", json={"session_id": later.session_id}).status_code == 409


def test_matrix_endpoint_serializes_dates_and_statuses(api):
    world, client = api
    c = world.db.add_class()
    s = world.db.add_student()
    world.db.approve(student_id=s.student_id, class_id=c.class_id, at=datetime(2025, 1, 1, 7, 0))
    _login(client, 1, "ADMIN")

    r = client.get(f"/api/statistics/matrix?class_id={c.class_id}&start_date=2025-01-01&end_date=2025-01-02")

    data = r.get_json()["data"]
    assert r.status_code == 200
    assert data["dates"] == ["2025-01-01", "2025-01-02"]
    assert [cell["status"] for cell in data["students"][0]["daily_status"]] == ["ABSENT", "NO_SESSION"]


def test_matrix_endpoint_requires_class(api):
    _, client = api
    _login(client, 1, "ADMIN")

    assert client.get("/api/statistics/matrix").status_code == 400


def test_rejecting_an_enrollment_requires_a_reason(api):
    world, client = api
    c = world.db.add_class()
    s = world.db.add_student()
    req = world.container.enrollment_service.create_request(student_id=s.student_id, class_id=c.class_id)
    _login(client, 1, "ADMIN")

    r = client.post(f"/api/enrollments/{req.request_id}/review", json={"decision": "REJECTED"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "ValidationError"

    r = client.post(f"/api/enrollments/{req.request_id}/review", json={"decision": "REJECTED", "reason": "Lớp đã đủ"})
    assert r.status_code == 200
    assert r.get_json()["data"]["rejection_reason"] == "Lớp đã đủ"
