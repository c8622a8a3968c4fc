"""Bearer token checks happen before any store access."""
from datetime import date

import httpx
import pytest

from conftest import AUTH, USER_EMAIL, USER_ID
from sukejuru.db.assignments.crud import create_assignments, list_assignments
from sukejuru.db.courses.crud import list_courses
from sukejuru.db.events.crud import create_events, list_events
from sukejuru.db.forum.crud import list_forum_messages
from sukejuru.db.messages.crud import get_messages_by_user_id
from sukejuru.db.profiles.crud import get_profile
from sukejuru.utils.app_utils import parse_datetime


def test_missing_token(client, upstream):
    response = client.get("/api/events")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - No token provided"}
    assert upstream.requests == []


def test_non_bearer_header(client):
    response = client.get("/api/events", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - No token provided"}


def test_invalid_token_has_no_side_effect(client, upstream):
    response = client.post("/api/events", headers={"Authorization": "Bearer expired"}, json={
        "title": "Should not exist",
        "start_date": "2025-09-23T10:40:00",
        "end_date": "2025-09-23T12:10:00",
    })

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Invalid token"}
    assert list_events(USER_ID) == []

    [auth_call] = upstream.requests
    assert auth_call.url.path == "/auth/v1/user"
    assert auth_call.headers["apikey"] == "anon-key"


def test_valid_token_resolves_user(client):
    response = client.get("/api/events", headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"events": []}


@pytest.mark.parametrize("payload", [
    {"text": "<html>login</html>"},
    {"json": [{"id": USER_ID}]},
    {"json": {"email": USER_EMAIL}},
])
def test_unusable_auth_answer_is_rejected(client, payload):
    client.app.state.http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, **payload))
    )

    response = client.get("/api/events", headers=AUTH)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Invalid token"}


_PROTECTED_ROUTES = [
    ("POST", "/api/chat", {"message": "hello"}),
    ("GET", "/api/chat/history", None),
    ("POST", "/api/memory", {"role": "user", "content": "remember me"}),
    ("POST", "/api/process-response", {"aiResponse": '{"command": "delete_course", "parameters": {"courseName": "MoM"}}'}),
    ("POST", "/api/apply-events", {"action": "bulk-delete", "criteria": {}}),
    ("POST", "/api/apply-optimization", {"optimized_blocks": [
        {"title": "Study", "suggested_time": "Monday 9:00 AM-10:00 AM", "reason": "free"},
    ]}),
    ("GET", "/api/events", None),
    ("POST", "/api/events", {"title": "New", "start_date": "2025-09-23T10:00:00", "end_date": "2025-09-23T11:00:00"}),
    ("PUT", "/api/events", {"id": "event-id", "title": "Renamed"}),
    ("DELETE", "/api/events", {"id": "event-id"}),
    ("GET", "/api/assignments", None),
    ("POST", "/api/assignments", {"assignments": [{"title": "Essay", "due_date": "2025-09-30"}]}),
    ("PUT", "/api/assignments", {"id": "assignment-id", "completed": True}),
    ("DELETE", "/api/assignments", {"id": "assignment-id"}),
    ("GET", "/api/courses", None),
    ("POST", "/api/courses/import", None),
    ("GET", "/api/courses/MoM/evaluations", None),
    ("POST", "/api/courses/MoM/evaluations", {"overall_satisfaction": 5}),
    ("GET", "/api/courses/MoM/forum", None),
    ("POST", "/api/courses/MoM/forum", {"content": "hello"}),
    ("GET", "/api/profile", None),
    ("PUT", "/api/profile", {"name": "Intruder"}),
    ("POST", "/api/export/google", {}),
]


@pytest.mark.parametrize("method,path,body", _PROTECTED_ROUTES, ids=[f"{m} {p}" for m, p, _ in _PROTECTED_ROUTES])
def test_protected_routes_reject_anonymous_callers(client, upstream, method, path, body):
    [event] = create_events(USER_ID, [{
        "title": "MoM Lecture",
        "start_date": parse_datetime("2025-09-23T10:40:00"),
        "end_date": parse_datetime("2025-09-23T12:10:00"),
    }])
    [assignment] = create_assignments(USER_ID, [{"title": "Problem set", "due_date": date(2025, 9, 30)}])
    store_before = _store_snapshot()

    for headers in ({}, {"Authorization": "Bearer expired"}):
        response = client.request(method, path, headers=headers, json=body)
        assert response.status_code == 401

    assert upstream.calendar_requests() == []
    assert _store_snapshot() == store_before
    assert [e["id"] for e in client.get("/api/events", headers=AUTH).json()["events"]] == [event.id]
    assert [a["id"] for a in client.get("/api/assignments", headers=AUTH).json()["assignments"]] == [assignment.id]


def _store_snapshot():
    return (
        [(e.id, e.title, e.start_date) for e in list_events(USER_ID)],
        [(a.id, a.title, a.completed) for a in list_assignments(USER_ID)],
        get_messages_by_user_id(USER_ID),
        get_profile(USER_ID),
        list_courses(),
        list_forum_messages("MoM"),
    )
