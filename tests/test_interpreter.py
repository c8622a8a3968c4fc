"""
Interpretation of assistant replies: plain text, JSON, calendar actions and commands.
"""
import json
from datetime import date, timedelta

import pytest

from conftest import AUTH, USER_ID
from sukejuru.apis.interpreter.course_aliases import resolve_aliases
from sukejuru.apis.interpreter.models import CalendarActionReply, CalendarEventDraft, CommandReply, JsonReply, TextReply
from sukejuru.apis.interpreter.service import (
    draft_to_assignment,
    get_interpreter_service,
    is_assignment,
    parse_reply,
)
from sukejuru.db.assignments.crud import create_assignments, list_assignments
from sukejuru.db.assignments.models import Assignment
from sukejuru.db.base import DatabaseSession
from sukejuru.db.events.crud import create_events, list_events
from sukejuru.db.events.models import Event
from sukejuru.utils.app_utils import format_iso, parse_datetime, utc_now


def _process(client, reply):
    payload = reply if isinstance(reply, str) else json.dumps(reply)
    response = client.post("/api/process-response", headers=AUTH, json={"aiResponse": payload})
    assert response.status_code == 200
    return response.json()


def _event(title, start, end=None, description=None):
    return {
        "title": title,
        "start_date": parse_datetime(start),
        "end_date": parse_datetime(end or start),
        "description": description,
    }


@pytest.mark.parametrize("raw, expected_type", [
    ("Sure, I added it!", TextReply),
    ("[1, 2, 3]", JsonReply),
    ('{"note": "nothing to do"}', JsonReply),
    ('{"action": "explode", "events": []}', TextReply),
    ('{"action": "create", "events": [{"title": "No start"}]}', TextReply),
    ('{"action": "create", "events": [{"title": "Gym", "start_date": "tomorrow"}]}', TextReply),
    ('{"action": "create", "events": []}', CalendarActionReply),
    ('{"command": "cancel_last_change"}', CommandReply),
])
def test_parse_reply_fails_closed(raw, expected_type):
    assert isinstance(parse_reply(raw), expected_type)


def test_plain_text_passes_through(client):
    assert _process(client, "Here is your schedule for today.") == {
        "type": "text",
        "content": "Here is your schedule for today.",
        "calendarEvents": [],
        "assignments": [],
    }


def test_json_without_action_is_returned_as_json(client):
    body = _process(client, {"optimized_blocks": []})

    assert body["type"] == "json"
    assert body["content"] == {"optimized_blocks": []}


def test_calendar_action_splits_events_and_assignments(client):
    body = _process(client, {
        "action": "bulk-create",
        "events": [
            {"title": "MoM Lecture", "start_date": "2025-09-23T10:40:00", "end_date": "2025-09-23T12:10:00"},
            {"title": "DSP Homework 2", "start_date": "2025-09-28T23:59:00"},
            {"title": "Read chapter 4", "start_date": "2025-09-29T23:59:00", "end_date": "2025-09-29T23:59:00"},
        ],
        "summary": "Added your week.",
    })

    assert body["type"] == "calendar_action"
    assert body["action"] == "bulk-create"
    assert body["calendarEvents"] == 1
    assert body["assignments"] == 2
    assert body["summary"] == "Created 1 calendar events and 2 assignments. Added your week."
    assert [row["title"] for row in body["createdRows"]] == ["MoM Lecture"]

    [event] = list_events(USER_ID)
    assert format_iso(event.start_date) == "2025-09-23T01:40:00.000Z"

    homework, reading = list_assignments(USER_ID)
    assert homework.title == "DSP Homework 2"
    assert homework.course == "Digital Signal Processing"
    assert homework.type == "homework"
    assert homework.due_date == date(2025, 9, 28)
    assert homework.due_time == "23:59"
    assert homework.completed is False
    assert reading.type == "assignment"
    assert reading.due_date == date(2025, 9, 29)


def test_classification_of_single_drafts():
    lecture = CalendarEventDraft(title="ODE Lecture", start_date="2025-09-22T09:00:00")
    exam = CalendarEventDraft(title="ODE Final Exam", start_date="2026-01-10T09:00:00")
    deadline = CalendarEventDraft(title="Lab Report Due", start_date="2025-10-01T17:00:00")

    assert is_assignment(lecture) is False
    assert is_assignment(exam) is True
    assert is_assignment(deadline) is True

    assert draft_to_assignment(exam) == {
        "title": "ODE Final Exam",
        "description": "",
        "due_date": date(2026, 1, 10),
        "due_time": "09:00",
        "course": "Ordinary Differential Equations",
        "type": "exam",
        "priority": "high",
    }
    row = draft_to_assignment(deadline)
    assert row["title"] == "Lab Report"
    assert row["type"] == "report"
    assert row["course"] == "Lab"
    assert row["priority"] == "medium"


@pytest.mark.parametrize("start_date", ["2025-09-28T23:59:00", "2025-09-28 23:59:00", "2025-09-28 23:59"])
def test_deadline_time_is_kept_for_either_separator(start_date):
    draft = CalendarEventDraft(title="Read chapter", start_date=start_date)

    assert is_assignment(draft) is True
    row = draft_to_assignment(draft)
    assert row["due_date"] == date(2025, 9, 28)
    assert row["due_time"] == "23:59"


def test_date_only_draft_has_no_due_time():
    draft = CalendarEventDraft(title="Essay", start_date="2025-09-28")

    row = draft_to_assignment(draft)
    assert row["due_date"] == date(2025, 9, 28)
    assert row["due_time"] is None


def test_cancel_last_change_window_boundary():
    now = utc_now()
    recent, old = create_events(USER_ID, [
        _event("Recent", "2025-09-22T10:00:00"),
        _event("Old", "2025-09-23T10:00:00"),
    ])
    [recent_assignment] = create_assignments(USER_ID, [{
        "title": "Recent homework", "due_date": date(2025, 9, 30), "course": "General",
    }])

    with DatabaseSession() as db_session:
        db_session.query(Event).filter(Event.id == recent.id).update(
            {Event.created_at: now - timedelta(minutes=9, seconds=59)}
        )
        db_session.query(Event).filter(Event.id == old.id).update(
            {Event.created_at: now - timedelta(minutes=10, seconds=1)}
        )
        db_session.query(Assignment).filter(Assignment.id == recent_assignment.id).update(
            {Assignment.created_at: now - timedelta(minutes=1)}
        )
        db_session.commit()

    summary = get_interpreter_service().cancel_last_change(USER_ID, {}, now)

    assert summary == "Cancelled last change: deleted 1 events and 1 assignments"
    assert [e.title for e in list_events(USER_ID)] == ["Old"]
    assert list_assignments(USER_ID) == []


def test_delete_course_matches_aliases_as_whole_words(client):
    create_events(USER_ID, [
        _event("MoM Lecture", "2025-09-23T10:40:00"),
        _event("Exercise", "2025-09-26T09:00:00", description="mechanics of materials problems"),
        _event("Momentum physics club", "2025-09-24T18:00:00"),
        _event("Gym", "2025-09-24T20:00:00"),
    ])
    create_assignments(USER_ID, [
        {"title": "Problem set 3", "due_date": date(2025, 9, 30), "course": "Mechanics of Materials"},
        {"title": "Momentum reading", "due_date": date(2025, 9, 30), "course": "General"},
    ])

    body = _process(client, {"command": "delete_course", "parameters": {"courseName": "MoM"}})

    assert body == {
        "type": "command_action",
        "command": "delete_course",
        "summary": 'Deleted course "MoM": removed 2 events and 1 assignments',
    }
    assert sorted(e.title for e in list_events(USER_ID)) == ["Gym", "Momentum physics club"]
    assert [a.title for a in list_assignments(USER_ID)] == ["Momentum reading"]


def test_reschedule_meeting_keeps_time_and_duration(client):
    create_events(USER_ID, [
        _event("Team Meeting", "2025-09-24T15:00:00", "2025-09-24T16:30:00"),
        _event("Team Meeting", "2025-09-25T15:00:00", "2025-09-25T16:00:00"),
    ])

    body = _process(client, {
        "command": "reschedule_meeting",
        "parameters": {"title": "team", "fromDate": "2025-09-24", "toDate": "2025-09-26"},
    })

    assert body["summary"] == "Rescheduled 1 meetings from 2025-09-24 to 2025-09-26"
    moved, untouched = sorted(list_events(USER_ID), key=lambda e: e.end_date, reverse=True)
    assert format_iso(moved.start_date) == "2025-09-26T06:00:00.000Z"
    assert format_iso(moved.end_date) == "2025-09-26T07:30:00.000Z"
    assert format_iso(untouched.start_date) == "2025-09-25T06:00:00.000Z"


def test_reschedule_meeting_without_match(client):
    body = _process(client, {
        "command": "reschedule_meeting",
        "parameters": {"title": "Team", "fromDate": "2025-09-20", "toDate": "2025-09-21"},
    })

    assert body["summary"] == 'No meetings found matching "Team" on 2025-09-20'


def test_delete_meeting_by_day_and_title(client):
    create_events(USER_ID, [
        _event("Project meeting", "2025-09-24T10:00:00"),
        _event("Lunch", "2025-09-24T12:00:00"),
        _event("Project meeting", "2025-09-25T10:00:00"),
    ])

    body = _process(client, {
        "command": "delete_meeting",
        "parameters": {"date": "2025-09-24", "title": "meeting"},
    })

    assert body["summary"] == 'Deleted 1 meetings containing "meeting" on 2025-09-24'
    assert sorted(e.title for e in list_events(USER_ID)) == ["Lunch", "Project meeting"]

    body = _process(client, {"command": "delete_meeting", "parameters": {"date": "2025-09-24"}})
    assert body["summary"] == "Deleted 1 meetings on 2025-09-24"


def test_unknown_command(client):
    body = _process(client, {"command": "fly_to_the_moon", "parameters": {}})

    assert body["summary"] == "Unknown command: fly_to_the_moon"


def test_command_failure_becomes_summary(client):
    body = _process(client, {"command": "reschedule_meeting", "parameters": {"title": "Team"}})

    assert body["type"] == "command_action"
    assert body["summary"].startswith("Error executing command:")


@pytest.mark.parametrize("course_name", ["", " ", "\t\n"])
def test_blank_names_resolve_to_no_aliases(course_name):
    assert resolve_aliases(course_name) == []


def test_delete_course_with_blank_name_deletes_nothing(client):
    create_events(USER_ID, [
        _event("数学の講義", "2025-09-23T10:40:00"),
        _event("Lunch with Ken!", "2025-09-23T12:00:00"),
        _event("Gym", "2025-09-24T20:00:00", description="Bring towel."),
    ])
    create_assignments(USER_ID, [{"title": "Read ch. 4", "due_date": date(2025, 9, 30), "course": "General"}])

    body = _process(client, {"command": "delete_course", "parameters": {"courseName": " "}})

    assert body["type"] == "command_action"
    assert body["summary"].startswith("Error executing command:")
    assert len(list_events(USER_ID)) == 3
    assert [a.title for a in list_assignments(USER_ID)] == ["Read ch. 4"]


def test_delete_course_name_is_trimmed(client):
    create_events(USER_ID, [_event("DSP Exercise", "2025-09-23T10:40:00"), _event("Gym", "2025-09-24T20:00:00")])

    body = _process(client, {"command": "delete_course", "parameters": {"courseName": "  DSP "}})

    assert body["summary"] == 'Deleted course "DSP": removed 1 events and 0 assignments'
    assert [e.title for e in list_events(USER_ID)] == ["Gym"]
