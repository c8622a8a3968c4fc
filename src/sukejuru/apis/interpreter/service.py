import json
import logging
import re
from datetime import date, datetime, timedelta
from typing import Callable

from pydantic import ValidationError

from sukejuru.apis.events.models import Event
from sukejuru.apis.interpreter.course_aliases import alias_pattern, canonical_course_for, resolve_aliases
from sukejuru.apis.interpreter.models import (
    CalendarActionReply,
    CalendarActionResult,
    CalendarEventDraft,
    CommandReply,
    CommandResult,
    DeleteCourseParameters,
    DeleteMeetingParameters,
    JsonReply,
    JsonResult,
    ParsedReply,
    RescheduleMeetingParameters,
    TextReply,
    TextResult,
)
from sukejuru.config import app_cfg
from sukejuru.constants import (
    ASSIGNMENT_TYPE_KEYWORDS,
    CommandName,
    DEADLINE_KEYWORDS,
    DEADLINE_TIME_MARKER,
    DEFAULT_ASSIGNMENT_TYPE,
    DEFAULT_EVENT_COLOR,
)
from sukejuru.db.assignments.crud import (
    create_assignments,
    delete_assignments_by_ids,
    find_assignments_created_since,
    search_assignments_text,
)
from sukejuru.db.events.crud import (
    create_events,
    delete_events_by_ids,
    find_events,
    search_events_text,
    update_event,
)
from sukejuru.utils.app_utils import app_timezone, as_utc, local_day_bounds, parse_date, parse_datetime, utc_now

logger = logging.getLogger(__name__)

# ISO date and time are joined by "T" or a single space
_DATE_TIME_SEPARATOR = re.compile(r"[T ]")
_TITLE_MARKERS = re.compile(r"(Due|Deadline|Assignment)", re.IGNORECASE)
_COURSE_TITLE_NOISE = re.compile(
    r"(Due|Deadline|Assignment|Homework|Report|Essay|Project|Quiz|Exam|Test|Presentation)",
    re.IGNORECASE
)


def parse_reply(raw: str) -> ParsedReply:
    """
    Parse an assistant reply into one of the known shapes.

    Fails closed: anything that is not JSON, or that claims to be a calendar
    action or command but does not validate, is plain text.
    """
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return TextReply(content=raw)

    if not isinstance(payload, dict):
        return JsonReply(content=payload)

    try:
        if payload.get("action") is not None and payload.get("events") is not None:
            return CalendarActionReply.model_validate(payload)
        if payload.get("command") is not None:
            return CommandReply.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Reply looked structured but failed validation, treating as text: {e.error_count()} errors")
        return TextReply(content=raw)

    return JsonReply(content=payload)


def is_assignment(draft: CalendarEventDraft) -> bool:
    """A deadline keyword in the title, or a 23:59 start, marks an assignment."""
    title = draft.title.lower()
    return any(keyword in title for keyword in DEADLINE_KEYWORDS) or DEADLINE_TIME_MARKER in draft.start_date


def assignment_type(title: str) -> str:
    lowered = title.lower()
    for keyword, kind in ASSIGNMENT_TYPE_KEYWORDS:
        if keyword in lowered:
            return kind
    return DEFAULT_ASSIGNMENT_TYPE


def course_from_title(title: str) -> str:
    course = canonical_course_for(title)
    if course:
        return course
    return _COURSE_TITLE_NOISE.sub("", title).strip() or "General"


def draft_to_assignment(draft: CalendarEventDraft) -> dict:
    date_part, time_part = (_DATE_TIME_SEPARATOR.split(draft.start_date.strip(), maxsplit=1) + [""])[:2]
    kind = assignment_type(draft.title)
    return {
        "title": _TITLE_MARKERS.sub("", draft.title).strip(),
        "description": draft.description or "",
        "due_date": date.fromisoformat(date_part[:10]),
        "due_time": time_part[:5] if len(time_part) >= 5 else None,
        "course": course_from_title(draft.title),
        "type": kind,
        "priority": "high" if kind == "exam" else "medium",
    }


def draft_to_event(draft: CalendarEventDraft) -> dict:
    start = parse_datetime(draft.start_date)
    color = draft.color or DEFAULT_EVENT_COLOR
    return {
        "title": draft.title,
        "start_date": start,
        "end_date": parse_datetime(draft.end_date) if draft.end_date else start,
        "all_day": draft.all_day,
        "color": color,
        "background_color": draft.background_color or color,
        "description": draft.description or "",
        "extended_props": draft.extended_props,
    }


class InterpreterService:
    """Applies parsed assistant replies to the user's calendar and todo list."""

    def __init__(self):
        self._commands: dict[str, Callable[[str, dict, datetime], str]] = {
            CommandName.CANCEL_LAST_CHANGE.value: self.cancel_last_change,
            CommandName.RESCHEDULE_MEETING.value: self.reschedule_meeting,
            CommandName.DELETE_COURSE.value: self.delete_course,
            CommandName.DELETE_MEETING.value: self.delete_meeting,
        }
        logger.info("InterpreterService initialized")

    def process(self, user_id: str, raw: str, now: datetime | None = None):
        reply = parse_reply(raw)

        if isinstance(reply, TextReply):
            return TextResult(content=reply.content)
        if isinstance(reply, JsonReply):
            return JsonResult(content=reply.content)
        if isinstance(reply, CalendarActionReply):
            return self.apply_calendar_action(user_id, reply)
        return self.run_command(user_id, reply, now or utc_now())

    def apply_calendar_action(self, user_id: str, reply: CalendarActionReply) -> CalendarActionResult:
        """
        Split proposed events into assignments and calendar events and store both groups.

        Insert failures are logged; the classification counts are reported either way.
        """
        calendar_drafts = [draft for draft in reply.events if not is_assignment(draft)]
        assignment_drafts = [draft for draft in reply.events if is_assignment(draft)]

        created_rows = []
        if calendar_drafts:
            try:
                created = create_events(user_id, [draft_to_event(draft) for draft in calendar_drafts])
                created_rows = [Event.model_validate(event) for event in created]
                logger.info(f"Created {len(created)} calendar events for user {user_id}")
            except Exception as e:
                logger.error(f"Error creating calendar events: {e}", exc_info=True)

        if assignment_drafts:
            try:
                created = create_assignments(user_id, [draft_to_assignment(draft) for draft in assignment_drafts])
                logger.info(f"Created {len(created)} assignments for user {user_id}")
            except Exception as e:
                logger.error(f"Error creating assignments: {e}", exc_info=True)

        return CalendarActionResult(
            action=reply.action.value,
            calendarEvents=len(calendar_drafts),
            assignments=len(assignment_drafts),
            createdRows=created_rows,
            summary=(
                f"Created {len(calendar_drafts)} calendar events and "
                f"{len(assignment_drafts)} assignments. {reply.summary or ''}"
            )
        )

    def run_command(self, user_id: str, reply: CommandReply, now: datetime) -> CommandResult:
        handler = self._commands.get(reply.command)
        if handler is None:
            return CommandResult(command=reply.command, summary=f"Unknown command: {reply.command}")

        try:
            summary = handler(user_id, reply.parameters, now)
        except Exception as e:
            logger.error(f"Error executing command {reply.command}: {e}", exc_info=True)
            summary = f"Error executing command: {e}"

        return CommandResult(command=reply.command, summary=summary)

    def cancel_last_change(self, user_id: str, parameters: dict, now: datetime) -> str:
        """
        Delete everything the user created in the trailing window.

        The window is a heuristic: rows created by other actions inside it are removed too.
        """
        since = now - timedelta(minutes=app_cfg.CANCEL_LAST_CHANGE_MINUTES)

        events = find_events(user_id, created_since=since)
        assignments = find_assignments_created_since(user_id, since)

        deleted_events = delete_events_by_ids(user_id, [event.id for event in events])
        deleted_assignments = delete_assignments_by_ids(user_id, [assignment.id for assignment in assignments])

        return f"Cancelled last change: deleted {deleted_events} events and {deleted_assignments} assignments"

    def reschedule_meeting(self, user_id: str, parameters: dict, now: datetime) -> str:
        """Move matching events to another day, keeping local time of day and duration."""
        params = RescheduleMeetingParameters.model_validate(parameters)
        from_day = parse_date(params.fromDate)
        to_day = parse_date(params.toDate)
        day_start, day_end = local_day_bounds(from_day)

        events = find_events(user_id, title_contains=params.title, start_from=day_start, start_before=day_end)
        if not events:
            return f'No meetings found matching "{params.title}" on {params.fromDate}'

        tz = app_timezone()
        rescheduled = 0
        for event in events:
            start = as_utc(event.start_date).astimezone(tz)
            duration = as_utc(event.end_date) - as_utc(event.start_date)
            new_start = datetime.combine(to_day, start.timetz())

            if update_event(user_id, event.id, {"start_date": new_start, "end_date": new_start + duration}):
                rescheduled += 1

        return f"Rescheduled {rescheduled} meetings from {params.fromDate} to {params.toDate}"

    def delete_course(self, user_id: str, parameters: dict, now: datetime) -> str:
        """
        Delete events and assignments that mention the course under any of its aliases.

        Aliases must appear as whole words or phrases; the store query only preselects candidates.
        """
        params = DeleteCourseParameters.model_validate(parameters)
        aliases = resolve_aliases(params.courseName)
        if not aliases:
            return f'No course matches "{params.courseName}"'
        pattern = alias_pattern(aliases)

        def mentions_course(*texts) -> bool:
            return any(text and pattern.search(text) for text in texts)

        events = [
            event for event in search_events_text(user_id, aliases)
            if mentions_course(event.title, event.description)
        ]
        assignments = [
            assignment for assignment in search_assignments_text(user_id, aliases)
            if mentions_course(assignment.course, assignment.title, assignment.description)
        ]

        deleted_events = delete_events_by_ids(user_id, [event.id for event in events])
        deleted_assignments = delete_assignments_by_ids(user_id, [assignment.id for assignment in assignments])
        logger.info(f"Deleted course {params.courseName} for user {user_id} using aliases {aliases}")

        return (
            f'Deleted course "{params.courseName}": removed {deleted_events} events '
            f'and {deleted_assignments} assignments'
        )

    def delete_meeting(self, user_id: str, parameters: dict, now: datetime) -> str:
        params = DeleteMeetingParameters.model_validate(parameters)
        day_start, day_end = local_day_bounds(parse_date(params.date))

        events = find_events(user_id, title_contains=params.title, start_from=day_start, start_before=day_end)
        deleted = delete_events_by_ids(user_id, [event.id for event in events])

        if params.title:
            return f'Deleted {deleted} meetings containing "{params.title}" on {params.date}'
        return f"Deleted {deleted} meetings on {params.date}"


_interpreter_service_instance = None


def get_interpreter_service() -> InterpreterService:
    """Get or create interpreter service singleton instance."""
    global _interpreter_service_instance

    if _interpreter_service_instance is None:
        _interpreter_service_instance = InterpreterService()

    return _interpreter_service_instance
