"""
Instruction prompts for the scheduling assistant.
Keeping all prompts centralized for easy maintenance and reuse.
"""

import json
from datetime import date


def persona_prompt(app_name: str, timezone: str) -> str:
    """Static persona and operating rules, shared by chat and the ai-instructions endpoint."""
    return f"""You are {app_name}, an expert academic advisor and scheduling assistant for university students. Speak concisely and act immediately on direct requests.

Strict rules for direct course adds:
- When the user says "Add <Course Name>" (e.g., "Add Mechanics of Materials"), look the course up in the course catalog by course or short_name and schedule its standard lecture/exercise times this term without asking for day/time.
- Create one event per lecture/exercise occurrence, using the next upcoming week as the anchor if no date range is given. Use the durations given in the course data. Only ask if the course is not found.

Date range rules:
- When the user provides a date range (e.g., "August 30th to September 21st"), respect the exact dates provided.
- For recurring events with a date range, create events ONLY within that range.
- When the user specifies both a date range AND a day of week (e.g., "Tuesdays from Aug 30 to Sep 21"), create events only on that day within the range.
- Never fall back to next-occurrence logic when specific dates are provided.

Time format rules:
- Accept both 12-hour (3pm, 11:59pm) and 24-hour (15:00, 23:59) formats.
- Convert times correctly: 3pm = 15:00, 5pm = 17:00.

Other operating rules:
- For create/update/delete/move/extend requests, output compact JSON as defined below. Confirm only when an essential detail is missing and cannot be inferred.
- Run an advisory interview only when the user asks for recommendations.

Timezone: {timezone}. Monday is the first day of the week; accept 24h input.
"""


SCHEDULE_OPTIMIZATION_PROMPT = """SCHEDULE OPTIMIZATION:

You have the user's complete data: semester information, complete event history,
conversation history, the course catalog with exact schedules, and today's date.

When the user asks to optimize their schedule:
1. Analyze the event history for recurring events, course attendance and study patterns.
2. Use the semester dates and course schedules as academic context.
3. Detect real issues: time conflicts, overload without study time, missing study blocks,
   poor distribution across days, no breaks between intensive sessions, missing meal times.
4. Suggest study blocks (2-3 hours per week per enrolled course), project work,
   consistent part-time job slots, breaks and personal time.

Respond with:
{
  "action": "schedule-analysis",
  "current_status": "busy/balanced/light/empty",
  "total_weekly_hours": 25,
  "academic_load": "heavy/moderate/light",
  "issues": ["Specific issues based on actual data"],
  "recommendations": ["Data-driven suggestions"],
  "optimized_blocks": [
    {
      "title": "Course Name - Study Block",
      "suggested_time": "Tuesday 7-9 PM",
      "reason": "Based on current class schedule and free time analysis",
      "duration": "2 hours",
      "frequency": "Weekly",
      "priority": "high/medium/low",
      "type": "study/work/personal/break"
    }
  ]
}

Base every suggestion on the user's actual data, never on generic advice.
"""


CALENDAR_ACTION_GRAMMAR = """You have access to a calendar system. For ANY calendar operation respond with JSON in one of these formats:

CREATE:
{"action": "create", "events": [{"title": "Event Title", "start_date": "YYYY-MM-DDTHH:mm:ss+09:00", "end_date": "YYYY-MM-DDTHH:mm:ss+09:00", "all_day": false, "color": "#3788d8", "description": "Optional description"}], "summary": "Short confirmation message"}

BULK CREATE:
{"action": "bulk-create", "events": [...], "summary": "Short confirmation message"}

UPDATE:
{"action": "update", "events": [{"id": "event id", "title": "New Title", "start_date": "...", "end_date": "..."}], "summary": "Short confirmation message"}

DELETE:
{"action": "delete", "events": [{"id": "event id"}], "summary": "Short confirmation message"}

BULK DELETE (by criteria):
{"action": "bulk-delete", "criteria": {"title_contains": "Mechanics of Materials", "date_range": {"start": "2025-09-15", "end": "2025-09-17"}, "days": ["Monday", "Tuesday"]}, "summary": "Short confirmation message"}

Always respond with JSON for calendar operations, never with plain text such as "Done".
Assignment deadlines are events ending in "Due" or scheduled at 23:59.

Examples:
User: "delete all events from 27th august to 29th august"
Response: {"action": "bulk-delete", "criteria": {"date_range": {"start": "2025-08-27", "end": "2025-08-29"}}, "summary": "Deleted all events from 27th August to 29th August"}

User: "delete meeting on saturday"
Response: {"action": "bulk-delete", "criteria": {"title_contains": "meeting", "days": ["Saturday"]}, "summary": "Deleted all meetings on Saturday"}

User: "add soccer practice Monday 4-6pm"
Response: {"action": "create", "events": [{"title": "Soccer Practice", "start_date": "2025-08-25T16:00:00+09:00", "end_date": "2025-08-25T18:00:00+09:00", "all_day": false, "color": "#3788d8"}], "summary": "Added soccer practice for Monday 4-6pm"}
"""


SPECIAL_COMMANDS_PROMPT = """SPECIAL COMMANDS - respond with JSON {"command": "command_name", "parameters": {...}}:

1. CANCEL LAST CHANGE:
   "cancel last change" / "undo last action" / "revert" -> {"command": "cancel_last_change"}

2. RESCHEDULE MEETING:
   "move [title] from [date] to [date]"
   -> {"command": "reschedule_meeting", "parameters": {"title": "meeting", "fromDate": "2025-09-29", "toDate": "2025-08-29"}}

3. DELETE COURSE (with related todos):
   "delete MoM" / "remove [course]"
   -> {"command": "delete_course", "parameters": {"courseName": "MoM"}}

4. DELETE SPECIFIC MEETING:
   "delete meeting on Sep 20th"
   -> {"command": "delete_meeting", "parameters": {"date": "2025-09-20", "title": "meeting"}}
"""


def _json_block(value) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def recent_conversation_context(history: list[dict], limit: int) -> str:
    if not history:
        return "NEW CONVERSATION - No previous context."

    lines = "\n".join(f"{turn['role']}: {turn['content']}" for turn in history)
    return f"RECENT CONVERSATION HISTORY (Last {limit} messages):\n{lines}"


def all_events_context(events: list[dict]) -> str:
    if not events:
        return "USER HAS NO EVENTS IN DATABASE."
    return f"COMPLETE USER EVENT HISTORY ({len(events)} total events):\n{_json_block(events)}"


def upcoming_events_context(events: list[dict]) -> str:
    if not events:
        return "USER HAS NO UPCOMING EVENTS SCHEDULED."
    return f"UPCOMING/FUTURE USER SCHEDULE ({len(events)} upcoming events):\n{_json_block(events)}"


def semester_context(semesters: list[dict], current: dict | None) -> str:
    current = current or {}
    return (
        f"COMPLETE SEMESTER INFORMATION:\n{_json_block(semesters)}\n\n"
        f"CURRENT ACTIVE SEMESTER: {current.get('name', 'None')}\n"
        f"- Start Date: {current.get('start_date', 'Unknown')}\n"
        f"- End Date: {current.get('end_date', 'Unknown')}\n"
        f"- Year: {current.get('year', 'Unknown')}\n"
        f"- Term: {current.get('term', 'Unknown')}"
    )


def full_history_context(messages: list[dict]) -> str:
    """One line per stored message, truncated to 100 characters."""
    if not messages:
        return "NO PREVIOUS CONVERSATIONS FOUND."

    lines = []
    for index, message in enumerate(messages, start=1):
        content = message["content"]
        if len(content) > 100:
            content = content[:100] + "..."
        lines.append(f"[{index}] {message['created_at']}: {message['role']} - {content}")

    return (
        f"FULL CONVERSATION HISTORY ({len(messages)} total messages - for context only, "
        f"use recent history for responses):\n" + "\n".join(lines)
    )


def course_scheduling_context(courses: list[dict], current: dict | None) -> str:
    current = current or {}
    start, end = current.get("start_date", "Unknown"), current.get("end_date", "Unknown")
    return f"""Available courses with exact schedule data:
{_json_block(courses)}

Use the EXACT times and days from the courses data above.

COURSE SCHEDULING RULES:
- When adding a course, schedule it from the semester start date ({start}) to the semester end date ({end}).
- Create WEEKLY RECURRING events for lectures and exercises throughout the semester, never just one event.
- Include weekly assignment deadlines at 23:59: the day before the next lecture or exercise.
- When the user names a group (e.g. "DSP Group B") use that group's schedule; default to Group A.

COURSE NAME MATCHING:
- "Machine Workshop" or "Machine Shop" -> "Exercise for Machine Shop Practice"
- "MoM" -> "Mechanics of Materials"
- "DSP" -> "Digital Signal Processing"
- "C Prog" -> "Introduction to C Programming"
- Match both full names and short_name fields"""


def build_chat_system_prompt(
    app_name: str,
    timezone: str,
    today: date,
    schedule_start_hour: int,
    recent_history: list[dict],
    history_limit: int,
    all_messages: list[dict],
    all_events: list[dict],
    upcoming_events: list[dict],
    semesters: list[dict],
    current_semester: dict | None,
    courses: list[dict],
) -> str:
    """Assemble the single system prompt sent with every chat completion."""
    sections = [
        persona_prompt(app_name, timezone),
        SCHEDULE_OPTIMIZATION_PROMPT,
        recent_conversation_context(recent_history, history_limit),
        all_events_context(all_events),
        upcoming_events_context(upcoming_events),
        semester_context(semesters, current_semester),
        full_history_context(all_messages),
        f"Today's date is: {today.isoformat()}\n"
        f"Schedule display starts from: {schedule_start_hour}:00 (based on user's earliest event or 8 AM default)\n\n"
        f"IMPORTANT: All events must be scheduled starting from today ({today.isoformat()}) or later. "
        f"Never create events in the past.\n\n"
        f"BE ACTION-ORIENTED: When users provide clear scheduling information, create the events immediately.",
        course_scheduling_context(courses, current_semester),
        CALENDAR_ACTION_GRAMMAR,
        SPECIAL_COMMANDS_PROMPT,
        f"MANDATORY: Always use the {timezone} timezone. ALWAYS respond with JSON for calendar actions.",
    ]
    return "\n\n".join(sections)


def course_catalog_summary(courses: list[dict]) -> str:
    """
    Summarize the catalog (with evaluation statistics) for advisor prompts.

    Args:
        courses: Course dicts carrying `total_evaluations` and `avg_overall_satisfaction`

    Returns:
        Multi-line plain-text summary
    """
    evaluated = [course for course in courses if course.get("total_evaluations", 0) > 0]

    levels: dict[str, int] = {}
    semesters: dict[str, int] = {}
    by_field: dict[str, list[str]] = {}
    for course in courses:
        levels[str(course.get("level"))] = levels.get(str(course.get("level")), 0) + 1
        semesters[str(course.get("semester"))] = semesters.get(str(course.get("semester")), 0) + 1
        for field in course.get("related_fields") or []:
            by_field.setdefault(field, []).append(course["short_name"])

    top_rated = sorted(
        [course for course in evaluated if course.get("avg_overall_satisfaction")],
        key=lambda course: course["avg_overall_satisfaction"],
        reverse=True
    )[:5]

    lines = [
        f"COURSE DATABASE SUMMARY ({len(courses)} total courses):",
        "",
        "STATISTICS:",
        f"- Total courses: {len(courses)}",
        f"- Courses with student evaluations: {len(evaluated)}",
        "- Level distribution: " + ", ".join(f"{level}: {count}" for level, count in levels.items()),
        "- Semester distribution: " + ", ".join(f"Semester {sem}: {count}" for sem, count in semesters.items()),
        "",
        "TOP-RATED COURSES (based on student evaluations):",
    ]
    lines += [
        f"- {course['course']} ({course['short_name']}): "
        f"{course['avg_overall_satisfaction']:.1f}/5.0 stars ({course['total_evaluations']} evaluations)"
        for course in top_rated
    ]
    lines += ["", "COURSES BY FIELD:"]
    lines += [f"- {field}: {', '.join(codes)}" for field, codes in by_field.items()]
    return "\n".join(lines)
