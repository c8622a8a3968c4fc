from enum import Enum


DEFAULT_EVENT_COLOR = "#3788d8"
OPTIMIZED_BLOCK_COLOR = "#4ade80"
NO_REPLY_FALLBACK = "Sorry, I could not respond."

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_CALENDAR_EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ResponseType(str, Enum):
    TEXT = "text"
    JSON = "json"
    CALENDAR_ACTION = "calendar_action"
    COMMAND_ACTION = "command_action"


class CalendarAction(str, Enum):
    CREATE = "create"
    BULK_CREATE = "bulk-create"
    UPDATE = "update"
    DELETE = "delete"
    BULK_DELETE = "bulk-delete"


class CommandName(str, Enum):
    CANCEL_LAST_CHANGE = "cancel_last_change"
    RESCHEDULE_MEETING = "reschedule_meeting"
    DELETE_COURSE = "delete_course"
    DELETE_MEETING = "delete_meeting"


# Monday first, matching datetime.weekday()
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# Titles containing any of these are treated as assignment deadlines
DEADLINE_KEYWORDS = [
    "due", "deadline", "assignment", "homework", "report",
    "essay", "project", "quiz", "exam", "test", "presentation",
    "submission", "deliverable", "problem set", "exercise due",
    "lecture due", "vocab", "vocabulary",
]
DEADLINE_TIME_MARKER = "23:59"

# Checked in order; first keyword found in the title wins
ASSIGNMENT_TYPE_KEYWORDS = [
    ("homework", "homework"),
    ("report", "report"),
    ("essay", "essay"),
    ("project", "project"),
    ("quiz", "quiz"),
    ("exam", "exam"),
    ("test", "exam"),
    ("presentation", "presentation"),
    ("vocabulary", "vocabulary"),
    ("programming", "programming"),
]
DEFAULT_ASSIGNMENT_TYPE = "assignment"

HOURS_PER_WEEK_BUCKETS = ["<3h", "3-5h", "5-10h", ">10h"]
