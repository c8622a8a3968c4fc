from typing import Annotated, Any, Dict, List, Literal, Union
from pydantic import BaseModel, Field, field_validator

from sukejuru.apis.events.models import Event
from sukejuru.constants import CalendarAction
from sukejuru.utils.app_utils import parse_datetime


class ProcessResponseRequest(BaseModel):
    aiResponse: str = Field(
        description="Raw reply text produced by the chat model"
    )


# Shapes an assistant reply can take once parsed

class CalendarEventDraft(BaseModel):
    """One event proposed by the assistant; dates stay raw strings for classification."""

    title: str = Field(min_length=1)
    start_date: str
    end_date: str | None = None
    all_day: bool = False
    color: str | None = None
    background_color: str | None = None
    description: str | None = None
    extended_props: Dict[str, Any] | None = None

    @field_validator("start_date", "end_date")
    def check_iso_datetime(cls, value):
        if value is not None:
            parse_datetime(value)
        return value


class TextReply(BaseModel):
    content: str


class JsonReply(BaseModel):
    content: Any


class CalendarActionReply(BaseModel):
    action: CalendarAction
    events: List[CalendarEventDraft]
    summary: str | None = None


class CommandReply(BaseModel):
    command: str = Field(min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("parameters", mode="before")
    def default_parameters(cls, value):
        return value if value is not None else {}


ParsedReply = Union[TextReply, JsonReply, CalendarActionReply, CommandReply]


# Command parameters

class RescheduleMeetingParameters(BaseModel):
    title: str = Field(min_length=1)
    fromDate: str
    toDate: str


class DeleteCourseParameters(BaseModel):
    courseName: str = Field(min_length=1)

    @field_validator("courseName", mode="before")
    def strip_course_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class DeleteMeetingParameters(BaseModel):
    date: str
    title: str | None = None


# Responses

class TextResult(BaseModel):
    type: Literal["text"] = "text"
    content: str
    calendarEvents: List = Field(default_factory=list)
    assignments: List = Field(default_factory=list)


class JsonResult(BaseModel):
    type: Literal["json"] = "json"
    content: Any
    calendarEvents: List = Field(default_factory=list)
    assignments: List = Field(default_factory=list)


class CalendarActionResult(BaseModel):
    type: Literal["calendar_action"] = "calendar_action"
    action: str
    calendarEvents: int = Field(description="Number of events classified as calendar events")
    assignments: int = Field(description="Number of events classified as assignments")
    createdRows: List[Event] = Field(default_factory=list)
    summary: str


class CommandResult(BaseModel):
    type: Literal["command_action"] = "command_action"
    command: str
    summary: str


ProcessResponseResult = Annotated[
    Union[TextResult, JsonResult, CalendarActionResult, CommandResult],
    Field(discriminator="type")
]
