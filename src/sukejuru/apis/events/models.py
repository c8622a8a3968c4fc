from datetime import date, datetime
from typing import Any, Dict, List
from pydantic import BaseModel, Field, field_serializer, field_validator

from sukejuru.constants import DEFAULT_EVENT_COLOR
from sukejuru.utils.app_utils import format_iso, parse_datetime


def _parse_client_datetime(value):
    if isinstance(value, str):
        return parse_datetime(value)
    return value


class Event(BaseModel):
    """A calendar event as returned by the API."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    all_day: bool = False
    color: str = DEFAULT_EVENT_COLOR
    background_color: str | None = None
    extended_props: Dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("start_date", "end_date", "created_at", "updated_at")
    def serialize_datetime(self, value: datetime | None) -> str | None:
        return format_iso(value)

    class Config:
        from_attributes = True


class EventFields(BaseModel):
    """Writable event fields; naive datetimes are read in the application timezone."""

    title: str = Field(
        min_length=1,
        description="Event title",
        examples=["Mechanics of Materials (Lecture)"]
    )
    description: str | None = None
    start_date: datetime = Field(
        description="Start as ISO-8601",
        examples=["2025-09-23T10:40:00+09:00"]
    )
    end_date: datetime = Field(
        description="End as ISO-8601",
        examples=["2025-09-23T12:10:00+09:00"]
    )
    all_day: bool = False
    color: str = DEFAULT_EVENT_COLOR
    background_color: str | None = None
    extended_props: Dict[str, Any] | None = None

    @field_validator("start_date", "end_date", mode="before")
    def parse_client_datetime(cls, value):
        return _parse_client_datetime(value)


class EventUpdateRequest(BaseModel):
    id: str = Field(description="ID of the event to update")
    title: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    all_day: bool | None = None
    color: str | None = None
    background_color: str | None = None
    extended_props: Dict[str, Any] | None = None

    @field_validator("start_date", "end_date", mode="before")
    def parse_client_datetime(cls, value):
        return _parse_client_datetime(value)


class EventDeleteRequest(BaseModel):
    id: str = Field(description="ID of the event to delete")


class EventListResponse(BaseModel):
    events: List[Event]


class EventResponse(BaseModel):
    event: Event


class DateRange(BaseModel):
    start: date | None = Field(default=None, description="First local day (inclusive)")
    end: date | None = Field(default=None, description="Last local day (inclusive)")

    @field_validator("start", "end", mode="before")
    def take_date_part(cls, value):
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class BulkDeleteCriteria(BaseModel):
    """Compound criteria for `bulk-delete`; every given criterion must match."""

    title_contains: str | None = Field(default=None, description="Case-insensitive title substring")
    exact_title: str | None = None
    date_range: DateRange | None = None
    days: List[str] | None = Field(
        default=None,
        description="Weekday names, evaluated in the application timezone",
        examples=[["Monday", "Tuesday"]]
    )


class ApplyEventsRequest(BaseModel):
    action: str = Field(examples=["create", "bulk-create", "update", "delete", "bulk-delete"])
    events: List[Dict[str, Any]] | None = None
    criteria: BulkDeleteCriteria | None = None


class ApplyEventsResponse(BaseModel):
    ok: bool = True
    inserted: int | None = None
    deleted: int | None = None
    event: Event | None = None


class OptimizedBlock(BaseModel):
    title: str
    suggested_time: str = Field(examples=["Tuesday 7-9 PM", "Friday 13:00-14:30"])
    reason: str | None = None
    duration: str | None = None
    frequency: str | None = None
    priority: str | None = None
    type: str | None = None


class ApplyOptimizationRequest(BaseModel):
    optimized_blocks: List[OptimizedBlock]


class ApplyOptimizationResponse(BaseModel):
    ok: bool = True
    message: str
    events: List[Event]
