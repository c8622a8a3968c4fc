import re
from datetime import date, datetime
from typing import List
from pydantic import BaseModel, Field, field_serializer, field_validator

from sukejuru.utils.app_utils import format_iso

_DUE_TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def _date_part(value):
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


def _check_due_time(value):
    if value is not None and not _DUE_TIME_PATTERN.match(value):
        raise ValueError("due_time must be HH:MM")
    return value


class Assignment(BaseModel):
    """A todo / assignment as returned by the API."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    due_date: date
    due_time: str | None = None
    course: str
    type: str
    completed: bool
    priority: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime | None) -> str | None:
        return format_iso(value)

    class Config:
        from_attributes = True


class AssignmentFields(BaseModel):
    title: str = Field(min_length=1, examples=["MoM Homework 3"])
    description: str | None = None
    due_date: date = Field(examples=["2025-10-06"])
    due_time: str | None = Field(default=None, examples=["23:59"])
    course: str = "General"
    type: str = "homework"
    priority: str = Field(default="medium", examples=["low", "medium", "high"])

    @field_validator("due_date", mode="before")
    def take_date_part(cls, value):
        return _date_part(value)

    @field_validator("due_time")
    def check_due_time(cls, value):
        return _check_due_time(value)


class AssignmentCreateRequest(BaseModel):
    assignments: List[AssignmentFields]


class AssignmentUpdateRequest(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    due_time: str | None = None
    course: str | None = None
    type: str | None = None
    completed: bool | None = None
    priority: str | None = None

    @field_validator("due_date", mode="before")
    def take_date_part(cls, value):
        return _date_part(value)

    @field_validator("due_time")
    def check_due_time(cls, value):
        return _check_due_time(value)


class AssignmentDeleteRequest(BaseModel):
    id: str


class AssignmentListResponse(BaseModel):
    assignments: List[Assignment]


class AssignmentResponse(BaseModel):
    assignment: Assignment


class SuccessResponse(BaseModel):
    success: bool = True
