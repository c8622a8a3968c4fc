from datetime import datetime
from pydantic import BaseModel, Field, field_serializer

from sukejuru.utils.app_utils import format_iso

class Profile(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    program: str | None = None
    graduation_year: int | None = None
    university_name: str | None = None
    updated_at: datetime | None = None

    @field_serializer("updated_at")
    def serialize_datetime(self, value: datetime | None) -> str | None:
        return format_iso(value)

    class Config:
        from_attributes = True


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, description="Display name shown in course forums")
    program: str | None = None
    graduation_year: int | None = Field(default=None, ge=1900, le=2200)
    university_name: str | None = None


class ProfileResponse(BaseModel):
    profile: Profile | None
