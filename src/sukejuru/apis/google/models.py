from typing import Any, Dict, List
from pydantic import BaseModel, Field


class ConnectionStatus(BaseModel):
    connected: bool
    expires_at: str | None = Field(default=None, description="Access token expiry, ISO-8601 UTC")


class ExportRequest(BaseModel):
    user_id: str | None = Field(
        default=None,
        description="Must match the authenticated user when given"
    )
    eventIds: List[str] | None = Field(
        default=None,
        description="Restrict the export to these event ids; all events when omitted"
    )


class ExportFailure(BaseModel):
    event_id: str
    error: str


class ExportResponse(BaseModel):
    created: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Event bodies returned by Google Calendar"
    )
    failed: List[ExportFailure] = Field(default_factory=list)
