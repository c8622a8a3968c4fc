from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_serializer

from sukejuru.constants import MessageRole
from sukejuru.utils.app_utils import format_iso


class ChatRequest(BaseModel):
    message: str = Field(
        min_length=1,
        description="The user's message to the assistant",
        examples=["add soccer practice Monday 4-6pm", "optimize my schedule"]
    )


class ChatResponse(BaseModel):
    reply: str = Field(
        description="The assistant's raw reply; calendar actions and commands arrive as JSON text"
    )


class ChatMessage(BaseModel):
    id: str
    role: MessageRole
    content: str
    session_id: str | None = None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return format_iso(value)

    class Config:
        from_attributes = True


class ChatHistoryResponse(BaseModel):
    messages: List[ChatMessage]


class MemoryRequest(BaseModel):
    role: MessageRole
    content: str = Field(min_length=1)
    session_id: str | None = None
