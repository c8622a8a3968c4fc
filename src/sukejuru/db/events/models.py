import uuid

from sqlalchemy import Column, String, Text, DateTime, Boolean, JSON

from sukejuru.constants import DEFAULT_EVENT_COLOR
from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class Event(Base):
    """SQLAlchemy model for calendar events owned by one user."""

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    all_day = Column(Boolean, nullable=False, default=False)
    color = Column(String(32), nullable=False, default=DEFAULT_EVENT_COLOR)
    background_color = Column(String(32))
    extended_props = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
