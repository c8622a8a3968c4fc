import uuid

from sqlalchemy import Column, String, Text, Date, DateTime, Boolean

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class Assignment(Base):
    """SQLAlchemy model for the todo / assignment list."""

    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    due_date = Column(Date, nullable=False)
    due_time = Column(String(5))
    course = Column(String(100), nullable=False, default="General")
    type = Column(String(50), nullable=False, default="homework")
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String(20), nullable=False, default="medium")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
