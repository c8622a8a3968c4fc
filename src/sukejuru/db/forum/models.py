import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class ForumMessage(Base):
    """SQLAlchemy model for a message on a course discussion board."""

    __tablename__ = "forum_messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(64), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(String(255))
    sender_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
