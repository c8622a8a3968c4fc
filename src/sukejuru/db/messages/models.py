import uuid

from sqlalchemy import Column, String, Text, DateTime

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class Message(Base):
    """
    SQLAlchemy model for the append-only chat log.

    Rows are never updated; the log doubles as chat UI history and as the
    conversation context replayed to the LLM.
    """

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    session_id = Column(String(255))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
