from typing import List

from sukejuru.db.base import DatabaseSession
from sukejuru.db.forum.models import ForumMessage

FORUM_PAGE_SIZE = 200


def list_forum_messages(course_id: str, limit: int = FORUM_PAGE_SIZE) -> List[ForumMessage]:
    """Oldest-first messages of one course board, capped at `limit`."""
    with DatabaseSession() as db_session:
        return db_session.query(ForumMessage).filter(
            ForumMessage.course_id == course_id
        ).order_by(ForumMessage.created_at).limit(limit).all()


def create_forum_message(course_id: str, sender_id: str | None, sender_name: str, content: str) -> ForumMessage:
    with DatabaseSession() as db_session:
        message = ForumMessage(
            course_id=course_id,
            sender_id=sender_id,
            sender_name=sender_name,
            content=content
        )
        db_session.add(message)
        db_session.commit()
        db_session.refresh(message)
        return message
