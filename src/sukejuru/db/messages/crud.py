from typing import List

from sukejuru.db.base import DatabaseSession
from sukejuru.db.messages.models import Message


def append_messages(user_id: str, entries: List[tuple[str, str]], session_id: str | None = None) -> List[Message]:
    """
    Append (role, content) pairs to a user's chat log in order.

    Args:
        user_id: Owner of the conversation
        entries: List of (role, content) tuples
        session_id: Optional client session identifier

    Returns:
        The stored Message rows
    """
    with DatabaseSession() as db_session:
        messages = [
            Message(user_id=user_id, role=role, content=content, session_id=session_id)
            for role, content in entries
        ]
        for message in messages:
            db_session.add(message)
            # flush per row so created_at defaults follow insertion order
            db_session.flush()
        db_session.commit()
        return messages


def get_messages_by_user_id(user_id: str, limit: int | None = None) -> List[Message]:
    """
    Get a user's chat log in chronological order.

    Args:
        user_id: Owner of the conversation
        limit: When set, only the most recent `limit` messages are returned

    Returns:
        List of Message instances ordered oldest first
    """
    with DatabaseSession() as db_session:
        query = db_session.query(Message).filter(Message.user_id == user_id)
        if limit is None:
            return query.order_by(Message.created_at).all()

        recent = query.order_by(Message.created_at.desc()).limit(limit).all()
        return list(reversed(recent))
