from sqlalchemy import Column, String, Text, DateTime

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class GoogleToken(Base):
    """SQLAlchemy model for a user's Google Calendar OAuth tokens (one row per user)."""

    __tablename__ = "google_tokens"

    user_id = Column(String(255), primary_key=True)
    access_token = Column(Text)
    refresh_token = Column(Text)
    scope = Column(Text)
    token_type = Column(String(32))
    expires_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)


class GoogleOAuthState(Base):
    """Pending OAuth consent; the random state maps the callback back to the user."""

    __tablename__ = "google_oauth_states"

    state = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
