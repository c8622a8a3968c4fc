from datetime import datetime

from sukejuru.db.base import DatabaseSession
from sukejuru.db.google.models import GoogleToken, GoogleOAuthState
from sukejuru.utils.app_utils import to_utc


def create_oauth_state(state: str, user_id: str) -> GoogleOAuthState:
    with DatabaseSession() as db_session:
        row = GoogleOAuthState(state=state, user_id=user_id)
        db_session.add(row)
        db_session.commit()
        return row


def get_oauth_state(state: str) -> GoogleOAuthState | None:
    with DatabaseSession() as db_session:
        return db_session.get(GoogleOAuthState, state)


def delete_oauth_state(state: str) -> None:
    with DatabaseSession() as db_session:
        db_session.query(GoogleOAuthState).filter(GoogleOAuthState.state == state).delete()
        db_session.commit()


def get_token(user_id: str) -> GoogleToken | None:
    with DatabaseSession() as db_session:
        return db_session.get(GoogleToken, user_id)


def upsert_token(
    user_id: str,
    access_token: str | None,
    refresh_token: str | None = None,
    scope: str | None = None,
    token_type: str | None = None,
    expires_at: datetime | None = None,
) -> GoogleToken:
    """
    Insert or replace a user's token row.

    Google omits the refresh token on re-consent, so an existing refresh token
    is kept when none is supplied.
    """
    with DatabaseSession() as db_session:
        token = db_session.get(GoogleToken, user_id)
        if token is None:
            token = GoogleToken(user_id=user_id)
            db_session.add(token)

        token.access_token = access_token
        if refresh_token:
            token.refresh_token = refresh_token
        if scope is not None:
            token.scope = scope
        if token_type is not None:
            token.token_type = token_type
        token.expires_at = to_utc(expires_at)

        db_session.commit()
        db_session.refresh(token)
        return token


def update_access_token(user_id: str, access_token: str, expires_at: datetime) -> GoogleToken | None:
    with DatabaseSession() as db_session:
        token = db_session.get(GoogleToken, user_id)
        if token is None:
            return None

        token.access_token = access_token
        token.expires_at = to_utc(expires_at)
        db_session.commit()
        db_session.refresh(token)
        return token


def delete_token(user_id: str) -> int:
    with DatabaseSession() as db_session:
        deleted = db_session.query(GoogleToken).filter(GoogleToken.user_id == user_id).delete()
        db_session.commit()
        return deleted
