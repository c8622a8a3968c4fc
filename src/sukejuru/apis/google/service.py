import asyncio
import logging
import secrets
from datetime import timedelta
from typing import List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from sukejuru.apis.google.models import ConnectionStatus, ExportFailure, ExportResponse
from sukejuru.config import app_cfg
from sukejuru.constants import (
    GOOGLE_AUTH_URL,
    GOOGLE_CALENDAR_EVENTS_URL,
    GOOGLE_REVOKE_URL,
    GOOGLE_TOKEN_URL,
)
from sukejuru.db.events.crud import get_events_by_ids, list_events
from sukejuru.db.events.models import Event
from sukejuru.db.google.crud import (
    create_oauth_state,
    delete_oauth_state,
    delete_token,
    get_oauth_state,
    get_token,
    update_access_token,
    upsert_token,
)
from sukejuru.db.google.models import GoogleToken
from sukejuru.exceptions import InvalidRequestError, UpstreamError
from sukejuru.utils.app_utils import as_utc, format_iso, utc_now

logger = logging.getLogger(__name__)

# 12 random bytes, hex encoded
OAUTH_STATE_BYTES = 12


def new_oauth_state() -> str:
    return secrets.token_hex(OAUTH_STATE_BYTES)


def consent_url(state: str) -> str:
    params = {
        "client_id": app_cfg.GOOGLE_CLIENT_ID,
        "redirect_uri": app_cfg.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": app_cfg.GOOGLE_CALENDAR_SCOPE,
        "access_type": "offline",
        "prompt": "select_account consent",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def token_expired(token: GoogleToken) -> bool:
    """A token without an access token or expiry counts as expired."""
    if not token.access_token or token.expires_at is None:
        return True
    return as_utc(token.expires_at) <= utc_now()


def calendar_event_body(event: Event) -> dict:
    return {
        "summary": event.title,
        "description": event.description or event.title,
        "start": {"dateTime": format_iso(event.start_date)},
        "end": {"dateTime": format_iso(event.end_date)},
    }


class GoogleCalendarService:
    """
    OAuth connection to a user's Google account and export of events to the primary calendar.

    Every call to Google goes through the shared httpx client handed in by the router.
    """

    def __init__(self, concurrency: int = app_cfg.GOOGLE_EXPORT_CONCURRENCY):
        self.concurrency = max(1, concurrency)
        logger.info(f"GoogleCalendarService initialized with export concurrency {self.concurrency}")

    def start(self, user_id: str) -> str:
        """Persist a fresh state for `user_id` and return the consent screen URL."""
        state = new_oauth_state()
        create_oauth_state(state, user_id)
        logger.info(f"Issued Google OAuth state for user {user_id}")
        return consent_url(state)

    async def complete(self, http_client: httpx.AsyncClient, code: str, state: str) -> Optional[str]:
        """
        Exchange the authorization code and store the tokens of the user who issued `state`.

        Returns:
            The connected user id, or None when the state is unknown

        Raises:
            UpstreamError: Google rejected the code exchange
        """
        state_row = get_oauth_state(state)
        if state_row is None:
            logger.warning(f"Unknown Google OAuth state {state}")
            return None

        payload = await self._token_request(http_client, {
            "code": code,
            "client_id": app_cfg.GOOGLE_CLIENT_ID,
            "client_secret": app_cfg.GOOGLE_CLIENT_SECRET,
            "redirect_uri": app_cfg.GOOGLE_REDIRECT_URI,
            "grant_type": "authorization_code",
        })
        if "error" in payload:
            logger.error(f"Google token exchange error: {payload}")
            raise UpstreamError("Google token exchange failed", status_code=500, body=payload)

        upsert_token(
            state_row.user_id,
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
            token_type=payload.get("token_type"),
            expires_at=utc_now() + timedelta(seconds=payload.get("expires_in") or 0)
        )
        delete_oauth_state(state)
        logger.info(f"Stored Google tokens for user {state_row.user_id}")
        return state_row.user_id

    def status(self, user_id: str) -> ConnectionStatus:
        token = get_token(user_id)
        if token is None:
            return ConnectionStatus(connected=False)
        return ConnectionStatus(connected=True, expires_at=format_iso(token.expires_at))

    async def disconnect(self, http_client: httpx.AsyncClient, user_id: str) -> None:
        """Revoke the user's grant at Google, then forget the tokens; revocation failures are only logged."""
        token = get_token(user_id)
        token_to_revoke = token and (token.refresh_token or token.access_token)

        if token_to_revoke:
            try:
                await http_client.post(
                    GOOGLE_REVOKE_URL,
                    params={"token": token_to_revoke},
                    headers={"Content-Type": "application/x-www-form-urlencoded"}
                )
            except httpx.HTTPError as e:
                logger.warning(f"Failed to call Google revoke endpoint for user {user_id}: {e}")

        delete_token(user_id)
        logger.info(f"Disconnected Google account of user {user_id}")

    async def fresh_access_token(self, http_client: httpx.AsyncClient, user_id: str) -> str:
        """
        The user's access token, refreshed once first if it is missing or expired.

        The refreshed token is persisted before it is returned.

        Raises:
            InvalidRequestError: The user never connected a Google account
            UpstreamError: The refresh failed
        """
        token = get_token(user_id)
        if token is None:
            raise InvalidRequestError("No tokens for user")

        if not token_expired(token):
            return token.access_token

        if not token.refresh_token:
            logger.error(f"Cannot refresh Google token of user {user_id}: no refresh token stored")
            raise UpstreamError("Failed to refresh token", status_code=500)

        try:
            refreshed = await self._token_request(http_client, {
                "client_id": app_cfg.GOOGLE_CLIENT_ID,
                "client_secret": app_cfg.GOOGLE_CLIENT_SECRET,
                "refresh_token": token.refresh_token,
                "grant_type": "refresh_token",
            })
        except UpstreamError as e:
            logger.error(f"Error refreshing Google token of user {user_id}: {e.message}")
            raise UpstreamError("Failed to refresh token", status_code=500)

        if not refreshed.get("access_token"):
            logger.error(f"Refresh failed for user {user_id}: {refreshed}")
            raise UpstreamError("Failed to refresh token", status_code=500)

        update_access_token(
            user_id,
            refreshed["access_token"],
            utc_now() + timedelta(seconds=refreshed.get("expires_in") or 0)
        )
        return refreshed["access_token"]

    async def export(
        self,
        http_client: httpx.AsyncClient,
        user_id: str,
        event_ids: List[str] | None = None
    ) -> ExportResponse:
        """
        Create one Google Calendar entry per event, at most `concurrency` requests in flight.

        Failed events are logged and reported; they are not retried.
        """
        access_token = await self.fresh_access_token(http_client, user_id)
        events = get_events_by_ids(user_id, event_ids) if event_ids is not None else list_events(user_id)
        semaphore = asyncio.Semaphore(self.concurrency)

        export_tasks = [
            self._export_single_event(http_client, access_token, event, semaphore)
            for event in events
        ]
        results = await asyncio.gather(*export_tasks)

        response = ExportResponse()
        for event_id, created, error in results:
            if error is not None:
                response.failed.append(ExportFailure(event_id=event_id, error=error))
                continue
            response.created.append(created)

        logger.info(
            f"Exported {len(response.created)} of {len(events)} events to Google Calendar "
            f"for user {user_id} ({len(response.failed)} failed)"
        )
        return response

    async def _export_single_event(
        self,
        http_client: httpx.AsyncClient,
        access_token: str,
        event: Event,
        semaphore: asyncio.Semaphore
    ) -> Tuple[str, Optional[dict], Optional[str]]:
        """
        Returns:
            Tuple of (event id, created Google event, error message)
        """
        async with semaphore:
            try:
                response = await http_client.post(
                    GOOGLE_CALENDAR_EVENTS_URL,
                    json=calendar_event_body(event),
                    headers={"Authorization": f"Bearer {access_token}"}
                )
            except httpx.HTTPError as e:
                logger.error(f"Failed to create Google event for {event.id}: {e}")
                return event.id, None, str(e) or type(e).__name__

        if response.status_code >= 400:
            logger.error(f"Failed to create Google event for {event.id}: {response.status_code} {response.text}")
            return event.id, None, response.text or f"HTTP {response.status_code}"

        try:
            created = response.json()
        except ValueError:
            created = None
        if not isinstance(created, dict):
            logger.error(f"Unreadable Google Calendar reply for {event.id}: {response.text[:200]}")
            return event.id, None, "Unreadable response from Google Calendar"

        return event.id, created, None

    @staticmethod
    async def _token_request(http_client: httpx.AsyncClient, form: dict) -> dict:
        try:
            response = await http_client.post(GOOGLE_TOKEN_URL, data=form)
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Google token endpoint unavailable: {e}", status_code=500)


_google_service_instance = None


def get_google_service() -> GoogleCalendarService:
    """Get or create Google Calendar service singleton instance."""
    global _google_service_instance

    if _google_service_instance is None:
        _google_service_instance = GoogleCalendarService()

    return _google_service_instance
