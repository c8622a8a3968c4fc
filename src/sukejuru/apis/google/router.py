import logging
from fastapi import APIRouter, HTTPException, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from typing import Annotated, Optional

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.google.models import ConnectionStatus, ExportRequest, ExportResponse
from sukejuru.apis.google.pages import (
    connected_page,
    invalid_state_page,
    missing_client_id_page,
    missing_service_key_page,
)
from sukejuru.apis.google.service import get_google_service
from sukejuru.apis.models import OkResponse, User
from sukejuru.config import app_cfg

logger = logging.getLogger(__name__)

google_router = APIRouter(tags=["Google Calendar"])


def _require_uid(uid: Optional[str]) -> str:
    if not uid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing uid")
    return uid


@google_router.get(
    "/auth/google/start",
    summary="Redirect to the Google consent screen",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT
)
async def google_start(uid: Optional[str] = Query(default=None, description="User id to connect")):
    user_id = _require_uid(uid)

    if not app_cfg.SUPABASE_SERVICE_ROLE_KEY:
        logger.error("Missing SUPABASE_SERVICE_ROLE_KEY; cannot persist OAuth state")
        return HTMLResponse(missing_service_key_page(), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if not app_cfg.GOOGLE_CLIENT_ID:
        logger.error("Missing GOOGLE_CLIENT_ID; cannot build the consent URL")
        return HTMLResponse(
            missing_client_id_page(app_cfg.GOOGLE_REDIRECT_URI),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    try:
        url = get_google_service().start(user_id)
    except Exception as e:
        raise http_error_from(e, "Persisting OAuth state")

    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@google_router.get(
    "/auth/google/callback",
    summary="Google OAuth redirect target",
    response_class=HTMLResponse
)
async def google_callback(
    request: Request,
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None)
):
    if not code or not state:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing code or state")

    try:
        user_id = await get_google_service().complete(request.app.state.http_client, code, state)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Google OAuth callback")

    if user_id is None:
        return HTMLResponse(invalid_state_page(state), status_code=status.HTTP_400_BAD_REQUEST)
    return HTMLResponse(connected_page(user_id))


@google_router.post(
    "/auth/google/logout",
    response_model=OkResponse,
    summary="Revoke and forget the user's Google tokens"
)
async def google_logout(
    request: Request,
    uid: Optional[str] = Query(default=None)
) -> OkResponse:
    user_id = _require_uid(uid)
    try:
        await get_google_service().disconnect(request.app.state.http_client, user_id)
        return OkResponse()
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Disconnecting Google account of user {user_id}")


@google_router.get(
    "/auth/google/status",
    response_model=ConnectionStatus,
    response_model_exclude_none=True,
    summary="Whether the user has connected a Google account"
)
async def google_status(uid: Optional[str] = Query(default=None)) -> ConnectionStatus:
    user_id = _require_uid(uid)
    try:
        return get_google_service().status(user_id)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Google connection status of user {user_id}")


@google_router.post(
    "/export/google",
    response_model=ExportResponse,
    summary="Copy the user's events to their primary Google Calendar",
    description=(
        "Refreshes an expired access token once before any Calendar call. "
        "Events that Google rejects are listed under `failed`."
    )
)
async def export_to_google(
    request: Request,
    user: Annotated[User, Depends(user_authorization)],
    body: ExportRequest | None = None
) -> ExportResponse:
    body = body or ExportRequest()
    if body.user_id and body.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot export another user's events")

    try:
        return await get_google_service().export(request.app.state.http_client, user.id, body.eventIds)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Exporting events of user {user.id}")
