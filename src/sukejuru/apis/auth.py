import logging
from typing import Annotated, Optional

import httpx
from fastapi import Header, HTTPException, Request, status

from sukejuru.apis.models import User
from sukejuru.config import app_cfg

logger = logging.getLogger(__name__)


async def user_authorization(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
) -> User:
    """
    Bearer token authentication dependency.

    The token is validated with a single call to the BaaS auth service
    (`GET /auth/v1/user`); any answer other than 200 rejects the request.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - No token provided"
        )

    token = authorization.split(" ", 1)[1].strip()
    http_client: httpx.AsyncClient = request.app.state.http_client

    try:
        response = await http_client.get(
            f"{app_cfg.NEXT_PUBLIC_SUPABASE_URL.rstrip('/')}/auth/v1/user",
            headers={
                "apikey": app_cfg.NEXT_PUBLIC_SUPABASE_ANON_KEY,
                "Authorization": f"Bearer {token}",
            },
        )
    except httpx.HTTPError as e:
        logger.warning(f"Auth service unreachable: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid token"
        )

    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid token"
        )

    try:
        payload = response.json()
    except ValueError:
        logger.warning("Auth service answered 200 with a non-JSON body")
        payload = None

    if not isinstance(payload, dict) or not payload.get("id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid token"
        )

    return User(id=payload["id"], access_token=token, email=payload.get("email"))
