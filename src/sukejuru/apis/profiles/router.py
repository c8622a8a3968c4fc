import logging
from fastapi import APIRouter, HTTPException, Depends
from typing import Annotated

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.models import User
from sukejuru.apis.profiles.models import Profile, ProfileResponse, ProfileUpdateRequest
from sukejuru.db.profiles.crud import get_profile, upsert_profile

logger = logging.getLogger(__name__)

profiles_router = APIRouter(prefix="/profile", tags=["Profile"])


@profiles_router.get(
    "",
    response_model=ProfileResponse,
    summary="The user's profile, or null before it is first saved"
)
async def read_profile(user: Annotated[User, Depends(user_authorization)]) -> ProfileResponse:
    try:
        profile = get_profile(user.id)
        return ProfileResponse(profile=Profile.model_validate(profile) if profile else None)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Reading profile of user {user.id}")


@profiles_router.put(
    "",
    response_model=ProfileResponse,
    summary="Create or update the user's profile",
    description="Only the fields present in the body change; the email always follows the auth service."
)
async def write_profile(
    body: ProfileUpdateRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> ProfileResponse:
    try:
        fields = body.model_dump(exclude_unset=True)
        if user.email:
            fields["email"] = user.email
        profile = upsert_profile(user.id, fields)
        logger.info(f"Saved profile of user {user.id}")
        return ProfileResponse(profile=Profile.model_validate(profile))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Saving profile of user {user.id}")
