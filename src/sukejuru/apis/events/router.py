import logging
from fastapi import APIRouter, HTTPException, Depends
from typing import Annotated

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.events.models import (
    ApplyEventsRequest,
    ApplyEventsResponse,
    ApplyOptimizationRequest,
    ApplyOptimizationResponse,
    Event,
    EventDeleteRequest,
    EventFields,
    EventListResponse,
    EventResponse,
    EventUpdateRequest,
)
from sukejuru.apis.events.service import get_events_service
from sukejuru.apis.models import OkResponse, User
from sukejuru.db.events.crud import create_event, delete_events_by_ids, list_events, update_event

logger = logging.getLogger(__name__)

events_router = APIRouter(tags=["Events"])


@events_router.get(
    "/events",
    response_model=EventListResponse,
    summary="List the user's events ordered by start date"
)
async def get_events(user: Annotated[User, Depends(user_authorization)]) -> EventListResponse:
    try:
        events = list_events(user.id)
        return EventListResponse(events=[Event.model_validate(event) for event in events])
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Listing events for user {user.id}")


@events_router.post(
    "/events",
    response_model=EventResponse,
    summary="Create one event"
)
async def post_event(
    body: EventFields,
    user: Annotated[User, Depends(user_authorization)]
) -> EventResponse:
    try:
        event = create_event(user.id, body.model_dump())
        logger.info(f"Created event {event.id} for user {user.id}")
        return EventResponse(event=Event.model_validate(event))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Creating event for user {user.id}")


@events_router.put(
    "/events",
    response_model=EventResponse,
    summary="Update fields of one event"
)
async def put_event(
    body: EventUpdateRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> EventResponse:
    try:
        event = update_event(user.id, body.id, body.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"}))
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")
        return EventResponse(event=Event.model_validate(event))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Updating event {body.id}")


@events_router.delete(
    "/events",
    response_model=OkResponse,
    summary="Delete one event"
)
async def delete_event(
    body: EventDeleteRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> OkResponse:
    try:
        delete_events_by_ids(user.id, [body.id])
        return OkResponse()
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Deleting event {body.id}")


@events_router.post(
    "/apply-events",
    response_model=ApplyEventsResponse,
    response_model_exclude_none=True,
    summary="Apply a calendar action",
    description="create, bulk-create, update, delete or bulk-delete (by title, date range and weekday criteria)"
)
async def apply_events(
    body: ApplyEventsRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> ApplyEventsResponse:
    try:
        logger.info(f"Applying calendar action {body.action} for user {user.id}")
        return get_events_service().apply_events(user.id, body)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Calendar action {body.action}")


@events_router.post(
    "/apply-optimization",
    response_model=ApplyOptimizationResponse,
    summary="Create events from schedule optimizer blocks"
)
async def apply_optimization(
    body: ApplyOptimizationRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> ApplyOptimizationResponse:
    try:
        return get_events_service().apply_optimization(user.id, body.optimized_blocks)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Applying optimization")
