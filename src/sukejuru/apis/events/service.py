import logging
from datetime import date, datetime, timedelta
from typing import List

from pydantic import ValidationError

from sukejuru.apis.events.models import (
    ApplyEventsRequest,
    ApplyEventsResponse,
    ApplyOptimizationResponse,
    BulkDeleteCriteria,
    Event,
    EventFields,
    EventUpdateRequest,
    OptimizedBlock,
)
from sukejuru.constants import CalendarAction, OPTIMIZED_BLOCK_COLOR
from sukejuru.db.events.crud import (
    create_events,
    delete_events_by_ids,
    find_events,
    update_event,
)
from sukejuru.exceptions import InvalidRequestError, NotFoundError
from sukejuru.utils.app_utils import (
    app_timezone,
    local_day_bounds,
    local_today,
    local_weekday,
    next_weekday_occurrence,
    parse_suggested_time,
    weekday_index,
)

logger = logging.getLogger(__name__)


def _event_id(draft: dict) -> str | None:
    criteria = draft.get("criteria") or {}
    return criteria.get("id") or draft.get("id")


class EventsService:
    """Applies calendar actions (from the chat client or the optimizer) to the events table."""

    def __init__(self):
        logger.info("EventsService initialized")

    def apply_events(self, user_id: str, request: ApplyEventsRequest) -> ApplyEventsResponse:
        """
        Dispatch one calendar action.

        Raises:
            InvalidRequestError: Unknown action, missing id or invalid event fields
            NotFoundError: The event to update does not belong to the user
        """
        action = request.action
        drafts = request.events or []

        if action in (CalendarAction.CREATE.value, CalendarAction.BULK_CREATE.value):
            rows = [self._validated_fields(draft) for draft in drafts]
            inserted = create_events(user_id, rows) if rows else []
            logger.info(f"Inserted {len(inserted)} events for user {user_id}")
            return ApplyEventsResponse(inserted=len(inserted))

        if action == CalendarAction.UPDATE.value:
            draft = drafts[0] if drafts else {}
            event_id = _event_id(draft)
            if not event_id:
                raise InvalidRequestError("missing id for update")

            try:
                updates = EventUpdateRequest.model_validate({**draft, "id": event_id})
            except ValidationError as e:
                raise InvalidRequestError(f"Invalid event fields: {e.errors()[0]['msg']}")

            event = update_event(user_id, event_id, updates.model_dump(exclude_none=True, exclude={"id"}))
            if event is None:
                raise NotFoundError("Event not found")
            return ApplyEventsResponse(event=Event.model_validate(event))

        if action == CalendarAction.DELETE.value:
            event_id = _event_id(drafts[0]) if drafts else None
            if not event_id:
                raise InvalidRequestError("missing event id")

            delete_events_by_ids(user_id, [event_id])
            return ApplyEventsResponse(deleted=1)

        if action == CalendarAction.BULK_DELETE.value:
            if request.criteria is None:
                raise InvalidRequestError("missing criteria for bulk-delete")
            return ApplyEventsResponse(deleted=self.bulk_delete(user_id, request.criteria))

        raise InvalidRequestError("unknown action")

    def bulk_delete(self, user_id: str, criteria: BulkDeleteCriteria) -> int:
        """
        Delete the user's events matching all given criteria.

        Candidates are selected first and then deleted by id, since the
        weekday filter is evaluated in the application timezone.
        """
        start_from = start_before = None
        if criteria.date_range is not None:
            if criteria.date_range.start:
                start_from = local_day_bounds(criteria.date_range.start)[0]
            if criteria.date_range.end:
                start_before = local_day_bounds(criteria.date_range.end)[1]

        candidates = find_events(
            user_id,
            title_contains=criteria.title_contains,
            exact_title=criteria.exact_title,
            start_from=start_from,
            start_before=start_before,
        )

        if criteria.days:
            target_days = {weekday_index(day) for day in criteria.days} - {None}
            candidates = [event for event in candidates if local_weekday(event.start_date) in target_days]

        deleted = delete_events_by_ids(user_id, [event.id for event in candidates])
        logger.info(f"Bulk-deleted {deleted} events for user {user_id}")
        return deleted

    def apply_optimization(
        self,
        user_id: str,
        blocks: List[OptimizedBlock],
        today: date | None = None
    ) -> ApplyOptimizationResponse:
        """
        Turn optimizer suggestions into events on the next matching weekday.

        Raises:
            InvalidRequestError: A suggested_time cannot be parsed
        """
        today = today or local_today()
        tz = app_timezone()

        rows = []
        for block in blocks:
            try:
                day_name, start_time, end_time = parse_suggested_time(block.suggested_time)
            except ValueError as e:
                raise InvalidRequestError(str(e))

            day = next_weekday_occurrence(day_name, today)
            start = datetime.combine(day, start_time, tzinfo=tz)
            end = datetime.combine(day, end_time, tzinfo=tz)
            if end <= start:
                # block runs past midnight
                end += timedelta(days=1)

            rows.append({
                "title": block.title,
                "description": f"Auto-scheduled: {block.reason or ''}".rstrip(),
                "start_date": start,
                "end_date": end,
                "all_day": False,
                "color": OPTIMIZED_BLOCK_COLOR,
            })

        created = create_events(user_id, rows) if rows else []
        return ApplyOptimizationResponse(
            message=f"Successfully created {len(created)} optimized schedule blocks",
            events=[Event.model_validate(event) for event in created]
        )

    def _validated_fields(self, draft: dict) -> dict:
        try:
            return EventFields.model_validate(draft).model_dump()
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid event fields: {e.errors()[0]['msg']}")


_events_service_instance = None


def get_events_service() -> EventsService:
    """Get or create events service singleton instance."""
    global _events_service_instance

    if _events_service_instance is None:
        _events_service_instance = EventsService()

    return _events_service_instance
