from datetime import datetime
from typing import List

from sqlalchemy import or_

from sukejuru.db.base import DatabaseSession, contains_pattern
from sukejuru.db.events.models import Event
from sukejuru.utils.app_utils import to_utc

_DATETIME_FIELDS = ("start_date", "end_date")
_UPDATABLE_FIELDS = (
    "title", "description", "start_date", "end_date", "all_day",
    "color", "background_color", "extended_props",
)


def _normalize(fields: dict) -> dict:
    normalized = dict(fields)
    for name in _DATETIME_FIELDS:
        if isinstance(normalized.get(name), datetime):
            normalized[name] = to_utc(normalized[name])
    return normalized


def list_events(user_id: str, start_from: datetime | None = None) -> List[Event]:
    """
    Get a user's events ordered by start date.

    Args:
        user_id: Owner of the events
        start_from: Only return events starting at or after this instant

    Returns:
        List of Event instances
    """
    with DatabaseSession() as db_session:
        query = db_session.query(Event).filter(Event.user_id == user_id)
        if start_from is not None:
            query = query.filter(Event.start_date >= to_utc(start_from))
        return query.order_by(Event.start_date).all()


def get_events_by_ids(user_id: str, event_ids: List[str]) -> List[Event]:
    with DatabaseSession() as db_session:
        return db_session.query(Event).filter(
            Event.user_id == user_id,
            Event.id.in_(event_ids)
        ).order_by(Event.start_date).all()


def create_events(user_id: str, rows: List[dict]) -> List[Event]:
    """Insert several events for one user in a single transaction."""
    with DatabaseSession() as db_session:
        events = [Event(**{**_normalize(row), "user_id": user_id}) for row in rows]
        db_session.add_all(events)
        db_session.commit()
        return events


def create_event(user_id: str, fields: dict) -> Event:
    return create_events(user_id, [fields])[0]


def update_event(user_id: str, event_id: str, updates: dict) -> Event | None:
    """
    Update the given fields of one of the user's events.

    Returns:
        The updated Event, or None if the user owns no event with that id
    """
    with DatabaseSession() as db_session:
        event = db_session.query(Event).filter(
            Event.id == event_id,
            Event.user_id == user_id
        ).first()

        if event is None:
            return None

        for name, value in _normalize(updates).items():
            if name in _UPDATABLE_FIELDS:
                setattr(event, name, value)

        db_session.commit()
        db_session.refresh(event)
        return event


def delete_events_by_ids(user_id: str, event_ids: List[str]) -> int:
    """Delete the user's events with the given ids; returns the number of rows removed."""
    if not event_ids:
        return 0

    with DatabaseSession() as db_session:
        deleted = db_session.query(Event).filter(
            Event.user_id == user_id,
            Event.id.in_(event_ids)
        ).delete(synchronize_session=False)
        db_session.commit()
        return deleted


def find_events(
    user_id: str,
    title_contains: str | None = None,
    exact_title: str | None = None,
    start_from: datetime | None = None,
    start_before: datetime | None = None,
    created_since: datetime | None = None,
) -> List[Event]:
    """
    Select a user's events by compound criteria.

    Args:
        user_id: Owner of the events
        title_contains: Case-insensitive title substring
        exact_title: Exact title match
        start_from: Inclusive lower bound on start_date
        start_before: Exclusive upper bound on start_date
        created_since: Inclusive lower bound on created_at

    Returns:
        Matching events ordered by start date
    """
    with DatabaseSession() as db_session:
        query = db_session.query(Event).filter(Event.user_id == user_id)

        if title_contains:
            query = query.filter(Event.title.ilike(contains_pattern(title_contains), escape="\\"))
        if exact_title:
            query = query.filter(Event.title == exact_title)
        if start_from is not None:
            query = query.filter(Event.start_date >= to_utc(start_from))
        if start_before is not None:
            query = query.filter(Event.start_date < to_utc(start_before))
        if created_since is not None:
            query = query.filter(Event.created_at >= to_utc(created_since))

        return query.order_by(Event.start_date).all()


def search_events_text(user_id: str, needles: List[str]) -> List[Event]:
    """Events whose title or description contains any needle (case-insensitive)."""
    if not needles:
        return []

    with DatabaseSession() as db_session:
        conditions = []
        for needle in needles:
            pattern = contains_pattern(needle)
            conditions.append(Event.title.ilike(pattern, escape="\\"))
            conditions.append(Event.description.ilike(pattern, escape="\\"))

        return db_session.query(Event).filter(
            Event.user_id == user_id,
            or_(*conditions)
        ).all()
