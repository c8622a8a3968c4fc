from datetime import datetime
from typing import List

from sqlalchemy import or_

from sukejuru.db.base import DatabaseSession, contains_pattern
from sukejuru.db.assignments.models import Assignment
from sukejuru.utils.app_utils import to_utc

_UPDATABLE_FIELDS = (
    "title", "description", "due_date", "due_time", "course",
    "type", "completed", "priority",
)


def list_assignments(user_id: str) -> List[Assignment]:
    """Get a user's assignments ordered by due date."""
    with DatabaseSession() as db_session:
        return db_session.query(Assignment).filter(
            Assignment.user_id == user_id
        ).order_by(Assignment.due_date, Assignment.due_time).all()


def create_assignments(user_id: str, rows: List[dict]) -> List[Assignment]:
    """Insert several assignments for one user; new rows always start incomplete."""
    with DatabaseSession() as db_session:
        assignments = [
            Assignment(**{**row, "user_id": user_id, "completed": False})
            for row in rows
        ]
        db_session.add_all(assignments)
        db_session.commit()
        return assignments


def update_assignment(user_id: str, assignment_id: str, updates: dict) -> Assignment | None:
    with DatabaseSession() as db_session:
        assignment = db_session.query(Assignment).filter(
            Assignment.id == assignment_id,
            Assignment.user_id == user_id
        ).first()

        if assignment is None:
            return None

        for name, value in updates.items():
            if name in _UPDATABLE_FIELDS:
                setattr(assignment, name, value)

        db_session.commit()
        db_session.refresh(assignment)
        return assignment


def delete_assignments_by_ids(user_id: str, assignment_ids: List[str]) -> int:
    if not assignment_ids:
        return 0

    with DatabaseSession() as db_session:
        deleted = db_session.query(Assignment).filter(
            Assignment.user_id == user_id,
            Assignment.id.in_(assignment_ids)
        ).delete(synchronize_session=False)
        db_session.commit()
        return deleted


def find_assignments_created_since(user_id: str, since: datetime) -> List[Assignment]:
    with DatabaseSession() as db_session:
        return db_session.query(Assignment).filter(
            Assignment.user_id == user_id,
            Assignment.created_at >= to_utc(since)
        ).all()


def search_assignments_text(user_id: str, needles: List[str]) -> List[Assignment]:
    """Assignments whose course, title or description contains any needle (case-insensitive)."""
    if not needles:
        return []

    with DatabaseSession() as db_session:
        conditions = []
        for needle in needles:
            pattern = contains_pattern(needle)
            conditions.append(Assignment.course.ilike(pattern, escape="\\"))
            conditions.append(Assignment.title.ilike(pattern, escape="\\"))
            conditions.append(Assignment.description.ilike(pattern, escape="\\"))

        return db_session.query(Assignment).filter(
            Assignment.user_id == user_id,
            or_(*conditions)
        ).all()
