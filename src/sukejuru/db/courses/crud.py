from typing import List

from sqlalchemy import case, func

from sukejuru.constants import HOURS_PER_WEEK_BUCKETS
from sukejuru.db.base import DatabaseSession
from sukejuru.db.courses.models import Course, CourseEvaluation

_COURSE_FIELDS = (
    "course", "short_name", "semester", "level", "lecture_credits", "exercise_credits",
    "lecture", "exercise", "description", "study_topics", "learning_outcomes",
    "related_fields", "career_paths", "top_companies",
)
_RATING_FIELDS = (
    "content_clarity", "content_interest", "materials_helpful",
    "instructor_clarity", "overall_satisfaction", "feedback_helpful",
)


def upsert_courses(rows: List[dict]) -> int:
    """
    Insert or update catalog rows keyed by short name.

    Returns:
        Number of rows written
    """
    with DatabaseSession() as db_session:
        for row in rows:
            course_id = row["short_name"]
            course = db_session.get(Course, course_id)
            if course is None:
                course = Course(id=course_id)
                db_session.add(course)
            for name in _COURSE_FIELDS:
                if name in row:
                    setattr(course, name, row[name])
        db_session.commit()
        return len(rows)


def list_courses() -> List[Course]:
    with DatabaseSession() as db_session:
        return db_session.query(Course).order_by(Course.level, Course.short_name).all()


def get_course(course_id: str) -> Course | None:
    with DatabaseSession() as db_session:
        return db_session.get(Course, course_id)


def _count_matching(column, value):
    return func.sum(case((column == value, 1), else_=0))


def get_course_statistics() -> dict[str, dict]:
    """
    Aggregate evaluation statistics per course (the courses_with_stats view).

    Returns:
        Mapping of course_id to a statistics dict; courses without evaluations are absent
    """
    with DatabaseSession() as db_session:
        rows = db_session.query(
            CourseEvaluation.course_id,
            func.count(CourseEvaluation.id),
            *[func.avg(getattr(CourseEvaluation, name)) for name in _RATING_FIELDS],
            _count_matching(CourseEvaluation.teaching_engaging, "Yes"),
            _count_matching(CourseEvaluation.grading_transparent, "Yes"),
            _count_matching(CourseEvaluation.received_feedback, True),
            *[_count_matching(CourseEvaluation.hours_per_week, bucket) for bucket in HOURS_PER_WEEK_BUCKETS],
        ).group_by(CourseEvaluation.course_id).all()

    statistics = {}
    for row in rows:
        course_id, total = row[0], row[1]
        averages = row[2:2 + len(_RATING_FIELDS)]
        engaging_yes, transparent_yes, received = row[2 + len(_RATING_FIELDS):5 + len(_RATING_FIELDS)]
        hours = row[5 + len(_RATING_FIELDS):]

        stats = {"total_evaluations": total}
        for name, value in zip(_RATING_FIELDS, averages):
            stats[f"avg_{name}"] = round(float(value), 2) if value is not None else 0
        stats["teaching_engaging_yes_percent"] = _percent(engaging_yes, total)
        stats["grading_transparent_yes_percent"] = _percent(transparent_yes, total)
        stats["received_feedback_percent"] = _percent(received, total)
        stats["hours_distribution"] = {
            bucket: _percent(count, total) for bucket, count in zip(HOURS_PER_WEEK_BUCKETS, hours)
        }
        statistics[course_id] = stats

    return statistics


def _percent(count, total) -> float:
    if not total:
        return 0
    return round(100.0 * (count or 0) / total, 1)


def get_evaluated_course_ids(user_id: str) -> set[str]:
    with DatabaseSession() as db_session:
        rows = db_session.query(CourseEvaluation.course_id).filter(
            CourseEvaluation.user_id == user_id
        ).all()
        return {row[0] for row in rows}


def get_evaluation(course_id: str, user_id: str) -> CourseEvaluation | None:
    with DatabaseSession() as db_session:
        return db_session.query(CourseEvaluation).filter(
            CourseEvaluation.course_id == course_id,
            CourseEvaluation.user_id == user_id
        ).first()


def create_evaluation(course_id: str, user_id: str, fields: dict) -> CourseEvaluation:
    """
    Store a course evaluation.

    Raises:
        sqlalchemy.exc.IntegrityError: If the user already evaluated this course
    """
    with DatabaseSession() as db_session:
        evaluation = CourseEvaluation(**{**fields, "course_id": course_id, "user_id": user_id})
        db_session.add(evaluation)
        db_session.commit()
        db_session.refresh(evaluation)
        return evaluation


def list_evaluations(course_id: str) -> List[CourseEvaluation]:
    with DatabaseSession() as db_session:
        return db_session.query(CourseEvaluation).filter(
            CourseEvaluation.course_id == course_id
        ).order_by(CourseEvaluation.created_at.desc()).all()
