import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Tuple

from sukejuru.config import app_cfg
from sukejuru.db.courses.crud import list_courses
from sukejuru.db.courses.models import Course

logger = logging.getLogger(__name__)

COURSE_COLUMNS = (
    "id", "course", "short_name", "semester", "level", "lecture_credits", "exercise_credits",
    "lecture", "exercise", "description", "study_topics", "learning_outcomes",
    "related_fields", "career_paths", "top_companies",
)


def read_json_file(path: str):
    """
    Read a JSON reference file; relative paths resolve against the working directory.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
    """
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def course_to_dict(course: Course) -> dict:
    return {name: getattr(course, name) for name in COURSE_COLUMNS}


def load_reference_data() -> Tuple[List[dict], List[dict]]:
    """
    Course catalog and semester calendar, re-read on every call.

    If either file is unreadable the catalog falls back to the courses table
    and the semester list is empty.

    Returns:
        Tuple of (courses, semesters)
    """
    try:
        courses = read_json_file(app_cfg.COURSES_FILE)
        semesters = read_json_file(app_cfg.SEMESTERS_FILE)
        return courses, semesters
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read reference files, falling back to the courses table: {e}")

    return [course_to_dict(course) for course in list_courses()], []


def current_semester(semesters: List[dict], today: date) -> dict | None:
    """The semester whose date range contains `today`, else the first one listed."""
    for semester in semesters:
        try:
            start = date.fromisoformat(str(semester["start_date"])[:10])
            end = date.fromisoformat(str(semester["end_date"])[:10])
        except (KeyError, ValueError):
            continue
        if start <= today <= end:
            return semester
    return semesters[0] if semesters else None
