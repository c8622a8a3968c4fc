import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from sukejuru.apis.courses.models import (
    CourseDataSummary,
    CourseWithStats,
    EvaluationRequest,
    Recommendation,
)
from sukejuru.apis.models import User
from sukejuru.config import app_cfg
from sukejuru.db.courses.crud import (
    create_evaluation,
    get_course,
    get_course_statistics,
    get_evaluated_course_ids,
    get_evaluation,
    list_courses,
    upsert_courses,
)
from sukejuru.db.courses.models import CourseEvaluation
from sukejuru.db.forum.crud import create_forum_message
from sukejuru.db.forum.models import ForumMessage
from sukejuru.db.profiles.crud import get_profile
from sukejuru.exceptions import ConflictError, InvalidRequestError, NotFoundError
from sukejuru.instructions import course_catalog_summary, persona_prompt
from sukejuru.utils.app_utils import format_iso, utc_now
from sukejuru.utils.reference_data import course_to_dict, read_json_file

logger = logging.getLogger(__name__)

_ROBOTICS_COURSE_WORDS = ("mechanic", "electric", "control", "programming")
_ROBOTICS_FIELD_WORDS = ("engineering", "programming")


def _contains(text: str | None, needle: str) -> bool:
    return bool(text) and needle.lower() in text.lower()


def _fields_mention(course: CourseWithStats, *needles: str) -> bool:
    return any(_contains(field, needle) for field in course.related_fields or [] for needle in needles)


class CoursesService:
    """Course catalog, evaluation statistics and keyword-driven recommendations."""

    def __init__(self):
        logger.info("CoursesService initialized")

    def courses_with_stats(self, user_id: str | None = None) -> List[CourseWithStats]:
        """Every catalog course with its statistics, ordered by level then short name."""
        statistics = get_course_statistics()
        evaluated = get_evaluated_course_ids(user_id) if user_id else set()

        return [
            CourseWithStats(
                **course_to_dict(course),
                **statistics.get(course.id, {}),
                user_has_evaluated=course.id in evaluated
            )
            for course in list_courses()
        ]

    def search_courses(self, user_id: str, search: str | None, level: str | None) -> List[CourseWithStats]:
        courses = self.courses_with_stats(user_id)
        if search:
            courses = [
                course for course in courses
                if _contains(course.course, search)
                or _contains(course.short_name, search)
                or _contains(course.description, search)
            ]
        if level:
            courses = [course for course in courses if (course.level or "").lower() == level.lower()]
        return courses

    def import_catalog(self) -> int:
        """
        Upsert every course of the catalog file, keyed by short name.

        Raises:
            OSError: The catalog file cannot be read
            InvalidRequestError: The catalog is not a list of courses
        """
        rows = read_json_file(app_cfg.COURSES_FILE)

        if not isinstance(rows, list) or any("short_name" not in row for row in rows):
            raise InvalidRequestError("Course catalog must be a list of courses with short_name")

        count = upsert_courses(rows)
        logger.info(f"Imported {count} courses from {app_cfg.COURSES_FILE}")
        return count

    def submit_evaluation(self, course_id: str, user_id: str, evaluation: EvaluationRequest) -> CourseEvaluation:
        """
        Raises:
            NotFoundError: The course does not exist
            ConflictError: The user already evaluated this course
        """
        if get_course(course_id) is None:
            raise NotFoundError("Course not found")
        if get_evaluation(course_id, user_id) is not None:
            raise ConflictError("You have already evaluated this course")

        try:
            return create_evaluation(course_id, user_id, evaluation.model_dump())
        except IntegrityError:
            # lost a race against a concurrent submission
            raise ConflictError("You have already evaluated this course")

    def post_forum_message(self, course_id: str, user: User, content: str) -> ForumMessage:
        if get_course(course_id) is None:
            raise NotFoundError("Course not found")

        profile = get_profile(user.id)
        sender_name = (profile.name if profile else None) or user.email or "Anonymous"
        return create_forum_message(course_id, user.id, sender_name, content.strip())

    def recommend(
        self,
        query: str,
        field: str | None = None,
        workload_preference: str | None = None
    ) -> tuple[Recommendation, int, int]:
        """
        Keyword-driven recommendation over the catalog.

        Returns:
            Tuple of (recommendation, number of courses after filters, catalog size)
        """
        available = self.courses_with_stats()
        courses = available

        if field:
            courses = [
                course for course in courses
                if _fields_mention(course, field)
                or _contains(course.course, field)
                or _contains(course.description, field)
            ]
        if workload_preference:
            courses = [course for course in courses if self._fits_workload(course, workload_preference)]

        lowered = query.lower()
        if "robot" in lowered:
            recommendation = Recommendation(
                type="field_recommendation",
                field="Robotics",
                recommendedCourses=[
                    course for course in courses
                    if any(_contains(course.course, word) for word in _ROBOTICS_COURSE_WORDS)
                    or _fields_mention(course, *_ROBOTICS_FIELD_WORDS)
                ][:5],
                explanation=(
                    "For robotics, I recommend courses that combine mechanical engineering, "
                    "electrical systems, and programming skills."
                ),
                careerPaths=["Robotics Engineer", "Automation Specialist", "Mechatronics Engineer"]
            )
        elif "chemistry" in lowered and "workload" in lowered:
            chemistry = sorted(
                [
                    course for course in courses
                    if _contains(course.course, "chem") or _fields_mention(course, "chemistry")
                ],
                key=lambda course: course.avg_instructor_clarity
            )
            recommendation = Recommendation(
                type="workload_analysis",
                field="Chemistry",
                recommendedCourses=chemistry[:3],
                explanation=(
                    "Based on student evaluations, these chemistry-related courses have more "
                    "manageable workloads with higher instructor clarity ratings."
                ),
                workloadTips=[
                    "Look for courses with high instructor clarity ratings (4+ stars)",
                    "Check the hours per week distribution in student feedback",
                    "Consider taking prerequisites to build a strong foundation",
                ]
            )
        else:
            recommendation = Recommendation(
                type="general_recommendation",
                recommendedCourses=sorted(
                    [course for course in courses if course.total_evaluations > 0],
                    key=lambda course: course.avg_overall_satisfaction,
                    reverse=True
                )[:5],
                explanation="Here are the top-rated courses based on student evaluations and your query.",
                generalTips=[
                    "Consider your career goals and interests",
                    "Check prerequisite requirements",
                    "Balance challenging and manageable courses each semester",
                    "Look at student feedback for insights on workload and teaching quality",
                ]
            )

        return recommendation, len(courses), len(available)

    def advisor_instructions(self) -> tuple[str, CourseDataSummary | None]:
        """Persona prompt plus a catalog summary, when the catalog is not empty."""
        instructions = persona_prompt(f"{app_cfg.APP_NAME} AI Advisor", app_cfg.DEFAULT_TIMEZONE)
        courses = self.courses_with_stats()
        if not courses:
            return instructions, None

        summary = course_catalog_summary([course.model_dump() for course in courses])
        return f"{instructions}\n{summary}", CourseDataSummary(
            totalCourses=len(courses),
            lastUpdated=format_iso(utc_now()),
            hasEvaluations=any(course.total_evaluations > 0 for course in courses)
        )

    @staticmethod
    def _fits_workload(course: CourseWithStats, preference: str) -> bool:
        """Instructor clarity stands in for workload; unrated courses always fit."""
        if course.total_evaluations == 0:
            return True
        clarity = course.avg_instructor_clarity
        if preference == "low":
            return clarity >= 4
        if preference == "medium":
            return 3 <= clarity < 4
        return clarity < 3


_courses_service_instance = None


def get_courses_service() -> CoursesService:
    """Get or create courses service singleton instance."""
    global _courses_service_instance

    if _courses_service_instance is None:
        _courses_service_instance = CoursesService()

    return _courses_service_instance
