from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint,
)

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class Course(Base):
    """
    SQLAlchemy model for the course catalog.

    Reference data seeded from the courses JSON file; `id` is the short name.
    """

    __tablename__ = "courses"

    id = Column(String(64), primary_key=True)
    course = Column(String(255), nullable=False)
    short_name = Column(String(64), nullable=False)
    semester = Column(Integer)
    level = Column(String(64))
    lecture_credits = Column(Float, default=0)
    exercise_credits = Column(Float, default=0)
    lecture = Column(JSON)
    exercise = Column(JSON)
    description = Column(Text)
    study_topics = Column(JSON)
    learning_outcomes = Column(JSON)
    related_fields = Column(JSON)
    career_paths = Column(JSON)
    top_companies = Column(JSON)


class CourseEvaluation(Base):
    """SQLAlchemy model for one student's evaluation of one course."""

    __tablename__ = "course_evaluations"
    __table_args__ = (
        UniqueConstraint("course_id", "user_id", name="uq_course_evaluations_course_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(String(64), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)

    content_clarity = Column(Integer, nullable=False)
    content_interest = Column(Integer, nullable=False)
    materials_helpful = Column(Integer, nullable=False)
    hours_per_week = Column(String(8), nullable=False)
    instructor_clarity = Column(Integer, nullable=False)
    teaching_engaging = Column(String(10), nullable=False)
    grading_transparent = Column(String(10), nullable=False)
    received_feedback = Column(Boolean, nullable=False)
    feedback_helpful = Column(Integer)
    overall_satisfaction = Column(Integer, nullable=False)
    would_recommend = Column(Boolean, nullable=False)
    what_learned = Column(Text)
    advice_future_students = Column(Text)
    liked_most = Column(Text)
    would_improve = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
