from datetime import datetime
from typing import Any, Dict, List, Literal
from pydantic import BaseModel, Field, field_serializer, model_validator

from sukejuru.utils.app_utils import format_iso

HoursPerWeek = Literal["<3h", "3-5h", "5-10h", ">10h"]
YesNoSomewhat = Literal["Yes", "No", "Somewhat"]


class CourseWithStats(BaseModel):
    """A catalog course joined with aggregated evaluation statistics."""

    id: str
    course: str
    short_name: str
    semester: int | None = None
    level: str | None = None
    lecture_credits: float | None = None
    exercise_credits: float | None = None
    lecture: Any = None
    exercise: Any = None
    description: str | None = None
    study_topics: List[str] | None = None
    learning_outcomes: List[str] | None = None
    related_fields: List[str] | None = None
    career_paths: List[str] | None = None
    top_companies: Dict[str, List[str]] | None = None

    total_evaluations: int = 0
    avg_content_clarity: float = 0
    avg_content_interest: float = 0
    avg_materials_helpful: float = 0
    avg_instructor_clarity: float = 0
    avg_overall_satisfaction: float = 0
    avg_feedback_helpful: float = 0
    teaching_engaging_yes_percent: float = 0
    grading_transparent_yes_percent: float = 0
    received_feedback_percent: float = 0
    hours_distribution: Dict[str, float] = Field(default_factory=dict)
    user_has_evaluated: bool = False


class CourseListResponse(BaseModel):
    courses: List[CourseWithStats]


class CourseImportResponse(BaseModel):
    count: int = Field(description="Number of catalog rows written")


class EvaluationRequest(BaseModel):
    """One student's evaluation of a course; ratings are on a 1-5 scale."""

    content_clarity: int = Field(ge=1, le=5)
    content_interest: int = Field(ge=1, le=5)
    materials_helpful: int = Field(ge=1, le=5)
    hours_per_week: HoursPerWeek
    instructor_clarity: int = Field(ge=1, le=5)
    teaching_engaging: YesNoSomewhat
    grading_transparent: YesNoSomewhat
    received_feedback: bool
    feedback_helpful: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Only meaningful when received_feedback is true"
    )
    overall_satisfaction: int = Field(ge=1, le=5)
    would_recommend: bool
    what_learned: str | None = None
    advice_future_students: str | None = None
    liked_most: str | None = None
    would_improve: str | None = None

    @model_validator(mode="after")
    def drop_feedback_rating_without_feedback(self):
        if not self.received_feedback:
            self.feedback_helpful = None
        return self


class Evaluation(EvaluationRequest):
    id: int
    course_id: str
    user_id: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return format_iso(value)

    class Config:
        from_attributes = True


class EvaluationResponse(BaseModel):
    evaluation: Evaluation


class PublicEvaluation(BaseModel):
    """The parts of an evaluation shown to other students."""

    liked_most: str | None = None
    would_improve: str | None = None
    overall_satisfaction: int
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return format_iso(value)

    class Config:
        from_attributes = True


class PublicEvaluationListResponse(BaseModel):
    evaluations: List[PublicEvaluation]


class ForumMessage(BaseModel):
    id: str
    course_id: str
    sender_id: str | None = None
    sender_name: str
    content: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return format_iso(value)

    class Config:
        from_attributes = True


class ForumMessageRequest(BaseModel):
    content: str = Field(min_length=1)


class ForumMessageListResponse(BaseModel):
    messages: List[ForumMessage]


class ForumMessageResponse(BaseModel):
    message: ForumMessage


class RecommendationRequest(BaseModel):
    query: str = Field(min_length=1, examples=["I want to work in robotics"])
    field: str | None = None
    workloadPreference: Literal["low", "medium", "high"] | None = None
    careerPath: str | None = None


class Recommendation(BaseModel):
    type: Literal["field_recommendation", "workload_analysis", "general_recommendation"]
    field: str | None = None
    recommendedCourses: List[CourseWithStats]
    explanation: str
    careerPaths: List[str] | None = None
    workloadTips: List[str] | None = None
    generalTips: List[str] | None = None


class RecommendationResponse(BaseModel):
    success: bool = True
    query: str
    recommendations: Recommendation
    totalCourses: int
    availableCourses: int


class CourseDataSummary(BaseModel):
    totalCourses: int
    lastUpdated: str
    hasEvaluations: bool


class AiInstructionsResponse(BaseModel):
    success: bool = True
    instructions: str
    hasCourseData: bool
    courseDataSummary: CourseDataSummary | None = None
    timestamp: str
