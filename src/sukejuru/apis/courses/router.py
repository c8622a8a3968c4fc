import logging
from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Annotated, Optional

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.courses.models import (
    AiInstructionsResponse,
    CourseImportResponse,
    CourseListResponse,
    Evaluation,
    EvaluationRequest,
    EvaluationResponse,
    ForumMessage,
    ForumMessageListResponse,
    ForumMessageRequest,
    ForumMessageResponse,
    PublicEvaluation,
    PublicEvaluationListResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from sukejuru.apis.courses.service import get_courses_service
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.models import User
from sukejuru.db.courses.crud import list_evaluations
from sukejuru.db.forum.crud import list_forum_messages
from sukejuru.utils.app_utils import format_iso, utc_now

logger = logging.getLogger(__name__)

courses_router = APIRouter(tags=["Courses"])


@courses_router.get(
    "/courses",
    response_model=CourseListResponse,
    summary="List catalog courses with evaluation statistics"
)
async def get_courses(
    user: Annotated[User, Depends(user_authorization)],
    search: Optional[str] = Query(default=None, description="Case-insensitive match on name or short name"),
    level: Optional[str] = Query(default=None, description="Exact course level, e.g. Bachelor")
) -> CourseListResponse:
    try:
        return CourseListResponse(courses=get_courses_service().search_courses(user.id, search, level))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Listing courses")


@courses_router.post(
    "/courses/import",
    response_model=CourseImportResponse,
    summary="Load the course catalog file into the store"
)
async def import_courses(user: Annotated[User, Depends(user_authorization)]) -> CourseImportResponse:
    try:
        return CourseImportResponse(count=get_courses_service().import_catalog())
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Importing course catalog")


@courses_router.get(
    "/courses/{course_id}/evaluations",
    response_model=PublicEvaluationListResponse,
    summary="Public comments and satisfaction ratings for a course"
)
async def get_course_evaluations(
    course_id: str,
    user: Annotated[User, Depends(user_authorization)]
) -> PublicEvaluationListResponse:
    try:
        evaluations = list_evaluations(course_id)
        return PublicEvaluationListResponse(
            evaluations=[PublicEvaluation.model_validate(evaluation) for evaluation in evaluations]
        )
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Listing evaluations of course {course_id}")


@courses_router.post(
    "/courses/{course_id}/evaluations",
    response_model=EvaluationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit the user's evaluation of a course",
    description="Each user can evaluate a course once; a second submission is rejected with 409."
)
async def post_course_evaluation(
    course_id: str,
    body: EvaluationRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> EvaluationResponse:
    try:
        evaluation = get_courses_service().submit_evaluation(course_id, user.id, body)
        logger.info(f"User {user.id} evaluated course {course_id}")
        return EvaluationResponse(evaluation=Evaluation.model_validate(evaluation))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Evaluating course {course_id}")


@courses_router.get(
    "/courses/{course_id}/forum",
    response_model=ForumMessageListResponse,
    summary="Forum messages of a course, oldest first"
)
async def get_forum_messages(
    course_id: str,
    user: Annotated[User, Depends(user_authorization)]
) -> ForumMessageListResponse:
    try:
        messages = list_forum_messages(course_id)
        return ForumMessageListResponse(messages=[ForumMessage.model_validate(message) for message in messages])
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Listing forum of course {course_id}")


@courses_router.post(
    "/courses/{course_id}/forum",
    response_model=ForumMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a message to a course forum"
)
async def post_forum_message(
    course_id: str,
    body: ForumMessageRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> ForumMessageResponse:
    try:
        message = get_courses_service().post_forum_message(course_id, user, body.content)
        return ForumMessageResponse(message=ForumMessage.model_validate(message))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Posting to forum of course {course_id}")


@courses_router.post(
    "/course-recommendations",
    response_model=RecommendationResponse,
    response_model_exclude_none=True,
    summary="Recommend courses for a free-text query"
)
async def course_recommendations(body: RecommendationRequest) -> RecommendationResponse:
    try:
        recommendation, total, available = get_courses_service().recommend(
            body.query,
            field=body.field,
            workload_preference=body.workloadPreference
        )
        return RecommendationResponse(
            query=body.query,
            recommendations=recommendation,
            totalCourses=total,
            availableCourses=available
        )
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Generating course recommendations")


@courses_router.get(
    "/ai-instructions",
    response_model=AiInstructionsResponse,
    summary="Advisor persona prompt with a summary of the course catalog"
)
async def ai_instructions() -> AiInstructionsResponse:
    try:
        instructions, summary = get_courses_service().advisor_instructions()
        return AiInstructionsResponse(
            instructions=instructions,
            hasCourseData=summary is not None,
            courseDataSummary=summary,
            timestamp=format_iso(utc_now())
        )
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, "Building advisor instructions")
