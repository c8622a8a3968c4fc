import logging
from fastapi import APIRouter, HTTPException, Depends, status
from typing import Annotated

from sukejuru.apis.assignments.models import (
    Assignment,
    AssignmentCreateRequest,
    AssignmentDeleteRequest,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentUpdateRequest,
    SuccessResponse,
)
from sukejuru.apis.auth import user_authorization
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.models import User
from sukejuru.db.assignments.crud import (
    create_assignments,
    delete_assignments_by_ids,
    list_assignments,
    update_assignment,
)

logger = logging.getLogger(__name__)

assignments_router = APIRouter(prefix="/assignments", tags=["Assignments"])


@assignments_router.get(
    "",
    response_model=AssignmentListResponse,
    summary="List the user's assignments ordered by due date"
)
async def get_assignments(user: Annotated[User, Depends(user_authorization)]) -> AssignmentListResponse:
    try:
        assignments = list_assignments(user.id)
        return AssignmentListResponse(assignments=[Assignment.model_validate(row) for row in assignments])
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Listing assignments for user {user.id}")


@assignments_router.post(
    "",
    response_model=AssignmentListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignments",
    description="New assignments always start incomplete."
)
async def post_assignments(
    body: AssignmentCreateRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> AssignmentListResponse:
    try:
        rows = [assignment.model_dump() for assignment in body.assignments]
        created = create_assignments(user.id, rows) if rows else []
        logger.info(f"Created {len(created)} assignments for user {user.id}")
        return AssignmentListResponse(assignments=[Assignment.model_validate(row) for row in created])
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Creating assignments for user {user.id}")


@assignments_router.put(
    "",
    response_model=AssignmentResponse,
    summary="Update one assignment"
)
async def put_assignment(
    body: AssignmentUpdateRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> AssignmentResponse:
    try:
        updates = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        assignment = update_assignment(user.id, body.id, updates)
        if assignment is None:
            raise HTTPException(status_code=404, detail="Assignment not found")
        return AssignmentResponse(assignment=Assignment.model_validate(assignment))
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Updating assignment {body.id}")


@assignments_router.delete(
    "",
    response_model=SuccessResponse,
    summary="Delete one assignment"
)
async def delete_assignment(
    body: AssignmentDeleteRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> SuccessResponse:
    try:
        delete_assignments_by_ids(user.id, [body.id])
        return SuccessResponse()
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Deleting assignment {body.id}")
