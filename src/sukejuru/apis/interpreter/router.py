import logging
from fastapi import APIRouter, HTTPException, Depends
from typing import Annotated

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.interpreter.models import ProcessResponseRequest, ProcessResponseResult
from sukejuru.apis.interpreter.service import get_interpreter_service
from sukejuru.apis.models import User

logger = logging.getLogger(__name__)

interpreter_router = APIRouter(tags=["Interpreter"])


@interpreter_router.post(
    "/process-response",
    response_model=ProcessResponseResult,
    summary="Apply an assistant reply",
    description=(
        "Parse the assistant's reply. Calendar actions create events and assignments, "
        "commands run one of the fixed handlers, anything else is returned as text or JSON."
    )
)
async def process_response(
    body: ProcessResponseRequest,
    user: Annotated[User, Depends(user_authorization)]
):
    try:
        result = get_interpreter_service().process(user.id, body.aiResponse)
        logger.info(f"Processed assistant reply for user {user.id} as {result.type}")
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing AI response: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process response")
