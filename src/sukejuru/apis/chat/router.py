import logging
from fastapi import APIRouter, Request, HTTPException, Depends, Query
from typing import Annotated

from sukejuru.apis.auth import user_authorization
from sukejuru.apis.chat.models import (
    ChatHistoryResponse,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    MemoryRequest,
)
from sukejuru.apis.chat.service import get_chat_service
from sukejuru.apis.errors import http_error_from
from sukejuru.apis.models import OkResponse, User
from sukejuru.db.messages.crud import append_messages, get_messages_by_user_id

logger = logging.getLogger(__name__)

chat_router = APIRouter(tags=["Chat"])


@chat_router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Send a message to the scheduling assistant",
    description="The reply is returned unmodified; pass it to /process-response to apply calendar actions."
)
async def chat(
    body: ChatRequest,
    request: Request,
    user: Annotated[User, Depends(user_authorization)]
) -> ChatResponse:
    logger.info(f"Received chat message from user {user.id}")
    try:
        reply = await get_chat_service().reply(request.app.state.llm_client, user.id, body.message)
        return ChatResponse(reply=reply)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Chat completion failed for user {user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Unknown error")


@chat_router.get(
    "/chat/history",
    response_model=ChatHistoryResponse,
    summary="Get the user's chat log, oldest first"
)
async def chat_history(
    user: Annotated[User, Depends(user_authorization)],
    limit: Annotated[int | None, Query(
        ge=1,
        le=1000,
        description="Only return the most recent N messages"
    )] = None
) -> ChatHistoryResponse:
    try:
        messages = get_messages_by_user_id(user.id, limit)
        return ChatHistoryResponse(messages=[ChatMessage.model_validate(m) for m in messages])
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Fetching chat history for user {user.id}")


@chat_router.post(
    "/memory",
    response_model=OkResponse,
    summary="Append one message to the user's chat log"
)
async def remember(
    body: MemoryRequest,
    user: Annotated[User, Depends(user_authorization)]
) -> OkResponse:
    try:
        append_messages(user.id, [(body.role.value, body.content)], session_id=body.session_id)
        return OkResponse()
    except HTTPException:
        raise
    except Exception as e:
        raise http_error_from(e, f"Storing message for user {user.id}")
