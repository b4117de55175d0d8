from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.dependencies.services import get_chat_service
from app.api.openapi_responses import RATE_LIMITED, VALIDATION_ERROR, error_responses
from app.api.schemas.chat_request_models import ChatRequest
from app.api.schemas.chat_response_models import ChatResponse
from app.core.rate_limit import CHAT_RATE_LIMIT, limit, rate_limit_ip_key
from app.llm.client import ChatMessage
from app.services.chat_service import ChatService

router = APIRouter()


@router.post(
    "",
    summary="Ask the sales assistant",
    description=(
        "Reply to the visitor's conversation. When no model is available the reply "
        "is a canned hand-off message and `fallback` is true."
    ),
    response_model=ChatResponse,
    responses=error_responses(VALIDATION_ERROR, RATE_LIMITED),
)
@limit(CHAT_RATE_LIMIT, key_func=rate_limit_ip_key)
async def chat(
    request: Request,
    payload: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    history: list[ChatMessage] = [
        {"role": message.role, "content": message.content} for message in payload.messages
    ]
    reply = await chat_service.reply(history)
    return ChatResponse(message=reply.message, fallback=reply.fallback)
