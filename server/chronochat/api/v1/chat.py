from fastapi import APIRouter, Depends
import logging

from chronochat.core.auth import AuthUser, current_user
from chronochat.providers.base import ResponseProvider
from chronochat.providers.router import get_provider
from chronochat.schemas.chat import ChatRequest, ChatResponse, RegenerateRequest
from chronochat.services.orchestrator import handle_message, regenerate_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user: AuthUser = Depends(current_user),
    provider: ResponseProvider = Depends(get_provider),
) -> ChatResponse:
    """Answer a new user message in a conversation."""
    logger.info("/chat start user=%s conversation=%s style=%s boost=%s",
                user.id, request.conversationId, request.style, request.boost)
    return await handle_message(user.id, request, provider)


@router.post("/chat/regenerate", response_model=ChatResponse)
async def regenerate(
    request: RegenerateRequest,
    user: AuthUser = Depends(current_user),
    provider: ResponseProvider = Depends(get_provider),
) -> ChatResponse:
    """Generate a fresh answer to a stored user message."""
    logger.info("/chat/regenerate start user=%s conversation=%s message=%s",
                user.id, request.conversationId, request.messageId)
    return await regenerate_response(user.id, request, provider)
