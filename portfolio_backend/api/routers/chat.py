"""Chat API endpoints.

Routes:
- POST /chat - Ask the portfolio assistant a question

Dependencies: portfolio_backend.application.services.chat_service, portfolio_backend.api.deps
System role: Chat messaging HTTP API
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from portfolio_backend.api.deps import (
    CallerContext,
    get_caller_context,
    get_chat_service,
    get_notifier,
    get_settings_dependency,
)
from portfolio_backend.application.services.chat_service import ChatService
from portfolio_backend.application.services.notification_service import WebhookNotifier
from portfolio_backend.configs import Settings
from portfolio_backend.core.exceptions import (
    EmbeddingProviderError,
    ModelGenerationError,
    QuotaExceededError,
)
from portfolio_backend.models.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    caller: CallerContext = Depends(get_caller_context),
    chat_service: ChatService = Depends(get_chat_service),
    notifier: WebhookNotifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings_dependency),
) -> ChatResponse:
    """Answer a visitor question from the portfolio index.

    Flow:
    1. Run the message through ChatService (quota, session, retrieval, generation)
    2. Schedule a new-session notification when a session was started
    3. Return the answer with its source cards

    Args:
        request: ChatRequest with message, locale and recent history
        background_tasks: FastAPI background task queue
        caller: Caller address and privilege
        chat_service: Injected ChatService
        notifier: Injected webhook notifier
        settings: Application settings

    Returns:
        ChatResponse: Answer with source cards

    Raises:
        HTTPException(422): Blank message
        HTTPException(429): Daily quota used up
        HTTPException(502): Embedding or generation provider failure
        HTTPException(500): Processing error
    """
    if not request.message.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Message must not be blank",
        )

    try:
        outcome = await chat_service.handle_message(
            caller_address=caller.address,
            message=request.message,
            locale=request.locale,
            history=request.history,
            is_privileged=caller.is_privileged,
        )
    except QuotaExceededError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=e.message)
    except (EmbeddingProviderError, ModelGenerationError) as e:
        logger.error(f"{__name__}:chat - Provider failure: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="The assistant is temporarily unavailable. Please try again later.",
        )
    except Exception as e:
        logger.exception(f"{__name__}:chat - {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Chat processing failed",
        )

    if outcome.new_session and settings.notifications.notify_on_new_session and notifier.enabled:
        background_tasks.add_task(
            notifier.notify,
            f"New chat session from {caller.address}: {request.message}",
        )

    return ChatResponse(response=outcome.response, sources=outcome.sources)
