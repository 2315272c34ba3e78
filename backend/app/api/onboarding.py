"""
Seller onboarding endpoints: practice chat, style analysis and profile storage.
"""
import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import AI_GENERATE, CRM_READ, CRM_WRITE, User, get_current_user
from backend.app.schemas.onboarding import (
    MessagesRequest,
    OnboardingStatus,
    SaveUserDataRequest,
    SaveUserDataResponse,
    UserProfileSchema,
)
from backend.app.services.llm_adapter import LLMAdapter, get_llm_adapter
from backend.app.services.onboarding import OnboardingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/analyze-style")
async def analyze_style(
    request: MessagesRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Return the model's style descriptor verbatim as a JSON body."""
    messages = [m.model_dump() for m in request.messages]
    try:
        content = await OnboardingService(db, adapter).analyze_style(messages)
    except Exception as e:
        logger.error("Error in analyze-style: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to analyze style")
    return Response(content=content, media_type="application/json")


@router.post("/chat")
async def chat(
    request: MessagesRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Stream the simulated customer's reply as plain text."""
    messages = [m.model_dump() for m in request.messages]
    stream = OnboardingService(db, adapter).persona_chat(messages)
    # Pull the first chunk eagerly so upstream failures still map to a status code
    try:
        first = await anext(stream, "")
    except Exception as e:
        logger.error("Error in chat: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="An error occurred during the chat")

    async def body():
        if first:
            yield first
        async for chunk in stream:
            yield chunk

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


@router.post("/save-user-data", response_model=SaveUserDataResponse)
async def save_user_data(
    request: SaveUserDataRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    try:
        profile, table_results = await OnboardingService(db).save_user_data(
            current_user.tenant_id,
            request.name,
            request.profession,
            request.style,
            [m.model_dump() for m in request.chat_history],
        )
    except Exception as e:
        logger.error("Error in save-user-data: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal server error")
    return SaveUserDataResponse(
        user_data=UserProfileSchema.model_validate(profile),
        table_results=table_results,
    )


@router.get("/onboarding-status", response_model=OnboardingStatus)
async def onboarding_status(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    return await OnboardingService(db).get_status(current_user.tenant_id)
