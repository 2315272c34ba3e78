"""
Outreach message drafting endpoints.
"""
import logging
import traceback
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import AI_GENERATE, User, get_current_user
from backend.app.schemas.messaging import (
    DraftResult,
    GenerateMessageRequest,
    GenerateMessageResponse,
    GenerateMessagesRequest,
)
from backend.app.services.llm_adapter import LLMAdapter, get_llm_adapter
from backend.app.services.message_drafting import MessageDraftingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/generate-message", response_model=GenerateMessageResponse)
async def generate_message(
    request: GenerateMessageRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Draft one message in the caller's voice. Email drafts are split into subject and body."""
    try:
        return await MessageDraftingService(db, adapter).draft_message(
            current_user.tenant_id, request.customer, request.product
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error generating message: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to generate message")


@router.post("/generate-messages", response_model=List[DraftResult])
async def generate_messages(
    request: GenerateMessagesRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Draft messages for several stored customers about one stored product."""
    try:
        return await MessageDraftingService(db, adapter).draft_batch(
            current_user.tenant_id, request.customer_ids, request.product_id
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error generating messages: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to generate message")
