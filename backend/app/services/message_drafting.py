"""
Message Drafting Service.

Drafts a personalised outreach message for a customer and product in the
seller's own voice, using the style profile captured during onboarding.
"""
import logging
from typing import Any, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import Settings, get_settings
from backend.app.core.resilience import bounded_gather
from backend.app.models.user_orm import UserProfileORM
from backend.app.schemas.crm import normalise_preference
from backend.app.schemas.messaging import DraftResult, EmailMessage, GenerateMessageResponse
from backend.app.services.crm_repository import CustomerRepository, ProductRepository
from backend.app.services.llm_adapter import LLMAdapter
from backend.app.services.prompt_builder import MESSAGE_SYSTEM_PROMPT, build_message_prompt

logger = logging.getLogger(__name__)


class ProfileNotFoundError(LookupError):
    def __init__(self, message: str = "User profile not found"):
        super().__init__(message)


def is_email_preference(preference: Any) -> bool:
    if hasattr(preference, "value"):
        preference = preference.value
    return normalise_preference(preference or "mail") == "mail"


def split_email(text: str) -> EmailMessage:
    """First line is the subject; the rest, trimmed, is the body."""
    subject, _, content = text.partition("\n")
    return EmailMessage(subject=subject, content=content.strip())


class MessageDraftingService:
    def __init__(self, session: AsyncSession, adapter: LLMAdapter, settings: Optional[Settings] = None):
        self.session = session
        self.adapter = adapter
        self.settings = settings or get_settings()

    async def _profile(self, tenant_id: str) -> UserProfileORM:
        profile = await self.session.get(UserProfileORM, tenant_id)
        if profile is None:
            raise ProfileNotFoundError()
        return profile

    async def _draft(self, customer: Any, product: Any, profile: UserProfileORM) -> Union[EmailMessage, str]:
        prompt = build_message_prompt(customer, product, profile)
        response = await self.adapter.chat(
            [
                {"role": "system", "content": MESSAGE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.settings.message_max_tokens,
        )
        text = response.text
        if is_email_preference(getattr(customer, "preferences", None)):
            return split_email(text)
        return text

    async def draft_message(self, tenant_id: str, customer: Any, product: Any) -> GenerateMessageResponse:
        profile = await self._profile(tenant_id)
        message = await self._draft(customer, product, profile)
        return GenerateMessageResponse(
            message=message,
            style=profile.style,
            profile=profile.profession,
            context=profile.chat_history,
        )

    async def draft_batch(self, tenant_id: str, customer_ids: List[str], product_id: str) -> List[DraftResult]:
        """Draft for several stored customers; one failure does not sink the rest."""
        profile = await self._profile(tenant_id)
        product = await ProductRepository(self.session).get(tenant_id, product_id)
        if product is None:
            raise LookupError(f"Product {product_id} not found")
        customers = await CustomerRepository(self.session).get_many(tenant_id, customer_ids)
        if not customers:
            raise LookupError("No customers found")

        async def draft_one(customer) -> DraftResult:
            message = await self._draft(customer, product, profile)
            return DraftResult(customer_id=customer.id, customer_name=customer.name, message=message)

        def on_error(customer, exc: BaseException) -> DraftResult:
            logger.error(f"Drafting failed for customer {customer.id}: {type(exc).__name__}: {exc}")
            return DraftResult(customer_id=customer.id, customer_name=customer.name, error="Error generating message")

        return await bounded_gather(
            customers,
            draft_one,
            limit=self.settings.scoring_max_concurrency,
            timeout=self.settings.scoring_batch_timeout_seconds,
            on_error=on_error,
        )
