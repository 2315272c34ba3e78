"""
Onboarding Service.

A new seller chats with a simulated customer, the transcript is analysed
for writing style, and the result is stored as the tenant's profile for
message drafting.
"""
import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.user_orm import UserProfileORM
from backend.app.schemas.onboarding import OnboardingStatus
from backend.app.services.llm_adapter import LLMAdapter
from backend.app.services.prompt_builder import (
    STYLE_ANALYSIS_PROMPT,
    build_persona_system_prompt,
    extract_profession,
)

logger = logging.getLogger(__name__)

# Record partitions every tenant writes to
TENANT_TABLES = ("campaigns", "customers", "products")


class OnboardingService:
    def __init__(self, session: AsyncSession, adapter: Optional[LLMAdapter] = None):
        self.session = session
        self.adapter = adapter

    async def analyze_style(self, messages: List[Dict[str, str]]) -> str:
        """Return the model's JSON style descriptor as raw text."""
        response = await self.adapter.chat([{"role": "system", "content": STYLE_ANALYSIS_PROMPT}, *messages])
        return response.text

    def persona_chat(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Stream the simulated customer's next turn."""
        profession = extract_profession(messages)
        conversation = [
            {"role": "system", "content": build_persona_system_prompt(profession)},
            *[m for m in messages if m.get("role") != "system"],
        ]
        return self.adapter.stream_chat(conversation)

    async def save_user_data(
        self,
        tenant_id: str,
        name: str,
        profession: str,
        style: Union[Dict[str, Any], str],
        chat_history: List[Dict[str, str]],
    ) -> Tuple[UserProfileORM, Dict[str, str]]:
        """Create or replace the tenant's profile and mark onboarding complete."""
        profile = await self.session.get(UserProfileORM, tenant_id)
        if profile is None:
            profile = UserProfileORM(tenant_id=tenant_id)
            self.session.add(profile)
        profile.name = name
        profile.profession = {"profession": profession}
        profile.style = style
        profile.chat_history = {"messages": chat_history}
        profile.onboarded_at = datetime.now(timezone.utc)
        await self.session.flush()
        logger.info(f"Saved onboarding profile for tenant {tenant_id}")

        # Shared tables are partitioned by tenant_id; nothing to provision
        table_results = {table: "ready" for table in TENANT_TABLES}
        return profile, table_results

    async def get_status(self, tenant_id: str) -> OnboardingStatus:
        profile = await self.session.get(UserProfileORM, tenant_id)
        if profile is None or profile.onboarded_at is None:
            return OnboardingStatus(completed=False)
        return OnboardingStatus(completed=True, name=profile.name)
