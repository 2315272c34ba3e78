"""Services package."""

from backend.app.services.aggregate_updater import AggregateUpdater, compute_like_estimate
from backend.app.services.interest_scoring import InterestScoringService, merge_analysis
from backend.app.services.llm_adapter import LLMAdapter, get_adapter
from backend.app.services.message_drafting import MessageDraftingService
from backend.app.services.onboarding import OnboardingService

__all__ = [
    "AggregateUpdater",
    "compute_like_estimate",
    "InterestScoringService",
    "merge_analysis",
    "LLMAdapter",
    "get_adapter",
    "MessageDraftingService",
    "OnboardingService",
]
