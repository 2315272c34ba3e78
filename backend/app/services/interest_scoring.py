"""
Interest Scoring Service.

Scores every customer of a tenant against a product or campaign with one
LLM completion per customer, then merges the scores back onto the customer
records for display and outreach selection.

Calls fan out through ``bounded_gather``: a semaphore caps concurrent
provider calls and a batch deadline caps the whole run. A failing customer
gets the error sentinel; the batch still returns one result per customer,
in customer order.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import Settings, get_settings
from backend.app.core.resilience import bounded_gather
from backend.app.schemas.analysis import AnalysisResult, AnalyzedCustomer
from backend.app.services.crm_repository import CustomerRepository
from backend.app.services.llm_adapter import LLMAdapter
from backend.app.services.prompt_builder import build_campaign_prompt, build_product_prompt
from backend.app.services.response_parser import UnparseableResponseError, parse_interest_response

logger = logging.getLogger(__name__)

ERROR_REASON = "Error occurred during analysis"
MISSING_REASON = "Analysis not available"


class NoCustomersFoundError(LookupError):
    def __init__(self, message: str = "No customers found"):
        super().__init__(message)


def error_result(customer: Any) -> AnalysisResult:
    return AnalysisResult(
        customer_id=str(customer.id),
        customer_name=customer.name,
        likelihood=0,
        reason=ERROR_REASON,
    )


class InterestScoringService:
    def __init__(self, session: AsyncSession, adapter: LLMAdapter, settings: Optional[Settings] = None):
        self.session = session
        self.adapter = adapter
        self.settings = settings or get_settings()
        self.customers = CustomerRepository(session)

    async def score_product(
        self, tenant_id: str, product: Any, customers: Optional[Sequence[Any]] = None
    ) -> List[AnalysisResult]:
        """Score all of the tenant's customers (or the given ones) against a product."""
        customers = customers if customers is not None else await self.load_customers(tenant_id)
        logger.info(f"Scoring {len(customers)} customers against product '{product.name}'")
        return await self._score(
            customers,
            lambda customer: build_product_prompt(customer, product),
            self.settings.product_prompt_max_tokens,
        )

    async def score_campaign(
        self,
        tenant_id: str,
        campaign: Any,
        product: Optional[Any] = None,
        customers: Optional[Sequence[Any]] = None,
    ) -> List[AnalysisResult]:
        """Score all of the tenant's customers against a campaign (and its product, if any)."""
        customers = customers if customers is not None else await self.load_customers(tenant_id)
        logger.info(f"Scoring {len(customers)} customers against campaign '{campaign.name}'")
        return await self._score(
            customers,
            lambda customer: build_campaign_prompt(customer, campaign, product),
            self.settings.campaign_prompt_max_tokens,
        )

    async def load_customers(self, tenant_id: str) -> List[Any]:
        customers = await self.customers.list(tenant_id)
        if not customers:
            raise NoCustomersFoundError()
        return customers

    async def _score(self, customers: Sequence[Any], render, max_tokens: int) -> List[AnalysisResult]:
        strict = self.settings.scoring_strict_parsing

        async def score_one(customer) -> AnalysisResult:
            response = await self.adapter.complete(render(customer), max_tokens=max_tokens)
            parsed = parse_interest_response(response.text)
            if parsed.fallback and strict:
                raise UnparseableResponseError(f"no likelihood in reply for customer {customer.id}")
            return AnalysisResult(
                customer_id=str(customer.id),
                customer_name=customer.name,
                likelihood=parsed.likelihood,
                reason=parsed.reason,
            )

        def on_error(customer, exc: BaseException) -> AnalysisResult:
            logger.error(f"Scoring failed for customer {customer.id}: {type(exc).__name__}: {exc}")
            return error_result(customer)

        return await bounded_gather(
            customers,
            score_one,
            limit=self.settings.scoring_max_concurrency,
            timeout=self.settings.scoring_batch_timeout_seconds,
            on_error=on_error,
        )


def likelihood_bucket(likelihood: float, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    if likelihood >= settings.likelihood_high_threshold:
        return "green"
    if likelihood >= settings.likelihood_medium_threshold:
        return "yellow"
    return "red"


def merge_analysis(
    customers: Sequence[Any], results: Sequence[AnalysisResult], settings: Optional[Settings] = None
) -> List[AnalyzedCustomer]:
    """
    Attach each customer's score to its record.

    Customers with no matching result get likelihood 0 and a placeholder
    reason. Anything at or above the medium threshold is pre-selected.
    """
    settings = settings or get_settings()
    by_id: Dict[str, AnalysisResult] = {r.customer_id: r for r in results}
    merged = []
    for customer in customers:
        result = by_id.get(str(customer.id))
        likelihood = result.likelihood if result else 0.0
        merged.append(AnalyzedCustomer(
            id=str(customer.id),
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            likes=customer.likes,
            dislikes=customer.dislikes,
            preferences=customer.preferences or "mail",
            likelihood=likelihood,
            reason=result.reason if result else MISSING_REASON,
            bucket=likelihood_bucket(likelihood, settings),
            selected=likelihood >= settings.likelihood_medium_threshold,
        ))
    return merged
