"""
Aggregate Updater - collapses a scoring run into one like-estimate per
product or campaign and persists it.
"""
import logging
import math
from typing import Any, Iterable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.campaign_orm import CampaignORM
from backend.app.models.product_orm import ProductORM

logger = logging.getLogger(__name__)


class EmptyResultSetError(ValueError):
    def __init__(self, message: str = "cannot aggregate empty result set"):
        super().__init__(message)


def _likelihood(result: Any) -> float:
    if isinstance(result, dict):
        return float(result["likelihood"])
    return float(result.likelihood)


def compute_like_estimate(results: Iterable[Any]) -> int:
    """Mean likelihood rounded half up (62.5 -> 63)."""
    values = [_likelihood(r) for r in results]
    if not values:
        raise EmptyResultSetError()
    mean = sum(values) / len(values)
    return int(math.floor(mean + 0.5))


class AggregateUpdater:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def update_product(self, tenant_id: str, product_id: str, results: Iterable[Any]) -> int:
        estimate = compute_like_estimate(results)
        await self._apply(ProductORM, ProductORM.id, tenant_id, product_id, estimate)
        return estimate

    async def update_campaign(self, tenant_id: str, uid: str, results: Iterable[Any]) -> int:
        estimate = compute_like_estimate(results)
        await self._apply(CampaignORM, CampaignORM.uid, tenant_id, uid, estimate)
        return estimate

    async def _apply(self, model, pk_column, tenant_id: str, pk: str, estimate: int) -> None:
        # Overwrite, never blend with the previous estimate
        result = await self.session.execute(
            update(model)
            .where(pk_column == pk, model.tenant_id == tenant_id)
            .values(likeestimate=estimate)
        )
        if result.rowcount == 0:
            raise LookupError(f"{model.__tablename__[:-1].capitalize()} {pk} not found")
        logger.info(f"Set likeestimate={estimate} on {model.__tablename__}/{pk}")
