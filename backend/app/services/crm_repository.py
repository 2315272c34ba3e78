"""
CRM Repositories - tenant-scoped database operations for customers,
products and campaigns.

Every statement filters on tenant_id; a row owned by another tenant is
indistinguishable from a missing row.
"""
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.campaign_orm import CampaignORM
from backend.app.models.customer_orm import CustomerORM
from backend.app.models.product_orm import ProductORM
from backend.app.schemas.crm import ActivityCreate


class TenantRepository:
    """Shared CRUD for a tenant-partitioned table."""

    model: Type[Any]
    pk_name: str = "id"

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def _pk(self):
        return getattr(self.model, self.pk_name)

    async def list(self, tenant_id: str) -> List[Any]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.tenant_id == tenant_id)
            .order_by(self.model.created_at)
        )
        return list(result.scalars().all())

    async def get(self, tenant_id: str, pk: str) -> Optional[Any]:
        result = await self.session.execute(
            select(self.model).where(self._pk == pk, self.model.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def create(self, tenant_id: str, data: Dict[str, Any]) -> Any:
        obj = self.model(tenant_id=tenant_id, **data)
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def update(self, tenant_id: str, pk: str, data: Dict[str, Any]) -> Optional[Any]:
        obj = await self.get(tenant_id, pk)
        if obj is None:
            return None
        for key, value in data.items():
            setattr(obj, key, value)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def delete(self, tenant_id: str, pk: str) -> bool:
        obj = await self.get(tenant_id, pk)
        if obj is None:
            return False
        await self.session.delete(obj)
        await self.session.flush()
        return True

    async def count(self, tenant_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(self.model.tenant_id == tenant_id)
        )
        return result.scalar_one()

    async def search(self, tenant_id: str, query: str, limit: int = 5) -> List[Any]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.tenant_id == tenant_id, self.model.name.icontains(query, autoescape=True))
            .order_by(self.model.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def append_outreach(self, tenant_id: str, pk: str, entries: List[Dict[str, Any]]) -> Optional[Any]:
        """Append entries to the artifact's outreach log (read-modify-write)."""
        obj = await self.get(tenant_id, pk)
        if obj is None:
            return None
        # Reassign so the JSON column is flagged dirty
        obj.customers = [*(obj.customers or []), *entries]
        await self.session.flush()
        return obj

    async def average_likeestimate(self, tenant_id: str) -> Optional[float]:
        result = await self.session.execute(
            select(func.avg(self.model.likeestimate)).where(
                self.model.tenant_id == tenant_id, self.model.likeestimate.is_not(None)
            )
        )
        value = result.scalar_one_or_none()
        return round(float(value), 1) if value is not None else None


class CustomerRepository(TenantRepository):
    model = CustomerORM

    async def get_many(self, tenant_id: str, ids: List[str]) -> List[CustomerORM]:
        result = await self.session.execute(
            select(CustomerORM).where(CustomerORM.tenant_id == tenant_id, CustomerORM.id.in_(ids))
        )
        by_id = {c.id: c for c in result.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    async def append_activity(self, tenant_id: str, customer_id: str, activity: ActivityCreate) -> Optional[Dict[str, Any]]:
        """Append one activity record to a customer; returns the stored record."""
        customer = await self.get(tenant_id, customer_id)
        if customer is None:
            return None
        record = {
            "id": time.time_ns() // 1_000_000,  # millisecond timestamp
            "type": activity.type,
            "productId": activity.product_id,
            "productName": activity.product_name,
            "message": activity.message,
            "status": activity.status.value,
            "date": _iso(activity.date),
        }
        customer.activity = [*(customer.activity or []), record]
        await self.session.flush()
        return record


class ProductRepository(TenantRepository):
    model = ProductORM


class CampaignRepository(TenantRepository):
    model = CampaignORM
    pk_name = "uid"


def _iso(value: datetime) -> str:
    return value.isoformat()
