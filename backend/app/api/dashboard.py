"""
Dashboard summary and global search endpoints.
"""
from fastapi import APIRouter, Depends, Query, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import CRM_READ, User, get_current_user
from backend.app.schemas.crm import DashboardSummary, RecentActivity, SearchHit, SearchResponse
from backend.app.services.crm_repository import CampaignRepository, CustomerRepository, ProductRepository

router = APIRouter()

RECENT_ACTIVITY_LIMIT = 10


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    """Record counts, average like-estimates and the latest outreach activity."""
    tenant_id = current_user.tenant_id
    customers_repo = CustomerRepository(db)
    products_repo = ProductRepository(db)
    campaigns_repo = CampaignRepository(db)

    customers = await customers_repo.list(tenant_id)
    recent = [
        RecentActivity(
            customer_id=customer.id,
            customer_name=customer.name,
            type=entry.get("type"),
            product_name=entry.get("productName"),
            message=entry.get("message"),
            status=entry.get("status"),
            date=entry.get("date"),
        )
        for customer in customers
        for entry in (customer.activity or [])
    ]
    recent.sort(key=lambda a: a.date or "", reverse=True)

    return DashboardSummary(
        customer_count=len(customers),
        product_count=await products_repo.count(tenant_id),
        campaign_count=await campaigns_repo.count(tenant_id),
        average_product_estimate=await products_repo.average_likeestimate(tenant_id),
        average_campaign_estimate=await campaigns_repo.average_likeestimate(tenant_id),
        recent_activity=recent[:RECENT_ACTIVITY_LIMIT],
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1),
    limit: int = Query(default=5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    """Case-insensitive name match across customers, products and campaigns."""
    tenant_id = current_user.tenant_id
    customers = await CustomerRepository(db).search(tenant_id, q, limit)
    products = await ProductRepository(db).search(tenant_id, q, limit)
    campaigns = await CampaignRepository(db).search(tenant_id, q, limit)
    return SearchResponse(
        query=q,
        customers=[SearchHit(kind="customer", id=c.id, name=c.name) for c in customers],
        products=[SearchHit(kind="product", id=p.id, name=p.name) for p in products],
        campaigns=[SearchHit(kind="campaign", id=c.uid, name=c.name) for c in campaigns],
    )
