"""Campaign CRUD endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Security, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import CRM_READ, CRM_WRITE, User, get_current_user
from backend.app.schemas.crm import CampaignCreate, CampaignSchema, CampaignUpdate
from backend.app.services.crm_repository import CampaignRepository, ProductRepository

logger = logging.getLogger(__name__)
router = APIRouter()


async def _check_product(db: AsyncSession, tenant_id: str, product_id) -> None:
    if product_id and await ProductRepository(db).get(tenant_id, product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")


@router.get("/campaigns", response_model=List[CampaignSchema])
async def list_campaigns(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    return await CampaignRepository(db).list(current_user.tenant_id)


@router.post("/campaigns", response_model=CampaignSchema, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign: CampaignCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    await _check_product(db, current_user.tenant_id, campaign.product_id)
    created = await CampaignRepository(db).create(current_user.tenant_id, campaign.model_dump())
    logger.info(f"Created campaign {created.uid}")
    return created


@router.get("/campaigns/{uid}", response_model=CampaignSchema)
async def get_campaign(
    uid: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    campaign = await CampaignRepository(db).get(current_user.tenant_id, uid)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.patch("/campaigns/{uid}", response_model=CampaignSchema)
async def update_campaign(
    uid: str,
    update: CampaignUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    data = update.model_dump(exclude_unset=True)
    await _check_product(db, current_user.tenant_id, data.get("product_id"))
    campaign = await CampaignRepository(db).update(current_user.tenant_id, uid, data)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.delete("/campaigns/{uid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign(
    uid: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    if not await CampaignRepository(db).delete(current_user.tenant_id, uid):
        raise HTTPException(status_code=404, detail="Campaign not found")
