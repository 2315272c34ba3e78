"""
Customer CRUD and activity log endpoints.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Security, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import CRM_READ, CRM_WRITE, User, get_current_user
from backend.app.schemas.crm import (
    ActivityCreate,
    ActivityRecord,
    CustomerCreate,
    CustomerSchema,
    CustomerUpdate,
)
from backend.app.services.crm_repository import CampaignRepository, CustomerRepository, ProductRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/customers", response_model=List[CustomerSchema])
async def list_customers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    return await CustomerRepository(db).list(current_user.tenant_id)


@router.post("/customers", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    created = await CustomerRepository(db).create(current_user.tenant_id, customer.model_dump(mode="json"))
    logger.info(f"Created customer {created.id}")
    return created


@router.get("/customers/{customer_id}", response_model=CustomerSchema)
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    customer = await CustomerRepository(db).get(current_user.tenant_id, customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.patch("/customers/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: str,
    update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    customer = await CustomerRepository(db).update(
        current_user.tenant_id, customer_id, update.model_dump(mode="json", exclude_unset=True)
    )
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    if not await CustomerRepository(db).delete(current_user.tenant_id, customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")


@router.post(
    "/customers/{customer_id}/activities",
    response_model=ActivityRecord,
    status_code=status.HTTP_201_CREATED,
)
async def add_customer_activity(
    customer_id: str,
    activity: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    """
    Record an outreach on the customer. When the activity names a product
    or campaign, the customer is also added to that record's outreach log.
    """
    tenant_id = current_user.tenant_id
    customers = CustomerRepository(db)
    record = await customers.append_activity(tenant_id, customer_id, activity)
    if record is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    customer = await customers.get(tenant_id, customer_id)
    entry = {
        "customerId": customer_id,
        "customerName": customer.name,
        "status": record["status"],
        "date": record["date"],
    }
    if activity.product_id:
        if await ProductRepository(db).append_outreach(tenant_id, activity.product_id, [entry]) is None:
            raise HTTPException(status_code=404, detail="Product not found")
    if activity.campaign_id:
        if await CampaignRepository(db).append_outreach(tenant_id, activity.campaign_id, [entry]) is None:
            raise HTTPException(status_code=404, detail="Campaign not found")
    return record
