"""Product CRUD endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Security, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import CRM_READ, CRM_WRITE, User, get_current_user
from backend.app.schemas.crm import ProductCreate, ProductSchema, ProductUpdate
from backend.app.services.crm_repository import ProductRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/products", response_model=List[ProductSchema])
async def list_products(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    return await ProductRepository(db).list(current_user.tenant_id)


@router.post("/products", response_model=ProductSchema, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    created = await ProductRepository(db).create(current_user.tenant_id, product.model_dump())
    logger.info(f"Created product {created.id}")
    return created


@router.get("/products/{product_id}", response_model=ProductSchema)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_READ]),
):
    product = await ProductRepository(db).get(current_user.tenant_id, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.patch("/products/{product_id}", response_model=ProductSchema)
async def update_product(
    product_id: str,
    update: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    product = await ProductRepository(db).update(
        current_user.tenant_id, product_id, update.model_dump(exclude_unset=True)
    )
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    if not await ProductRepository(db).delete(current_user.tenant_id, product_id):
        raise HTTPException(status_code=404, detail="Product not found")
