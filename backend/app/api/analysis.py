"""
Customer-interest analysis endpoints.

Scores the tenant's customers against a product or campaign, optionally
persisting the aggregate like-estimate onto the stored record.
"""
import logging
import traceback
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import AI_GENERATE, CRM_WRITE, User, ensure_same_tenant, get_current_user
from backend.app.schemas.analysis import (
    AnalysisResult,
    AnalyzeCampaignRequest,
    AnalyzeProductRequest,
    ArtifactAnalysisResponse,
    LikeEstimateResponse,
    LikeEstimateUpdate,
)
from backend.app.services.aggregate_updater import AggregateUpdater
from backend.app.services.crm_repository import CampaignRepository, ProductRepository
from backend.app.services.interest_scoring import InterestScoringService, merge_analysis
from backend.app.services.llm_adapter import LLMAdapter, get_llm_adapter

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/analyze-customer-interest", response_model=List[AnalysisResult])
async def analyze_customer_interest(
    request: AnalyzeProductRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Score every customer of the caller against a product."""
    ensure_same_tenant(current_user, request.user_id)
    try:
        service = InterestScoringService(db, adapter)
        results = await service.score_product(current_user.tenant_id, request.product)
        if request.persist_estimate and request.product.id:
            await AggregateUpdater(db).update_product(current_user.tenant_id, request.product.id, results)
        return results
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error analyzing customer interest: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Error analyzing customer interest")


@router.post("/analyze-customer-interest-cam", response_model=List[AnalysisResult])
async def analyze_customer_interest_campaign(
    request: AnalyzeCampaignRequest,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE]),
):
    """Score every customer of the caller against a campaign and its optional product."""
    ensure_same_tenant(current_user, request.user_id)
    try:
        service = InterestScoringService(db, adapter)
        results = await service.score_campaign(current_user.tenant_id, request.campaign, request.product)
        if request.persist_estimate and request.campaign.uid:
            await AggregateUpdater(db).update_campaign(current_user.tenant_id, request.campaign.uid, results)
        return results
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error analyzing customer interest: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Error analyzing customer interest")


@router.post("/products/{product_id}/analysis", response_model=ArtifactAnalysisResponse)
async def analyze_stored_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE, CRM_WRITE]),
):
    """Score, merge and persist in one call for a stored product."""
    tenant_id = current_user.tenant_id
    product = await ProductRepository(db).get(tenant_id, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    try:
        service = InterestScoringService(db, adapter)
        customers = await service.load_customers(tenant_id)
        results = await service.score_product(tenant_id, product, customers=customers)
        estimate = await AggregateUpdater(db).update_product(tenant_id, product_id, results)
        return ArtifactAnalysisResponse(likeestimate=estimate, customers=merge_analysis(customers, results))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error analyzing product %s: %s\n%s", product_id, e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Error analyzing customer interest")


@router.post("/campaigns/{uid}/analysis", response_model=ArtifactAnalysisResponse)
async def analyze_stored_campaign(
    uid: str,
    db: AsyncSession = Depends(get_db),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    current_user: User = Security(get_current_user, scopes=[AI_GENERATE, CRM_WRITE]),
):
    """Score, merge and persist in one call for a stored campaign."""
    tenant_id = current_user.tenant_id
    campaign = await CampaignRepository(db).get(tenant_id, uid)
    if campaign is None:
        raise HTTPException(status_code=404, detail=f"Campaign {uid} not found")
    product = None
    if campaign.product_id:
        product = await ProductRepository(db).get(tenant_id, campaign.product_id)
    try:
        service = InterestScoringService(db, adapter)
        customers = await service.load_customers(tenant_id)
        results = await service.score_campaign(tenant_id, campaign, product, customers=customers)
        estimate = await AggregateUpdater(db).update_campaign(tenant_id, uid, results)
        return ArtifactAnalysisResponse(likeestimate=estimate, customers=merge_analysis(customers, results))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error analyzing campaign %s: %s\n%s", uid, e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Error analyzing customer interest")


@router.put("/products/{product_id}/likeestimate", response_model=LikeEstimateResponse)
async def update_product_likeestimate(
    product_id: str,
    update: LikeEstimateUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    try:
        estimate = await AggregateUpdater(db).update_product(current_user.tenant_id, product_id, update.results)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LikeEstimateResponse(id=product_id, likeestimate=estimate)


@router.put("/campaigns/{uid}/likeestimate", response_model=LikeEstimateResponse)
async def update_campaign_likeestimate(
    uid: str,
    update: LikeEstimateUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[CRM_WRITE]),
):
    try:
        estimate = await AggregateUpdater(db).update_campaign(current_user.tenant_id, uid, update.results)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LikeEstimateResponse(id=uid, likeestimate=estimate)
