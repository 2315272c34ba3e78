"""
Pydantic Schemas for customer-interest analysis and like-estimate aggregation.
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.schemas.crm import ContactPreference, normalise_preference


class ProductPayload(BaseModel):
    """Product fields as sent by the front-end (may or may not be stored yet)."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    price: Optional[float] = None


class CampaignPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    keywords: Optional[str] = None
    campaign_date: Optional[date] = None
    product_id: Optional[str] = Field(None, alias="productId")


class AnalyzeProductRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product: ProductPayload
    user_id: Optional[str] = Field(None, alias="userId")
    persist_estimate: bool = Field(False, alias="persistEstimate")


class AnalyzeCampaignRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    campaign: CampaignPayload
    product: Optional[ProductPayload] = None
    user_id: Optional[str] = Field(None, alias="userId")
    persist_estimate: bool = Field(False, alias="persistEstimate")


class AnalysisResult(BaseModel):
    """One customer's interest score. Produced fresh on every scoring run."""
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    customer_name: str = Field(..., alias="customerName")
    likelihood: float = Field(..., ge=0, le=100)
    reason: str = ""


class AnalyzedCustomer(BaseModel):
    """A customer record with its analysis merged in, ready for display."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    likes: Optional[str] = None
    dislikes: Optional[str] = None
    preferences: ContactPreference = ContactPreference.MAIL
    likelihood: float = Field(0.0, ge=0, le=100)
    reason: str = "Analysis not available"
    bucket: str  # green | yellow | red
    selected: bool = False

    @field_validator("preferences", mode="before")
    @classmethod
    def normalise_preferences(cls, v):
        return normalise_preference(v)


class ArtifactAnalysisResponse(BaseModel):
    likeestimate: int
    customers: List[AnalyzedCustomer]


class LikelihoodSample(BaseModel):
    """Only the likelihood matters for aggregation; other result keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    likelihood: float = Field(..., ge=0, le=100)


class LikeEstimateUpdate(BaseModel):
    results: List[LikelihoodSample]


class LikeEstimateResponse(BaseModel):
    id: str
    likeestimate: int
