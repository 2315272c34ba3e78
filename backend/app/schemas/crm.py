"""
Pydantic Schemas for the CRM records: customers, products, campaigns and
the activity entries appended to them.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContactPreference(str, Enum):
    WHATSAPP = "whatsapp"
    MAIL = "mail"
    SMS = "sms"


class ActivityStatus(str, Enum):
    SENT = "sent"
    CONVERTING = "converting"
    CONVERTED = "converted"


def normalise_preference(value: Any) -> Any:
    """Accept "email" (used by older clients) as an alias of "mail"."""
    if isinstance(value, str):
        value = value.strip().lower()
        if value == "email":
            return ContactPreference.MAIL.value
    return value


def require_value(value: Any) -> Any:
    """Fields that map to NOT NULL columns may be omitted but not cleared."""
    if value is None:
        raise ValueError("may not be null")
    return value


# --- Customers ---

class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    likes: Optional[str] = None
    dislikes: Optional[str] = None
    preferences: ContactPreference = ContactPreference.MAIL

    @field_validator("preferences", mode="before")
    @classmethod
    def normalise_preferences(cls, v):
        return normalise_preference(v)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    likes: Optional[str] = None
    dislikes: Optional[str] = None
    preferences: Optional[ContactPreference] = None

    @field_validator("preferences", mode="before")
    @classmethod
    def normalise_preferences(cls, v):
        return normalise_preference(require_value(v))

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return require_value(v)


class CustomerSchema(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    activity: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None


# --- Products ---

class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return require_value(v)


class ProductSchema(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    likeestimate: Optional[int] = None
    customers: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None


# --- Campaigns ---

class CampaignBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    keywords: Optional[str] = None
    product_id: Optional[str] = Field(None, alias="productId")
    campaign_date: Optional[date] = None


class CampaignCreate(CampaignBase):
    pass


class CampaignUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    keywords: Optional[str] = None
    product_id: Optional[str] = Field(None, alias="productId")
    campaign_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return require_value(v)


class CampaignSchema(CampaignBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    uid: str
    tenant_id: str
    likeestimate: Optional[int] = None
    customers: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None


# --- Activities ---

class ActivityCreate(BaseModel):
    """An outreach event on a customer, optionally tied to a product or campaign."""
    model_config = ConfigDict(populate_by_name=True)

    type: str = "message"
    product_id: Optional[str] = Field(None, alias="productId")
    product_name: Optional[str] = Field(None, alias="productName")
    campaign_id: Optional[str] = Field(None, alias="campaignId")
    message: str = Field(..., min_length=1)
    status: ActivityStatus = ActivityStatus.SENT
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ActivityRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: str
    product_id: Optional[str] = Field(None, alias="productId")
    product_name: Optional[str] = Field(None, alias="productName")
    message: str
    status: ActivityStatus
    date: str


# --- Dashboard & search ---

class RecentActivity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    customer_name: str = Field(..., alias="customerName")
    type: Optional[str] = None
    product_name: Optional[str] = Field(None, alias="productName")
    message: Optional[str] = None
    status: Optional[str] = None
    date: Optional[str] = None


class DashboardSummary(BaseModel):
    customer_count: int
    product_count: int
    campaign_count: int
    average_product_estimate: Optional[float] = None
    average_campaign_estimate: Optional[float] = None
    recent_activity: List[RecentActivity] = []


class SearchHit(BaseModel):
    kind: str  # customer | product | campaign
    id: str
    name: str


class SearchResponse(BaseModel):
    query: str
    customers: List[SearchHit] = []
    products: List[SearchHit] = []
    campaigns: List[SearchHit] = []
