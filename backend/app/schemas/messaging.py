"""
Pydantic Schemas for outreach message drafting.
"""
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.schemas.crm import ContactPreference, normalise_preference


class MessageCustomer(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    likes: Optional[str] = None
    dislikes: Optional[str] = None
    preferences: ContactPreference = ContactPreference.MAIL

    @field_validator("preferences", mode="before")
    @classmethod
    def normalise_preferences(cls, v):
        return normalise_preference(v)


class MessageProduct(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class GenerateMessageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer: MessageCustomer
    product: MessageProduct


class EmailMessage(BaseModel):
    subject: str
    content: str


class GenerateMessageResponse(BaseModel):
    message: Union[EmailMessage, str]
    style: Optional[Any] = None
    profile: Optional[Any] = None
    context: Optional[Any] = None


class GenerateMessagesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_ids: List[str] = Field(..., alias="customerIds", min_length=1)
    product_id: str = Field(..., alias="productId")


class DraftResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    customer_name: str = Field(..., alias="customerName")
    message: Optional[Union[EmailMessage, str]] = None
    error: Optional[str] = None
