"""
Pydantic Schemas for seller onboarding: practice chat, style analysis and profile.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class MessagesRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)


class SaveUserDataRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    profession: str = Field(..., min_length=1)
    style: Union[Dict[str, Any], str]
    chat_history: List[ChatMessage] = Field(..., alias="chatHistory", min_length=1)

    @field_validator("style")
    @classmethod
    def style_not_empty(cls, v):
        if not v:
            raise ValueError("style must not be empty")
        return v


class UserProfileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    name: str
    profession: Optional[Dict[str, Any]] = None
    style: Optional[Any] = None
    chat_history: Optional[Dict[str, Any]] = None
    onboarded_at: Optional[datetime] = None


class SaveUserDataResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_data: UserProfileSchema = Field(..., alias="userData")
    table_results: Dict[str, Any] = Field(..., alias="tableResults")


class OnboardingStatus(BaseModel):
    completed: bool
    name: Optional[str] = None
