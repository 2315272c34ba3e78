"""Models package."""

from backend.app.models.customer_orm import CustomerORM
from backend.app.models.product_orm import ProductORM
from backend.app.models.campaign_orm import CampaignORM
from backend.app.models.user_orm import UserProfileORM

__all__ = [
    "CustomerORM",
    "ProductORM",
    "CampaignORM",
    "UserProfileORM",
]
