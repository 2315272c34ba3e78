import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Date, DateTime, JSON, Integer, ForeignKey, CheckConstraint

from backend.app.core.database import Base


class CampaignORM(Base):
    __tablename__ = "campaigns"

    uid = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    campaign_date = Column(Date, nullable=True)
    likeestimate = Column(Integer, nullable=True)
    customers = Column(JSON, nullable=False, default=list)  # outreach log
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("likeestimate IS NULL OR likeestimate BETWEEN 0 AND 100", name="chk_campaign_likeestimate"),
    )

    def __repr__(self):
        return f"<Campaign {self.name} tenant={self.tenant_id}>"
