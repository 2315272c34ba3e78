import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, JSON, Float, Integer, CheckConstraint

from backend.app.core.database import Base


class ProductORM(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    # Rounded mean of the latest scoring run, overwritten wholesale
    likeestimate = Column(Integer, nullable=True)
    customers = Column(JSON, nullable=False, default=list)  # outreach log
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("likeestimate IS NULL OR likeestimate BETWEEN 0 AND 100", name="chk_product_likeestimate"),
    )

    def __repr__(self):
        return f"<Product {self.name} tenant={self.tenant_id}>"
