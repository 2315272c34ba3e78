from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON
from backend.app.core.database import Base

class UserProfileORM(Base):
    """
    Onboarding profile of a tenant: the seller's name, profession, writing
    style and the practice chat used to derive it. Keyed by tenant id.
    """
    __tablename__ = "user_profiles"
    tenant_id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    profession = Column(JSON, nullable=True)    # {"profession": "..."}
    style = Column(JSON, nullable=True)         # {"tone": ..., "verbosity": ..., ...}
    chat_history = Column(JSON, nullable=True)  # {"messages": [...]}
    onboarded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(timezone.utc))
