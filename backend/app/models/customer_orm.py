"""
ORM Model for tenant-owned customers.

Customers live in one shared table partitioned by tenant_id; every query
filters on it. UUIDs are stored as String for SQLite compatibility.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, JSON

from backend.app.core.database import Base


class CustomerORM(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    likes = Column(Text, nullable=True)
    dislikes = Column(Text, nullable=True)
    preferences = Column(String(20), nullable=False, default="mail")  # whatsapp | mail | sms
    activity = Column(JSON, nullable=False, default=list)  # List[ActivityRecord]
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Customer {self.name} tenant={self.tenant_id}>"
