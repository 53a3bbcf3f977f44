# slotwise/models/host.py
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from slotwise.models.base import Base


class Host(Base):
    """Person who publishes event types and owns the availability rules"""
    __tablename__ = "hosts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    slug = Column(String(100), nullable=False, unique=True)  # public booking links: /{host slug}/{event slug}
    timezone = Column(String(64), nullable=False, default="UTC")  # IANA identifier

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    availability_rules = relationship("AvailabilityRule", back_populates="host", cascade="all, delete-orphan")
    event_types = relationship("EventType", back_populates="host", cascade="all, delete-orphan")
