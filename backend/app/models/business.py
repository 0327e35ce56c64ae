# backend/app/models/business.py

from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, JSON, Boolean
from sqlalchemy.orm import relationship

from .base import BaseModel


class Business(BaseModel):
    """A provider's marketplace listing (movers, plumbers, cleaners, ...)."""

    __tablename__ = "businesses"

    id                = Column(Integer, primary_key=True, index=True)
    owner_id          = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name              = Column(String, nullable=False, index=True)
    description       = Column(Text, nullable=True)
    category          = Column(String, nullable=False, default="movers", index=True)
    city              = Column(String, nullable=True)
    state             = Column(String, nullable=True)
    postal_code       = Column(String, nullable=True)
    phone             = Column(String, nullable=True)
    email             = Column(String, nullable=True)
    website           = Column(String, nullable=True)
    base_rate_cents   = Column(Integer, nullable=True)
    hourly_rate_cents = Column(Integer, nullable=True)
    rating_avg        = Column(Float, nullable=True)
    rating_count      = Column(Integer, default=0)
    service_types     = Column(JSON, nullable=True)
    # pending | verified | suspended
    status            = Column(String, nullable=False, default="pending", index=True)
    verified          = Column(Boolean, default=False)

    owner = relationship("Profile", back_populates="businesses")
    bookings = relationship("Booking", back_populates="business")
    provider_config = relationship(
        "MoversProviderConfig",
        back_populates="business",
        uselist=False,
        cascade="all, delete-orphan",
    )
