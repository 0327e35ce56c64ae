from sqlalchemy import Column, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship

from .base import BaseModel


class MoversProviderConfig(BaseModel):
    """Consolidated pricing configuration for a movers business.

    ``policies`` holds base_zip, service_radius_miles, min_lead_minutes,
    destination_fee_per_mile_cents, max_travel_distance_miles and an optional
    ``stairs`` policy. ``tiers`` is a list of crew-size rate tiers.
    """

    __tablename__ = "movers_provider_config"

    id               = Column(Integer, primary_key=True, index=True)
    business_id      = Column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    policies         = Column(JSON, nullable=True)
    tiers            = Column(JSON, nullable=True)
    heavy_item_tiers = Column(JSON, nullable=True)
    packing          = Column(JSON, nullable=True)

    business = relationship("Business", back_populates="provider_config")
