# backend/app/models/booking.py

from sqlalchemy import Column, Integer, DateTime, Float, ForeignKey, String, Text, JSON
from sqlalchemy.orm import relationship

from .base import BaseModel
from .booking_status import BookingStatus, PaymentStatus
from .types import CaseInsensitiveEnum


class Booking(BaseModel):
    __tablename__ = "bookings"

    id          = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    requested_date = Column(String, nullable=False)  # YYYY-MM-DD
    requested_time = Column(String, nullable=False, default="09:00:00")
    booking_status = Column(
        CaseInsensitiveEnum(BookingStatus, name="bookingstatus"),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_status = Column(
        CaseInsensitiveEnum(PaymentStatus, name="paymentstatus"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )

    service_type        = Column(String, nullable=False, default="moving")
    service_address     = Column(String, nullable=False, default="")
    service_city        = Column(String, nullable=False, default="")
    service_state       = Column(String, nullable=False, default="")
    service_postal_code = Column(String, nullable=False, default="")
    # Free-form quote inputs and the fee breakdown (``service_details.breakdown``)
    service_details     = Column(JSON, nullable=True)

    hourly_rate_cents        = Column(Integer, nullable=True)
    estimated_duration_hours = Column(Float, nullable=True)
    base_price_cents         = Column(Integer, nullable=False, default=0)
    additional_fees_cents    = Column(Integer, nullable=False, default=0)
    total_price_cents        = Column(Integer, nullable=False, default=0)

    customer_phone = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    customer_notes = Column(Text, nullable=True)
    business_notes = Column(Text, nullable=True)

    confirmed_at      = Column(DateTime, nullable=True)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time   = Column(DateTime, nullable=True)
    completed_at      = Column(DateTime, nullable=True)

    customer = relationship("Profile", foreign_keys=[customer_id], back_populates="bookings_as_customer")
    business = relationship("Business", back_populates="bookings")
