from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, Optional
from datetime import datetime

from ..models.booking_status import BookingStatus, PaymentStatus


class BookingCreate(BaseModel):
    """Customer-submitted booking request."""

    business_id: int
    move_date: str
    details: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def accept_form_fields(cls, data: Any) -> Any:
        """Map the flat booking-form payload onto the strict shape."""
        if not isinstance(data, dict) or "details" in data:
            return data
        return {
            "business_id": data.get("business_id") or data.get("businessId"),
            "move_date": data.get("move_date") or data.get("preferredDate"),
            "details": {
                "from_address": data.get("pickupAddress") or data.get("from_address") or "",
                "to_address": data.get("dropoffAddress") or data.get("to_address") or "",
                "notes": data.get("description") or data.get("notes") or data.get("customer_notes") or "",
                "size": data.get("size") or "commercial",
                "stairs": data.get("stairs") or False,
                "elevator": data.get("elevator") or False,
                "special_items": data.get("special_items") or [],
                "contact_phone": data.get("contactPhone") or data.get("phone"),
                "contact_email": data.get("contactEmail") or data.get("email"),
                "estimated_value": data.get("estimatedValue") or data.get("estimated_value"),
            },
        }

    @field_validator("move_date")
    @classmethod
    def normalize_move_date(cls, v: str) -> str:
        """Accept ISO dates or datetimes and keep only ``YYYY-MM-DD``."""
        raw = (v or "").strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Invalid date format")
        return parsed.date().isoformat()


class BookingUpdate(BaseModel):
    """Fields a provider (or admin) may edit; unset fields are left alone."""

    requested_date: Optional[str] = None
    requested_time: Optional[str] = None
    service_address: Optional[str] = None
    service_city: Optional[str] = None
    service_state: Optional[str] = None
    service_postal_code: Optional[str] = None
    service_details: Optional[Dict[str, Any]] = None
    customer_notes: Optional[str] = None
    business_notes: Optional[str] = None
    hourly_rate_cents: Optional[int] = Field(default=None, ge=0)
    estimated_duration_hours: Optional[float] = Field(default=None, gt=0)
    base_price_cents: Optional[int] = Field(default=None, ge=0)
    additional_fees_cents: Optional[int] = Field(default=None, ge=0)
    total_price_cents: Optional[int] = Field(default=None, ge=0)
    # Admin only
    booking_status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None


class BookingStatusUpdate(BaseModel):
    booking_status: Optional[BookingStatus] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None


class RecalculateRequest(BaseModel):
    bookingId: Optional[int] = None


class BookingResponse(BaseModel):
    id: int
    customer_id: int
    business_id: int
    requested_date: str
    requested_time: str
    booking_status: BookingStatus
    payment_status: PaymentStatus
    service_type: str
    service_address: str
    service_city: str
    service_state: str
    service_postal_code: str
    service_details: Optional[Dict[str, Any]] = None
    hourly_rate_cents: Optional[int] = None
    estimated_duration_hours: Optional[float] = None
    base_price_cents: int
    additional_fees_cents: int
    total_price_cents: int
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    customer_notes: Optional[str] = None
    business_notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class TotalsResponse(BaseModel):
    base_hours: int
    movers: int
    per_mover_rate_cents: int
    team_hourly_cents: int
    base_cents: int
    additional_billed_cents: int
    destination_cents: int
    heavy_items_cents: int
    packing_cents: int
    stairs_cents: int
    storage_cents: int
    insurance_cents: int
    total_due_cents: int


class RecalculateResponse(BaseModel):
    success: bool = True
    booking: BookingResponse
    totals: TotalsResponse
