import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from .. import models, schemas
from ..models.base import utcnow
from ..models.booking_status import BookingStatus
from ..services.booking_totals import TotalsResult, booking_price_fields, compute_total_due
from ..services.pricing_context import HEAVY_ITEMS_KEYS, cents_from

logger = logging.getLogger(__name__)

# Changing any of these means the stored price fields are stale.
PRICING_FIELDS = ("service_details", "hourly_rate_cents", "estimated_duration_hours", "additional_fees_cents")


def merge_service_details(current: Optional[Dict[str, Any]], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow-merge ``changes`` into ``current`` and normalize removals.

    Clearing an option from the edit form must also clear the fields that
    priced it, otherwise the stale breakdown keeps being charged.
    """
    merged = {**(current or {}), **changes}

    heavy = changes.get("heavy_items")
    if isinstance(heavy, list) and not heavy:
        merged["heavy_items"] = []
        merged["heavy_items_count"] = 0
        merged["heavy_item_band"] = None
        merged["heavy_item_price_cents"] = 0
        breakdown = merged.get("breakdown")
        if isinstance(breakdown, dict):
            merged["breakdown"] = {
                **breakdown,
                **{key: 0 for key in HEAVY_ITEMS_KEYS if key in breakdown},
            }

    if changes.get("stairs_flights") in (0, "0"):
        merged["stairs_flights"] = 0
        merged["stairs"] = False

    if changes.get("packing_help") == "none" or changes.get("packing") == "none":
        merged["packing_help"] = "none"
        merged["packing"] = "none"
        merged["packing_rooms"] = 0

    return merged


class CRUDBooking:
    def get_booking(self, db: Session, booking_id: int) -> Optional[models.Booking]:
        return (
            db.query(models.Booking)
            .options(joinedload(models.Booking.business))
            .filter(models.Booking.id == booking_id)
            .first()
        )

    def get_bookings_for_user(
        self, db: Session, user: models.Profile, skip: int = 0, limit: int = 100
    ) -> List[models.Booking]:
        """Bookings the user placed plus bookings made with businesses they own."""
        owned = db.query(models.Business.id).filter(models.Business.owner_id == user.id)
        return (
            db.query(models.Booking)
            .filter(
                or_(
                    models.Booking.customer_id == user.id,
                    models.Booking.business_id.in_(owned),
                )
            )
            .order_by(models.Booking.requested_date.desc(), models.Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create_booking(
        self, db: Session, booking_in: schemas.BookingCreate, customer: models.Profile
    ) -> models.Booking:
        details = dict(booking_in.details or {})
        seeded_total = cents_from(details.get("estimated_value"))

        db_booking = models.Booking(
            customer_id=customer.id,
            business_id=booking_in.business_id,
            requested_date=booking_in.move_date,
            requested_time=details.get("requested_time") or "09:00:00",
            booking_status=BookingStatus.PENDING,
            service_type=details.get("service_type") or "moving",
            service_address=details.get("from_address") or details.get("address") or "",
            service_city=details.get("city") or "",
            service_state=details.get("state") or "",
            service_postal_code=details.get("postal_code") or "",
            service_details=details,
            base_price_cents=0,
            total_price_cents=max(0, seeded_total),
            customer_phone=details.get("contact_phone") or "",
            customer_email=details.get("contact_email") or customer.email,
            customer_notes=details.get("notes") or "",
        )
        db.add(db_booking)
        db.commit()
        db.refresh(db_booking)
        return db_booking

    def apply_totals(self, db: Session, db_booking: models.Booking) -> TotalsResult:
        """Recompute the booking's totals and write the two price columns."""
        totals = compute_total_due(db_booking)
        for key, value in booking_price_fields(totals).items():
            setattr(db_booking, key, value)
        db_booking.updated_at = utcnow()
        db.add(db_booking)
        db.commit()
        db.refresh(db_booking)
        return totals

    def update_booking(
        self,
        db: Session,
        db_booking: models.Booking,
        booking_in: schemas.BookingUpdate,
        *,
        is_admin: bool = False,
    ) -> models.Booking:
        update_data = booking_in.model_dump(exclude_unset=True)
        if not is_admin:
            update_data.pop("booking_status", None)
            update_data.pop("payment_status", None)

        reprice = any(field in update_data for field in PRICING_FIELDS)
        if reprice:
            # Derived from the calculator below; explicit values are ignored.
            update_data.pop("base_price_cents", None)
            update_data.pop("total_price_cents", None)

        changes = update_data.pop("service_details", None)
        if changes is not None:
            db_booking.service_details = merge_service_details(db_booking.service_details, changes)

        for key, value in update_data.items():
            setattr(db_booking, key, value)

        if reprice:
            totals = compute_total_due(db_booking)
            for key, value in booking_price_fields(totals).items():
                setattr(db_booking, key, value)
            logger.info(
                "Repriced booking %s: base=%s total=%s",
                db_booking.id,
                db_booking.base_price_cents,
                db_booking.total_price_cents,
            )

        db_booking.updated_at = utcnow()
        db.add(db_booking)
        db.commit()
        db.refresh(db_booking)
        return db_booking

    def update_status(
        self, db: Session, db_booking: models.Booking, status_in: schemas.BookingStatusUpdate
    ) -> models.Booking:
        now = utcnow()
        fields = status_in.model_fields_set
        new_status = status_in.booking_status
        if new_status is not None:
            db_booking.booking_status = new_status
            # Stamp lifecycle timestamps the first time a status is reached
            if new_status == BookingStatus.IN_PROGRESS and not db_booking.actual_start_time:
                db_booking.actual_start_time = now
            elif new_status == BookingStatus.COMPLETED and not db_booking.actual_end_time:
                db_booking.actual_end_time = now
                db_booking.completed_at = now
            elif new_status == BookingStatus.CONFIRMED and not db_booking.confirmed_at:
                db_booking.confirmed_at = now

        if "actual_start_time" in fields:
            db_booking.actual_start_time = status_in.actual_start_time
        if "actual_end_time" in fields:
            db_booking.actual_end_time = status_in.actual_end_time
            if status_in.actual_end_time:
                db_booking.completed_at = now

        db_booking.updated_at = now
        db.add(db_booking)
        db.commit()
        db.refresh(db_booking)
        return db_booking


booking = CRUDBooking()
