# backend/app/api/api_booking.py

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models
from ..database import get_db
from ..models.booking_status import PaymentStatus
from ..schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
    RecalculateRequest,
    RecalculateResponse,
    TotalsResponse,
)
from ..services.booking_totals import compute_total_due
from ..utils import error_response
from .dependencies import (
    can_manage_booking,
    can_view_booking,
    get_current_user,
    is_business_owner,
)

router = APIRouter(tags=["bookings"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)
# ‣ Note: no prefix here.  main.py already does:
#     app.include_router(router, prefix="/api/v1/bookings", …)


def _get_booking_or_404(db: Session, booking_id: int) -> models.Booking:
    booking = crud.booking.get_booking(db, booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def _write_failed(db: Session, action: str, booking_id: Any, exc: SQLAlchemyError) -> HTTPException:
    db.rollback()
    logger.error("Failed to %s booking %s: %s", action, booking_id, exc, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action} booking",
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    *,
    db: Session = Depends(get_db),
    booking_in: BookingCreate,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    """Create a booking request with a business on behalf of the signed-in customer."""
    business = crud.crud_business.get_business(db, booking_in.business_id)
    if business is None:
        raise error_response(
            "Business not found",
            {"business_id": "not_found"},
            status.HTTP_404_NOT_FOUND,
        )
    try:
        booking = crud.booking.create_booking(db, booking_in, current_user)
    except SQLAlchemyError as exc:
        raise _write_failed(db, "create", None, exc)
    logger.info("Created booking %s for business %s", booking.id, business.id)
    return booking


@router.get("/mine", response_model=List[BookingResponse])
def read_my_bookings(
    *,
    db: Session = Depends(get_db),
    current_user: models.Profile = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
) -> Any:
    """Bookings placed by the user and bookings with businesses they own."""
    return crud.booking.get_bookings_for_user(db, current_user, skip=skip, limit=limit)


@router.post("/recalculate", response_model=RecalculateResponse)
def recalculate_booking_totals(
    *,
    db: Session = Depends(get_db),
    current_user: models.Profile = Depends(get_current_user),
    payload: Optional[RecalculateRequest] = Body(default=None),
    booking_id_param: Optional[int] = Query(default=None, alias="bookingId"),
) -> Any:
    """Recompute a booking's totals from its service details and store them.

    Only the provider who owns the booked business, or an admin, may call this.
    """
    booking_id = (payload.bookingId if payload else None) or booking_id_param
    if not booking_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="bookingId is required")

    booking = _get_booking_or_404(db, booking_id)
    if not can_manage_booking(booking, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    try:
        totals = crud.booking.apply_totals(db, booking)
    except SQLAlchemyError as exc:
        raise _write_failed(db, "recalculate", booking_id, exc)

    logger.info(
        "Recalculated booking %s: base=%s total=%s",
        booking.id,
        booking.base_price_cents,
        booking.total_price_cents,
    )
    return {"success": True, "booking": booking, "totals": totals.as_dict()}


@router.get("/{booking_id}", response_model=BookingResponse)
def read_booking(
    *,
    db: Session = Depends(get_db),
    booking_id: int,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    booking = _get_booking_or_404(db, booking_id)
    if not can_view_booking(booking, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return booking


@router.get("/{booking_id}/totals", response_model=TotalsResponse)
def preview_booking_totals(
    *,
    db: Session = Depends(get_db),
    booking_id: int,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    """Itemized totals for the pay page; nothing is written."""
    booking = _get_booking_or_404(db, booking_id)
    if not can_view_booking(booking, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return compute_total_due(booking).as_dict()


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    *,
    db: Session = Depends(get_db),
    booking_id: int,
    booking_in: BookingUpdate,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    """Provider/admin edit of a booking; pricing inputs trigger a reprice."""
    booking = _get_booking_or_404(db, booking_id)
    if not can_manage_booking(booking, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the service provider or admin can edit bookings",
        )
    if booking.payment_status == PaymentStatus.PAID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot edit booking after payment has been completed",
        )
    try:
        return crud.booking.update_booking(db, booking, booking_in, is_admin=current_user.is_admin)
    except SQLAlchemyError as exc:
        raise _write_failed(db, "update", booking_id, exc)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    *,
    db: Session = Depends(get_db),
    booking_id: int,
    status_in: BookingStatusUpdate,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    """Move a booking through its lifecycle. Only the service provider may call this."""
    booking = _get_booking_or_404(db, booking_id)
    if not is_business_owner(booking, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the service provider can update booking status",
        )
    try:
        return crud.booking.update_status(db, booking, status_in)
    except SQLAlchemyError as exc:
        raise _write_failed(db, "update", booking_id, exc)
