"""Canonical total-due computation for a booking.

Every API that shows or stores a booking price (recalculate, booking edits,
the pay page preview) goes through :func:`compute_total_due` so the numbers
agree. The result is recomputed on every call; nothing is cached.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .pricing_context import (
    BASE_HOURS,
    BookingPricingContext,
    context_from_booking,
    round_half_up,
)

# Below $20/hour per mover a stored rate is assumed to already cover the crew.
TEAM_RATE_THRESHOLD_CENTS = 2000


@dataclass(frozen=True)
class TotalsResult:
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

    @property
    def subtotal_cents(self) -> int:
        """Everything except fees already attached to the booking record."""
        return (
            self.base_cents
            + self.additional_billed_cents
            + self.destination_cents
            + self.heavy_items_cents
            + self.packing_cents
            + self.stairs_cents
            + self.storage_cents
            + self.insurance_cents
        )

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def resolve_team_rate(context: BookingPricingContext) -> bool:
    """Decide whether ``hourly_rate_cents`` already covers the whole crew.

    An explicit flag on the booking wins. Otherwise the rate is read as a team
    rate when it works out to less than $20/hour per mover. Historical rows
    never recorded the convention, so this is a guess that can misfire (three
    movers at $50 each stored as 5000 reads as a $50 team rate).
    """
    if context.is_team_rate is not None:
        return context.is_team_rate
    if context.movers <= 0:
        return True
    return context.hourly_rate_cents / context.movers < TEAM_RATE_THRESHOLD_CENTS


def _rates(context: BookingPricingContext) -> tuple[int, int]:
    """Return ``(per_mover_rate_cents, team_hourly_cents)``."""
    rate = context.hourly_rate_cents
    if rate <= 0:
        return 0, 0
    if context.movers <= 0:
        return rate, rate
    if resolve_team_rate(context):
        return round_half_up(rate / context.movers), rate
    return rate, rate * context.movers


def compute_totals(context: BookingPricingContext) -> TotalsResult:
    per_mover, team = _rates(context)
    breakdown = context.breakdown

    if team > 0:
        base = round_half_up(team * BASE_HOURS)
    else:
        base = breakdown.base_hourly_cents

    # Hours past the base block are billed only once the provider confirms.
    additional = 0
    if context.bill_additional_hours and context.estimated_hours > BASE_HOURS and team > 0:
        additional = round_half_up(team * (context.estimated_hours - BASE_HOURS))

    packing = breakdown.packing_cents if context.packing_requested else 0
    stairs = breakdown.stairs_cents if context.stairs_flights > 0 else 0
    storage = breakdown.storage_cents if breakdown.storage_cents > 0 else 0
    insurance = breakdown.insurance_cents if breakdown.insurance_cents > 0 else 0

    subtotal = (
        base
        + additional
        + breakdown.destination_cents
        + breakdown.heavy_items_cents
        + packing
        + stairs
        + storage
        + insurance
    )

    return TotalsResult(
        base_hours=BASE_HOURS,
        movers=context.movers,
        per_mover_rate_cents=per_mover,
        team_hourly_cents=team,
        base_cents=base,
        additional_billed_cents=additional,
        destination_cents=breakdown.destination_cents,
        heavy_items_cents=breakdown.heavy_items_cents,
        packing_cents=packing,
        stairs_cents=stairs,
        storage_cents=storage,
        insurance_cents=insurance,
        total_due_cents=subtotal + context.additional_fees_cents,
    )


def compute_total_due(booking: Any) -> TotalsResult:
    """Return the totals for a booking row (ORM object or plain mapping)."""
    return compute_totals(context_from_booking(booking))


def booking_price_fields(totals: TotalsResult) -> dict[str, int]:
    """The two scalar columns written back to ``bookings``."""
    return {
        "base_price_cents": totals.subtotal_cents,
        "total_price_cents": totals.total_due_cents,
    }
