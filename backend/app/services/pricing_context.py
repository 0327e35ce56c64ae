"""Normalize a booking record into the inputs of the totals calculator.

Booking rows have accumulated several generations of field names for the
same money values (``packing_cost`` vs ``packingCost`` vs
``packing_cost_cents``; dollars in some keys, cents in others). All of that
probing happens here, once, so :mod:`app.services.booking_totals` only sees
canonical integer-cent values.

Nothing in this module raises on bad data: absent, malformed, boolean,
nested or negative values resolve to ``0``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

BASE_HOURS = 3

BASE_HOURLY_KEYS = ("base_hourly_cents", "base_hourly", "baseHourly", "basePrice")
DESTINATION_KEYS = ("destination_fee_cents", "destination_fee", "destinationFee")
HEAVY_ITEMS_KEYS = ("heavy_items_cost_cents", "heavy_items_cost", "heavy_items")
PACKING_KEYS = ("packing_cost_cents", "packing_cost", "packingCost", "packing")
STAIRS_KEYS = ("stairs_cost_cents", "stairs_cost", "stairsCost", "stairs")
STORAGE_KEYS = ("storage_cost_cents", "storage_cost", "storageCost", "storage")
INSURANCE_KEYS = ("insurance_cost_cents", "insurance_cost", "insuranceCost", "insurance")

_NUMERIC_PREFIX = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def round_half_up(value: Any) -> int:
    """Round to the nearest integer, halves away from zero; junk becomes 0."""
    try:
        return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError, TypeError):
        return 0


def parse_number(value: Any, *, strip_currency: bool = False) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric.

    Strings are parsed by their leading numeric prefix (``"12.5 hrs"`` is
    12.5). Booleans are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.replace("$", "").replace(",", "") if strip_currency else value
        match = _NUMERIC_PREFIX.match(text)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def cents_from(value: Any) -> int:
    """Convert a dollar amount (number or ``"$1,234.50"`` string) to cents."""
    number = parse_number(value, strip_currency=True)
    if number is None:
        return 0
    return round_half_up(number * 100)


def breakdown_value(breakdown: Mapping[str, Any], keys: Sequence[str]) -> int:
    """Return the first present scalar among ``keys`` as non-negative cents.

    Keys containing ``cents`` hold cents; every other key holds dollars.
    """
    for key in keys:
        value = breakdown.get(key)
        if value is None or isinstance(value, (Mapping, list, tuple)):
            continue
        if "cents" in key.lower():
            number = parse_number(value)
            cents = round_half_up(number) if number is not None else 0
        else:
            cents = cents_from(value)
        return max(0, cents)
    return 0


def _read_field(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _first_positive(*values: Any) -> Optional[float]:
    for value in values:
        number = parse_number(value)
        if number is not None and number > 0:
            return number
    return None


@dataclass(frozen=True)
class PricingBreakdown:
    """Canonical surcharge amounts, all non-negative integer cents."""

    base_hourly_cents: int = 0
    destination_cents: int = 0
    heavy_items_cents: int = 0
    packing_cents: int = 0
    stairs_cents: int = 0
    storage_cents: int = 0
    insurance_cents: int = 0


@dataclass(frozen=True)
class BookingPricingContext:
    movers: int = 0
    hourly_rate_cents: int = 0
    # True/False when the booking says which convention the rate uses,
    # None when it has to be inferred.
    is_team_rate: Optional[bool] = None
    estimated_hours: float = BASE_HOURS
    bill_additional_hours: bool = False
    packing_requested: bool = False
    stairs_flights: int = 0
    additional_fees_cents: int = 0
    breakdown: PricingBreakdown = field(default_factory=PricingBreakdown)


def _destination_cents(details: Mapping[str, Any], breakdown: Mapping[str, Any]) -> int:
    if any(key in breakdown for key in DESTINATION_KEYS):
        return breakdown_value(breakdown, DESTINATION_KEYS)
    if "destination_fee" not in details:
        return 0
    raw = details.get("destination_fee")
    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        number = parse_number(raw)
        if number is None:
            return 0
        # Bare numbers above 100 were stored as cents, smaller ones as dollars
        cents = round_half_up(number) if number > 100 else round_half_up(number * 100)
    else:
        cents = cents_from(raw)
    return max(0, cents)


def _heavy_items_cents(details: Mapping[str, Any], breakdown: Mapping[str, Any]) -> int:
    items = details.get("heavy_items")
    if isinstance(items, list) and items:
        total = 0
        for item in items:
            item = _as_mapping(item)
            price = parse_number(item.get("price_cents")) or 0
            count = parse_number(item.get("count"))
            if count is None:
                count = 1
            total += max(0, round_half_up(price * count))
        return total
    if any(breakdown.get(key) for key in HEAVY_ITEMS_KEYS):
        return breakdown_value(breakdown, HEAVY_ITEMS_KEYS)
    return 0


def normalize_breakdown(service_details: Any) -> PricingBreakdown:
    """Collapse every historical breakdown key into a :class:`PricingBreakdown`."""
    details = _as_mapping(service_details)
    breakdown = _as_mapping(details.get("breakdown"))
    return PricingBreakdown(
        base_hourly_cents=breakdown_value(breakdown, BASE_HOURLY_KEYS),
        destination_cents=_destination_cents(details, breakdown),
        heavy_items_cents=_heavy_items_cents(details, breakdown),
        packing_cents=breakdown_value(breakdown, PACKING_KEYS),
        stairs_cents=breakdown_value(breakdown, STAIRS_KEYS),
        storage_cents=breakdown_value(breakdown, STORAGE_KEYS),
        insurance_cents=breakdown_value(breakdown, INSURANCE_KEYS),
    )


def context_from_booking(booking: Any) -> BookingPricingContext:
    """Build the pricing context from a booking row (ORM object or mapping)."""
    details = _as_mapping(_read_field(booking, "service_details"))
    breakdown = _as_mapping(details.get("breakdown"))

    movers = _first_positive(details.get("mover_team"), details.get("crew_size"), breakdown.get("mover_team"))

    hourly = _first_positive(_read_field(booking, "hourly_rate_cents"), details.get("hourly_rate_cents"))
    if hourly is None:
        dollars = _first_positive(details.get("hourly_rate"))
        hourly = dollars * 100 if dollars is not None else None

    flag = details.get("hourly_rate_is_team_rate")
    is_team_rate = flag if isinstance(flag, bool) else None

    estimated = _first_positive(
        _read_field(booking, "estimated_duration_hours"),
        details.get("estimated_duration_hours"),
    )

    packing_help = details.get("packing_help") or details.get("packing") or "none"
    stairs = parse_number(details.get("stairs_flights"))

    fees = parse_number(_read_field(booking, "additional_fees_cents"))

    return BookingPricingContext(
        movers=round_half_up(movers) if movers is not None else 0,
        hourly_rate_cents=round_half_up(hourly) if hourly is not None else 0,
        is_team_rate=is_team_rate,
        estimated_hours=estimated if estimated is not None else BASE_HOURS,
        bill_additional_hours=details.get("bill_additional") is True,
        packing_requested=packing_help != "none",
        stairs_flights=max(0, round_half_up(stairs)) if stairs is not None else 0,
        additional_fees_cents=max(0, round_half_up(fees)) if fees is not None else 0,
        breakdown=normalize_breakdown(details),
    )
