"""Instant move quotes.

Deterministic, offline estimates for the movers booking flow. Distances are
approximated from ZIP codes so a quote can be produced without a mapping
API round-trip; all money is handled in integer cents.

The breakdown a quote produces uses the same ``*_cents`` keys that
:mod:`app.services.pricing_context` reads, so a booking created from a quote
totals to the same amount when it is later recalculated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .pricing_context import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_BASE_ZIP = "91605"
DEFAULT_BASE_HOURS = 3
DEFAULT_PER_MILE = 3.3
DEFAULT_PACKING_PER_ROOM_CENTS = 9900
DEFAULT_DESTINATION_PER_MILE_CENTS = 230
DESTINATION_FEE_RADIUS_MILES = 25
DOUBLE_DRIVE_TIME_MILES = 10
UNKNOWN_DISTANCE_MILES = 10.0

PER_MILE_BY_MOVE_SIZE = {
    "studio": 3.1,
    "1-bedroom": 3.2,
    "2-bedroom": 3.3,
    "3-bedroom": 3.4,
    "4+-bedroom": 3.5,
    "1-10": 3.3,
}

INSURANCE_CENTS = {"basic": 0, "standard": 15000, "premium": 30000}
STORAGE_PLAN_CENTS = {"none": 0, "temporary": 15000, "long-term": 25000}
STORAGE_UNIT_MONTHLY_CENTS = {
    "5' × 10'": 25000,
    "10' × 10'": 30000,
    "10' × 20'": 55000,
}

_ZIP_RE = re.compile(r"\b\d{5}(?:-\d{4})?\b")


@dataclass(frozen=True)
class ProviderTier:
    crew_size: int
    min_hours: float = 2
    base_rate_cents: int = 0
    hourly_rate_cents: int = 0
    per_mile_cents: int = 0


@dataclass(frozen=True)
class StairsPolicy:
    included: bool = True
    per_flight_cents: int = 0


@dataclass(frozen=True)
class PackingMaterial:
    name: str
    price_cents: int = 0
    included: bool = False


@dataclass(frozen=True)
class PackingConfig:
    enabled: bool = False
    per_room_cents: int = 0
    materials_included: bool = False
    materials: tuple[PackingMaterial, ...] = ()


@dataclass(frozen=True)
class QuoteOverrides:
    """Provider-specific knobs; anything left as ``None`` uses the defaults."""

    per_mile: Optional[float] = None
    min_hours: Optional[float] = None
    stairs: Optional[StairsPolicy] = None
    base_zip: Optional[str] = None
    destination_fee_per_mile_cents: Optional[int] = None
    packing: Optional[PackingConfig] = None


@dataclass(frozen=True)
class MoveQuote:
    hourly_rate: float
    mover_team: int
    base_hours: float
    distance_miles: float
    pickup_zip: str
    dropoff_zip: str
    base_hourly_cents: int
    distance_cost_cents: int
    packing_cents: int
    storage_cents: int
    insurance_cents: int
    stairs_cents: int
    heavy_items_cents: int
    destination_fee_cents: int
    total_cents: int
    double_drive_time: bool
    peak: bool = False
    breakdown: Dict[str, int] = field(default_factory=dict)
    packing_help: str = "none"
    stairs_flights: int = 0

    def service_details(self) -> Dict[str, Any]:
        """Pricing fields to store on a booking created from this quote."""
        return {
            "mover_team": self.mover_team,
            "hourly_rate": self.hourly_rate,
            # The quoted hourly rate is what the whole crew costs per hour.
            "hourly_rate_is_team_rate": True,
            "trip_distance_miles": self.distance_miles,
            "double_drive_time": self.double_drive_time,
            "packing_help": self.packing_help,
            "stairs_flights": self.stairs_flights,
            "breakdown": dict(self.breakdown),
        }


@dataclass(frozen=True)
class TierEstimate:
    base_cents: int
    hourly_cents: int
    travel_cents: int
    between_cents: int
    oversized_cents: int
    specialty_cents: int
    total_cents: int
    suggested_deposit_cents: int


def extract_zip(address: Optional[str]) -> str:
    """Return the 5-digit ZIP found in ``address`` (ZIP+4 truncated)."""
    if not address:
        return ""
    match = _ZIP_RE.search(address)
    return match.group(0)[:5] if match else ""


def approx_distance_miles(zip_a: Optional[str], zip_b: Optional[str]) -> float:
    """Rough driving distance between two ZIPs.

    Only the last two digits are compared; good enough to tell a local move
    from a cross-town one until real routing replaces it.
    """
    if not zip_a or not zip_b:
        return UNKNOWN_DISTANCE_MILES

    def tail(zip_code: str) -> int:
        digits = zip_code[3:]
        return int(digits) if digits.isdigit() else 0

    return max(2.0, abs(tail(zip_a) - tail(zip_b)) * 1.2)


def _packing_cents(request: Any, packing: Optional[PackingConfig]) -> int:
    help_type = request.packing_help or "none"
    rooms = request.packing_rooms or 0
    if help_type == "none" or rooms <= 0:
        return 0
    per_room = packing.per_room_cents if packing and packing.per_room_cents else 0
    if help_type == "kit":
        return (per_room or DEFAULT_PACKING_PER_ROOM_CENTS) * rooms
    if help_type == "paygo":
        total = sum(
            round_half_up((m.price_cents or 0) * (m.quantity or 1))
            for m in (request.packing_materials or [])
        )
        if total == 0 and per_room:
            total = per_room * rooms
        return total
    return 0


def _storage_cents(request: Any) -> int:
    if request.storage_size:
        return STORAGE_UNIT_MONTHLY_CENTS.get(request.storage_size, 0)
    return STORAGE_PLAN_CENTS.get(request.storage or "none", 0)


def _stairs_cents(flights: int, policy: Optional[StairsPolicy]) -> int:
    if flights <= 0 or policy is None or policy.included:
        return 0
    return (policy.per_flight_cents or 0) * flights


def _heavy_items_cents(items: Sequence[Any]) -> int:
    return sum((item.price_cents or 0) * (item.count or 0) for item in items or [])


def calculate_quote(request: Any, overrides: Optional[QuoteOverrides] = None) -> MoveQuote:
    """Price a move from the booking form inputs.

    ``request`` is a :class:`app.schemas.movers_quote.MoveQuoteRequest` (or
    anything with the same attributes).
    """
    overrides = overrides or QuoteOverrides()

    pickup_zip = extract_zip(request.pickup_address)
    dropoff_zip = extract_zip(request.dropoff_address)
    distance = approx_distance_miles(pickup_zip, dropoff_zip)

    base_hours = overrides.min_hours if overrides.min_hours is not None else DEFAULT_BASE_HOURS
    hourly_rate = request.hourly_rate
    base_hourly = round_half_up(hourly_rate * 100 * base_hours)

    per_mile = overrides.per_mile
    if per_mile is None:
        per_mile = PER_MILE_BY_MOVE_SIZE.get(request.move_size or "1-10", DEFAULT_PER_MILE)
    distance_cost = round_half_up(distance * per_mile * 100)

    packing = _packing_cents(request, overrides.packing)
    storage = _storage_cents(request)
    insurance = INSURANCE_CENTS.get(request.ins_coverage or "basic", 0)
    stairs = _stairs_cents(request.stairs_flights or 0, overrides.stairs)
    heavy = _heavy_items_cents(request.heavy_items)

    base_zip = overrides.base_zip or DEFAULT_BASE_ZIP
    furthest = max(
        approx_distance_miles(base_zip, pickup_zip),
        approx_distance_miles(base_zip, dropoff_zip),
    )
    per_mile_fee_cents = overrides.destination_fee_per_mile_cents or DEFAULT_DESTINATION_PER_MILE_CENTS
    destination = 0
    if furthest > DESTINATION_FEE_RADIUS_MILES:
        # Destination fees are quoted in whole dollars.
        destination = round_half_up(furthest * per_mile_fee_cents / 100) * 100

    total = base_hourly + packing + storage + insurance + stairs + heavy + destination
    double_drive_time = distance > DOUBLE_DRIVE_TIME_MILES or destination > 0

    logger.debug(
        "Move quote: distance=%.1f furthest=%.1f packing=%d heavy=%d total=%d",
        distance,
        furthest,
        packing,
        heavy,
        total,
    )

    return MoveQuote(
        hourly_rate=hourly_rate,
        mover_team=request.mover_team,
        base_hours=base_hours,
        distance_miles=distance,
        pickup_zip=pickup_zip,
        dropoff_zip=dropoff_zip,
        base_hourly_cents=base_hourly,
        distance_cost_cents=distance_cost,
        packing_cents=packing,
        storage_cents=storage,
        insurance_cents=insurance,
        stairs_cents=stairs,
        heavy_items_cents=heavy,
        destination_fee_cents=destination,
        total_cents=total,
        double_drive_time=double_drive_time,
        packing_help=request.packing_help or "none",
        stairs_flights=request.stairs_flights or 0,
        breakdown={
            "base_hourly_cents": base_hourly,
            "distance_cost_cents": distance_cost,
            "packing_cost_cents": packing,
            "storage_cost_cents": storage,
            "insurance_cost_cents": insurance,
            "stairs_cost_cents": stairs,
            "heavy_items_cost_cents": heavy,
            "destination_fee_cents": destination,
            "total_cents": total,
        },
    )


def pick_tier(tiers: Sequence[ProviderTier], crew_size: int) -> Optional[ProviderTier]:
    """Exact crew-size tier, else the nearest one (earliest wins a tie)."""
    if not tiers:
        return None
    for tier in tiers:
        if tier.crew_size == crew_size:
            return tier
    return min(tiers, key=lambda t: abs(t.crew_size - crew_size))


_DEFAULT_BASE_RATE_CENTS = {2: 17000, 3: 26000, 4: 37000, 5: 50000}
_DEFAULT_HOURLY_RATE_CENTS = {2: 10000, 3: 15000, 4: 20000, 5: 25000}
DEFAULT_TRAVEL_PER_MILE_CENTS = 353
BETWEEN_LOCATIONS_PER_MILE_CENTS = 300
FREE_MILES = 10
DEPOSIT_RATE = 0.1


def default_tier(crew_size: int) -> ProviderTier:
    return ProviderTier(
        crew_size=crew_size,
        min_hours=2,
        base_rate_cents=_DEFAULT_BASE_RATE_CENTS.get(crew_size, 17000),
        hourly_rate_cents=_DEFAULT_HOURLY_RATE_CENTS.get(crew_size, 10000),
        per_mile_cents=DEFAULT_TRAVEL_PER_MILE_CENTS,
    )


def estimate_tier_price(
    crew_size: int,
    estimated_hours: float,
    distance_miles: float,
    tier: Optional[ProviderTier] = None,
) -> TierEstimate:
    """Quick price from a crew-size tier: base block, extra hours, mileage."""
    tier = tier or default_tier(crew_size)
    hours = max(estimated_hours, tier.min_hours)
    billable_miles = max(0.0, (distance_miles or 0) - FREE_MILES)

    base = tier.base_rate_cents
    hourly = round_half_up((hours - tier.min_hours) * tier.hourly_rate_cents)
    travel = round_half_up(billable_miles * (tier.per_mile_cents or DEFAULT_TRAVEL_PER_MILE_CENTS))
    between = round_half_up(billable_miles * BETWEEN_LOCATIONS_PER_MILE_CENTS)
    total = base + hourly + travel + between

    return TierEstimate(
        base_cents=base,
        hourly_cents=hourly,
        travel_cents=travel,
        between_cents=between,
        oversized_cents=0,
        specialty_cents=0,
        total_cents=total,
        suggested_deposit_cents=round_half_up(total * DEPOSIT_RATE),
    )


def tiers_from_rows(rows: Any) -> List[ProviderTier]:
    """Build tiers from stored JSON rows, skipping malformed entries."""
    tiers: List[ProviderTier] = []
    for row in rows or []:
        if not isinstance(row, dict) or row.get("crew_size") is None:
            continue
        try:
            tiers.append(
                ProviderTier(
                    crew_size=int(row["crew_size"]),
                    min_hours=float(row.get("min_hours") or 2),
                    base_rate_cents=int(row.get("base_rate_cents") or 0),
                    hourly_rate_cents=int(row.get("hourly_rate_cents") or 0),
                    per_mile_cents=int(row.get("per_mile_cents") or 0),
                )
            )
        except (TypeError, ValueError):
            logger.warning("Skipping malformed pricing tier: %s", row)
    return sorted(tiers, key=lambda t: t.crew_size)
