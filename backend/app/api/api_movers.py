# backend/app/api/api_movers.py

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.movers_quote import (
    MoveQuoteRequest,
    MoveQuoteResponse,
    TierQuoteRequest,
    TierQuoteResponse,
)
from ..services.movers_quote import calculate_quote, estimate_tier_price, pick_tier
from ..services.provider_config import load_provider_config, overrides_from_config
from ..utils.redis_cache import QueryCache, get_query_cache

router = APIRouter(tags=["movers"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


@router.post("/quote", response_model=TierQuoteResponse)
def estimate_movers_quote(
    *,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    quote_in: TierQuoteRequest,
) -> Any:
    """Ballpark price from the provider's crew-size tiers.

    Falls back to the built-in tier table when the provider has none.
    """
    if not quote_in.crewSize or not quote_in.estimatedHours:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")

    tier = None
    if quote_in.providerId:
        config = load_provider_config(db, quote_in.providerId, cache)
        if config is not None:
            tier = pick_tier(config.tiers, quote_in.crewSize)

    estimate = estimate_tier_price(
        quote_in.crewSize,
        quote_in.estimatedHours,
        quote_in.distanceMiles,
        tier,
    )
    return {
        "success": True,
        "price_total_cents": estimate.total_cents,
        "breakdown": {
            "base_cents": estimate.base_cents,
            "hourly_cents": estimate.hourly_cents,
            "travel_cents": estimate.travel_cents,
            "between_cents": estimate.between_cents,
            "oversized_cents": estimate.oversized_cents,
            "specialty_cents": estimate.specialty_cents,
        },
        "suggested_deposit_cents": estimate.suggested_deposit_cents,
    }


@router.post("/quotes/calculate", response_model=MoveQuoteResponse)
def calculate_move_quote(
    *,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    quote_in: MoveQuoteRequest,
) -> Any:
    """Instant quote for the booking form.

    ``service_details`` in the response is what the client stores on the
    booking so a later recalculation lands on the same total.
    """
    config = None
    if quote_in.business_id:
        config = load_provider_config(db, quote_in.business_id, cache)
    quote = calculate_quote(quote_in, overrides_from_config(config, quote_in.mover_team))
    logger.info(
        "Calculated move quote business=%s total=%s",
        quote_in.business_id,
        quote.total_cents,
    )
    return {
        "hourly_rate": quote.hourly_rate,
        "mover_team": quote.mover_team,
        "base_hours": quote.base_hours,
        "distance_miles": quote.distance_miles,
        "pickup_zip": quote.pickup_zip,
        "dropoff_zip": quote.dropoff_zip,
        "base_hourly_cents": quote.base_hourly_cents,
        "distance_cost_cents": quote.distance_cost_cents,
        "packing_cents": quote.packing_cents,
        "storage_cents": quote.storage_cents,
        "insurance_cents": quote.insurance_cents,
        "stairs_cents": quote.stairs_cents,
        "heavy_items_cents": quote.heavy_items_cents,
        "destination_fee_cents": quote.destination_fee_cents,
        "total_cents": quote.total_cents,
        "double_drive_time": quote.double_drive_time,
        "peak": quote.peak,
        "breakdown": quote.breakdown,
        "service_details": quote.service_details(),
    }
