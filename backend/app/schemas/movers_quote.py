from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PackingMaterialIn(BaseModel):
    name: str
    price_cents: float
    quantity: Optional[float] = 1


class HeavyItemIn(BaseModel):
    band: str
    count: int = Field(ge=0)
    price_cents: int = Field(ge=0)


class MoveQuoteRequest(BaseModel):
    """Booking form inputs for an instant move quote."""

    business_id: Optional[int] = None
    pickup_address: str = ""
    dropoff_address: str = ""
    all_addresses: List[str] = Field(default_factory=list)
    move_size: str = ""
    packing_help: str = "none"
    packing_rooms: int = Field(default=0, ge=0)
    packing_materials: List[PackingMaterialIn] = Field(default_factory=list)
    storage: str = "none"
    storage_size: str = ""
    ins_coverage: str = "basic"
    stairs_flights: int = Field(default=0, ge=0)
    heavy_items: List[HeavyItemIn] = Field(default_factory=list)
    mover_team: int = Field(default=2, ge=1, le=8)
    hourly_rate: float = Field(default=140, ge=100, le=500)


class MoveQuoteResponse(BaseModel):
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
    breakdown: Dict[str, int]
    service_details: Dict[str, object]


class TierQuoteRequest(BaseModel):
    providerId: Optional[int] = None
    crewSize: Optional[int] = Field(default=None, ge=0)
    estimatedHours: Optional[float] = Field(default=None, ge=0)
    distanceMiles: float = Field(default=0, ge=0)


class TierQuoteBreakdown(BaseModel):
    base_cents: int
    hourly_cents: int
    travel_cents: int
    between_cents: int
    oversized_cents: int
    specialty_cents: int


class TierQuoteResponse(BaseModel):
    success: bool = True
    price_total_cents: int
    breakdown: TierQuoteBreakdown
    suggested_deposit_cents: int
