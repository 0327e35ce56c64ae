from pydantic import BaseModel, Field
from typing import List, Optional


class BusinessSummary(BaseModel):
    """Trimmed listing payload for marketplace search results."""

    id: int
    name: str
    category: str
    city: Optional[str] = None
    state: Optional[str] = None
    rating_avg: Optional[float] = None
    rating_count: Optional[int] = 0
    base_rate_cents: Optional[int] = None
    verified: bool = False
    service_types: Optional[List[str]] = None

    model_config = {"from_attributes": True}


class BusinessDetail(BusinessSummary):
    description: Optional[str] = None
    postal_code: Optional[str] = None
    hourly_rate_cents: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    base_rate_cents: Optional[int] = Field(default=None, ge=0)
    hourly_rate_cents: Optional[int] = Field(default=None, ge=0)
    service_types: Optional[List[str]] = None
