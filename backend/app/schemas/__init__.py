from .booking import (
    BookingCreate,
    BookingUpdate,
    BookingStatusUpdate,
    BookingResponse,
    RecalculateRequest,
    RecalculateResponse,
    TotalsResponse,
)
from .business import BusinessSummary, BusinessDetail, BusinessUpdate
from .movers_quote import (
    MoveQuoteRequest,
    MoveQuoteResponse,
    TierQuoteRequest,
    TierQuoteResponse,
)
