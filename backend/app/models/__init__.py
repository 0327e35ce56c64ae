from .user import Profile, UserRole
from .business import Business
from .booking import Booking
from .booking_status import BookingStatus, PaymentStatus
from .movers_provider_config import MoversProviderConfig

__all__ = [
    "Profile",
    "UserRole",
    "Business",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "MoversProviderConfig",
]
