from .crud_booking import booking, merge_service_details
from . import crud_business
