from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError, jwt

from ..core.config import settings
from ..database import get_db
from ..models import Booking, Profile

# Tokens are minted by the hosted auth provider; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    request: Request = None,
) -> Profile:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    jwt_token = token or (request.cookies.get("access_token") if request else None)
    if not jwt_token:
        raise credentials_exception
    try:
        payload = jwt.decode(jwt_token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        profile_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception
    user = db.query(Profile).filter(Profile.id == profile_id).first()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def is_business_owner(booking: Booking, user: Profile) -> bool:
    business = booking.business
    return business is not None and business.owner_id == user.id


def can_manage_booking(booking: Booking, user: Profile) -> bool:
    """Providers who own the booked business, and admins, may change prices."""
    return is_business_owner(booking, user) or user.is_admin


def can_view_booking(booking: Booking, user: Profile) -> bool:
    return booking.customer_id == user.id or can_manage_booking(booking, user)
