# backend/app/models/user.py

from sqlalchemy import Boolean, Column, Integer, String, Enum
from sqlalchemy.orm import relationship
from .base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """Roles recorded on ``profiles.role``."""

    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"

    @classmethod
    def _missing_(cls, value: object):
        """Map legacy role names to current ones."""
        if isinstance(value, str):
            legacy = value.strip().lower()
            if legacy in {"client", "consumer"}:
                return cls.CUSTOMER
            if legacy in {"business", "business_owner", "mover"}:
                return cls.PROVIDER
        return None


class Profile(BaseModel):
    __tablename__ = "profiles"

    id        = Column(Integer, primary_key=True, index=True)
    email     = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    phone     = Column(String, nullable=True)
    role      = Column(
        Enum(UserRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    is_active = Column(Boolean, default=True)

    businesses = relationship("Business", back_populates="owner", cascade="all, delete-orphan")
    bookings_as_customer = relationship(
        "Booking",
        foreign_keys="Booking.customer_id",
        back_populates="customer",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
