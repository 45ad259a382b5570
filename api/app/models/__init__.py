"""All models imported here so metadata.create_all sees every table."""

from app.models.analytics import AnalyticsEvent
from app.models.base import Base
from app.models.booking import Booking, BookingSource, BookingStatus, PaymentMethod, PaymentStatus
from app.models.update import Update
from app.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Booking",
    "BookingStatus",
    "BookingSource",
    "PaymentStatus",
    "PaymentMethod",
    "AnalyticsEvent",
    "Update",
]
