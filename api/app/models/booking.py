"""Booking model.

A booking reserves one of the grounds for a date and time range. Bookings are
never deleted: cancellation is a status, so the table doubles as the history.
"""

import enum
from datetime import date, datetime, time

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.models.user import User


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingSource(str, enum.Enum):
    CUSTOMER = "customer"  # Self-service web booking
    MANUAL = "manual"      # Walk-in/phone booking entered by staff


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    BKASH = "bkash"
    NAGAD = "nagad"
    BANK = "bank"
    VENUE = "venue"  # Pay at the ground


def _enum(cls: type[enum.Enum], name: str) -> Enum:
    return Enum(cls, name=name, values_callable=lambda e: [x.value for x in e])


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))

    # Where / when
    ground_number: Mapped[int] = mapped_column(Integer, nullable=False)
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    player_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Status
    status: Mapped[BookingStatus] = mapped_column(
        _enum(BookingStatus, "booking_status"), default=BookingStatus.PENDING, nullable=False
    )
    source: Mapped[BookingSource] = mapped_column(
        _enum(BookingSource, "booking_source"), default=BookingSource.CUSTOMER, nullable=False
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Payment (self-reported; staff verify the screenshot)
    total_amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(_enum(PaymentMethod, "payment_method"), nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        _enum(PaymentStatus, "payment_status"), default=PaymentStatus.PENDING, nullable=False
    )
    payment_screenshot: Mapped[str | None] = mapped_column(String(255))

    # Metadata
    notes: Mapped[str | None] = mapped_column(Text)
    extra: Mapped[dict | None] = mapped_column(JSON, default=dict)

    user: Mapped[User | None] = relationship()

    __table_args__ = (
        # The availability checker reads exactly this slice
        Index("ix_bookings_ground_date", "ground_number", "booking_date", "status"),
        Index("ix_bookings_user", "user_id", "booking_date"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.booking_date} {self.start_time}-{self.end_time} ground={self.ground_number}>"
