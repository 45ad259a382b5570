"""Pydantic schemas for API serialisation.

Request bodies use camelCase keys (groundNumber, bookingDate, ...); the
populate_by_name flag lets Python callers use the field names directly.
"""

import re
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.booking import BookingStatus, PaymentMethod, PaymentStatus

CLOCK_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_clock(value: object) -> time:
    """Accept 24-hour HH:MM (single-digit hours allowed) or a time object."""
    if isinstance(value, time):
        return value
    match = CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError("must be a 24-hour time in HH:MM format")
    return time(int(match.group(1)), int(match.group(2)))


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# --- Auth ---


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None
    role: str


# --- Booking requests ---


class SlotRequest(CamelModel):
    """A ground, a day and a time range: what the availability check needs."""

    ground_number: int
    booking_date: date
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, value: object) -> time:
        return parse_clock(value)


class BookingCreate(SlotRequest):
    duration: int
    player_count: int
    payment_method: PaymentMethod
    total_amount: float = Field(ge=0)
    notes: str | None = Field(None, max_length=1000)


class ManualBookingCreate(BookingCreate):
    """Walk-in or phone booking taken by staff; payment is always at the venue."""

    customer_name: str = Field(min_length=1, max_length=200)
    customer_phone: str = Field(min_length=1, max_length=50)
    payment_method: PaymentMethod = PaymentMethod.VENUE
    duration: int | None = None

    @model_validator(mode="after")
    def default_duration(self) -> "ManualBookingCreate":
        # The admin dashboard sends only start and end
        if self.duration is None:
            self.duration = (self.end_time.hour * 60 + self.end_time.minute) - (
                self.start_time.hour * 60 + self.start_time.minute
            )
        return self


class StatusUpdate(CamelModel):
    status: BookingStatus
    payment_status: PaymentStatus | None = None


# --- Booking responses ---


class MessageOut(BaseModel):
    message: str


class AvailabilityCheckOut(BaseModel):
    available: bool
    message: str
    errors: list[dict] | None = None


class BookingCreatedOut(CamelModel):
    message: str
    booking_id: int


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    ground_number: int
    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    player_count: int
    total_amount: float
    payment_method: str
    payment_status: str
    payment_screenshot: str | None
    status: str
    source: str
    notes: str | None
    created_at: datetime

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")


class AdminBookingOut(BookingOut):
    user_name: str | None = None
    user_email: str | None = None
    user_phone: str | None = None


# --- Availability grid ---


class SlotOut(BaseModel):
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    is_available: bool


class IntervalOut(BaseModel):
    start_time: str
    end_time: str


class DayAvailabilityOut(BaseModel):
    ground_number: int
    ground_name: str
    date: date
    duration_minutes: int
    booked: list[IntervalOut]
    slots: list[SlotOut]


# --- Admin reporting ---


class PeriodStats(CamelModel):
    bookings: int
    revenue: float


class MonthlyRevenue(CamelModel):
    month: str  # "YYYY-MM"
    bookings: int
    revenue: float


class DashboardOut(CamelModel):
    today: PeriodStats
    weekly: PeriodStats
    monthly: PeriodStats
    pending_approvals: int
    monthly_revenue: list[MonthlyRevenue]


class PopularSlot(CamelModel):
    start_time: str
    bookings: int


class GroundStats(CamelModel):
    ground_number: int
    bookings: int
    revenue: float


class AnalyticsOut(CamelModel):
    popular_slots: list[PopularSlot]
    ground_stats: list[GroundStats]
    monthly_revenue: list[MonthlyRevenue]


class CustomerOut(UserOut):
    created_at: datetime
    total_bookings: int = 0
    total_spent: float = 0


class CustomerDetailOut(BaseModel):
    customer: CustomerOut
    bookings: list[BookingOut]


# --- Updates / customer site ---


class UpdateIn(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    image_url: HttpUrl | None = None
    is_featured: bool = False


class UpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    image_url: str | None
    is_featured: bool
    created_at: datetime


class UpdateCreatedOut(CamelModel):
    message: str
    update_id: int


class ContactRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    message: str = Field(min_length=1, max_length=5000)


class GroundPricingOut(BaseModel):
    number: int
    name: str
    format: str
    capacity: int
    facilities: list[str]
    peak_hours: str
    prices: dict[int, dict[str, int]]
