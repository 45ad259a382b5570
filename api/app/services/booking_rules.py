"""Booking rules enforcement.

All booking validation logic lives here, separate from the route handlers and
the admission pipeline. Pure rules return a BookingViolation or None; the
availability checker is the only rule that reads the database.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.booking import Booking, BookingStatus
from app.services.grounds import get_ground

MINUTES_PER_DAY = 24 * 60
ALLOWED_DURATIONS = (60, 90)
MAX_PLAYERS = 22


class BookingViolation(Exception):
    """Raised when a booking rule is violated."""

    status_code = 400

    def __init__(self, rule: str, message: str):
        self.rule = rule
        self.message = message
        super().__init__(message)


class InvalidBookingField(BookingViolation):
    """A field is malformed or out of range."""


class OutsideBookingWindow(BookingViolation):
    """The date is in the past or beyond the booking horizon."""


class SlotConflict(BookingViolation):
    """The slot overlaps an existing booking once the buffer is applied."""

    def __init__(self, conflict: tuple[time, time]):
        self.conflict = conflict
        super().__init__("slot_conflict", conflict_message(conflict))


class BookingNotFound(BookingViolation):
    status_code = 404


class InvalidStatusTransition(BookingViolation):
    status_code = 409


@dataclass(frozen=True)
class Availability:
    available: bool
    conflict: tuple[time, time] | None = None

    @property
    def message(self) -> str:
        if self.available:
            return "Time slot is available!"
        return conflict_message(self.conflict)


def conflict_message(conflict: tuple[time, time]) -> str:
    start, end = conflict
    return (
        f"Time slot conflicts with existing booking ({start:%H:%M} - {end:%H:%M}). "
        f"Please allow {settings.booking_buffer_minutes} minutes buffer between bookings."
    )


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------


def venue_today() -> date:
    """Today's date at the venue. Booking dates are naive local dates."""
    return datetime.now(ZoneInfo(settings.venue_timezone)).date()


def to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def calc_end_time(start_time: time, duration_minutes: int) -> time:
    """Calculate end time from start time and duration (wraps past midnight)."""
    start_dt = datetime.combine(date.today(), start_time)
    end_dt = start_dt + timedelta(minutes=duration_minutes)
    return end_dt.time()


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------


def check_ground(ground_number: int) -> BookingViolation | None:
    if get_ground(ground_number) is None:
        return InvalidBookingField("ground_number", f"Ground {ground_number} does not exist.")
    return None


def check_player_capacity(ground_number: int, player_count: int) -> BookingViolation | None:
    """Player count must be positive and fit on the chosen ground."""
    ground = get_ground(ground_number)
    if player_count < 1 or player_count > MAX_PLAYERS:
        return InvalidBookingField("player_count", f"Player count must be between 1 and {MAX_PLAYERS}.")
    if ground is not None and player_count > ground.capacity:
        return InvalidBookingField(
            "player_count",
            f"{ground.name} takes at most {ground.capacity} players ({ground.format}).",
        )
    return None


def check_time_range(start_time: time, end_time: time, duration_minutes: int | None = None) -> BookingViolation | None:
    """End must follow start on the same day; with a duration, end == start + duration."""
    start, end = to_minutes(start_time), to_minutes(end_time)
    if end <= start:
        return InvalidBookingField("end_time", "End time must be after start time on the same day.")
    if duration_minutes is not None:
        if duration_minutes not in ALLOWED_DURATIONS:
            return InvalidBookingField(
                "duration",
                f"Duration must be one of: {', '.join(str(d) for d in ALLOWED_DURATIONS)} minutes.",
            )
        if end - start != duration_minutes:
            return InvalidBookingField(
                "end_time",
                f"End time must be {duration_minutes} minutes after start time "
                f"({calc_end_time(start_time, duration_minutes):%H:%M}).",
            )
    return None


def check_horizon(booking_date: date, today: date | None = None) -> BookingViolation | None:
    """Customer bookings must fall within [today, today + horizon] inclusive."""
    today = today or venue_today()
    if booking_date < today:
        return OutsideBookingWindow("past_date", "Cannot book for past dates")
    if booking_date > today + timedelta(days=settings.booking_horizon_days):
        return OutsideBookingWindow(
            "advance_window",
            f"Booking only available up to {settings.booking_horizon_days} days in advance",
        )
    return None


def overlaps_with_buffer(
    start: int,
    end: int,
    booked_start: int,
    booked_end: int,
    buffer: int,
) -> bool:
    """Half-open overlap of [start, end] with the booked range padded by buffer on both sides.

    Covers a start inside the padded band, an end inside it, and the candidate
    swallowing the booking whole.
    """
    return start < booked_end + buffer and end > booked_start - buffer


def find_conflict(
    start_time: time,
    end_time: time,
    booked_intervals: list[tuple[time, time]],
    buffer: int | None = None,
) -> tuple[time, time] | None:
    """Return the first booked interval the candidate collides with, or None."""
    buffer = settings.booking_buffer_minutes if buffer is None else buffer
    start, end = to_minutes(start_time), to_minutes(end_time)
    for b_start, b_end in sorted(booked_intervals):
        if overlaps_with_buffer(start, end, to_minutes(b_start), to_minutes(b_end), buffer):
            return b_start, b_end
    return None


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def check_transition(current: BookingStatus, requested: BookingStatus) -> BookingViolation | None:
    if requested in ALLOWED_TRANSITIONS[current]:
        return None
    return InvalidStatusTransition(
        "status_transition",
        f"Cannot change booking status from {current.value} to {requested.value}.",
    )


def check_cancellation(booking: Booking | None, requester_id: int) -> BookingViolation | None:
    """Customers cancel only their own bookings, and only while still pending.

    Unknown, foreign and non-pending bookings all get the same answer.
    """
    if booking is None or booking.user_id != requester_id or booking.status != BookingStatus.PENDING:
        return BookingNotFound("booking_not_cancellable", "Booking not found or cannot be cancelled")
    return None


# ---------------------------------------------------------------------------
# Availability checker
# ---------------------------------------------------------------------------


async def booked_intervals(db: AsyncSession, ground_number: int, booking_date: date) -> list[tuple[time, time]]:
    """Start/end of every non-cancelled booking on a ground for one day."""
    result = await db.execute(
        select(Booking.start_time, Booking.end_time).where(
            Booking.ground_number == ground_number,
            Booking.booking_date == booking_date,
            Booking.status != BookingStatus.CANCELLED,
        )
    )
    return [(row[0], row[1]) for row in result.all()]


async def check_availability(
    db: AsyncSession,
    ground_number: int,
    booking_date: date,
    start_time: time,
    end_time: time,
) -> Availability:
    """Decide whether [start_time, end_time] fits on the ground that day.

    Other grounds and other days never conflict.
    """
    conflict = find_conflict(start_time, end_time, await booked_intervals(db, ground_number, booking_date))
    if conflict:
        return Availability(available=False, conflict=conflict)
    return Availability(available=True)
