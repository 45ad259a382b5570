"""Booking admission and lifecycle.

create_booking / create_manual_booking run the rules in order (fields,
horizon, availability) and stop at the first violation. The availability
check and the insert share one per-(ground, date) lock and the insert is
committed before the lock is released, so overlapping requests cannot both
be admitted.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingSource, BookingStatus, PaymentMethod, PaymentStatus
from app.models.user import User
from app.schemas import BookingCreate, ManualBookingCreate
from app.services import uploads
from app.services.analytics import (
    BOOKING_CANCELLED,
    BOOKING_CREATED,
    BOOKING_STATUS_CHANGED,
    MANUAL_BOOKING_CREATED,
    record_event,
)
from app.services.booking_rules import (
    BookingNotFound,
    BookingViolation,
    InvalidStatusTransition,
    SlotConflict,
    check_availability,
    check_cancellation,
    check_ground,
    check_horizon,
    check_player_capacity,
    check_time_range,
    check_transition,
)
from app.services.pricing import calculate_booking_fee
from app.services.slot_locks import slot_lock
from app.services.uploads import PaymentScreenshot

logger = logging.getLogger(__name__)


def _raise_first(*violations: BookingViolation | None) -> None:
    for violation in violations:
        if violation is not None:
            raise violation


def _validate_fields(fields: BookingCreate) -> None:
    _raise_first(check_ground(fields.ground_number))
    _raise_first(
        check_player_capacity(fields.ground_number, fields.player_count),
        check_time_range(fields.start_time, fields.end_time, fields.duration),
    )


async def _admit(
    db: AsyncSession,
    booking: Booking,
    event_type: str,
    event_data: dict,
    screenshot: PaymentScreenshot | None = None,
) -> Booking:
    async with slot_lock(booking.ground_number, booking.booking_date):
        availability = await check_availability(
            db, booking.ground_number, booking.booking_date, booking.start_time, booking.end_time
        )
        if not availability.available:
            raise SlotConflict(availability.conflict)

        stored = screenshot.save() if screenshot else None
        booking.payment_screenshot = stored
        try:
            db.add(booking)
            await db.flush()
            await record_event(db, event_type, {"bookingId": booking.id, **event_data})
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            if stored:
                uploads.discard(stored)
            raise

    logger.info(
        "Admitted booking #%s ground=%s %s %s-%s (%s)",
        booking.id,
        booking.ground_number,
        booking.booking_date,
        booking.start_time.strftime("%H:%M"),
        booking.end_time.strftime("%H:%M"),
        booking.source.value,
    )
    return booking


async def create_booking(
    db: AsyncSession,
    owner: User,
    fields: BookingCreate,
    screenshot: PaymentScreenshot | None = None,
) -> Booking:
    """Customer self-service booking: pending approval, payment pending."""
    _validate_fields(fields)
    _raise_first(check_horizon(fields.booking_date))

    fee, band = calculate_booking_fee(fields.ground_number, fields.start_time, fields.duration)
    if fields.total_amount != fee:
        logger.warning(
            "Client quoted %s for ground %s at %s (%s min), charging %s",
            fields.total_amount,
            fields.ground_number,
            fields.start_time.strftime("%H:%M"),
            fields.duration,
            fee,
        )

    booking = Booking(
        user_id=owner.id,
        ground_number=fields.ground_number,
        booking_date=fields.booking_date,
        start_time=fields.start_time,
        end_time=fields.end_time,
        duration_minutes=fields.duration,
        player_count=fields.player_count,
        total_amount=fee,
        payment_method=fields.payment_method,
        payment_status=PaymentStatus.PENDING,
        status=BookingStatus.PENDING,
        source=BookingSource.CUSTOMER,
        notes=fields.notes,
        extra={"price_band": band, "quoted_amount": fields.total_amount},
    )
    return await _admit(
        db,
        booking,
        BOOKING_CREATED,
        {"userId": owner.id, "ground": fields.ground_number, "amount": fee},
        screenshot,
    )


async def create_manual_booking(db: AsyncSession, admin: User, fields: ManualBookingCreate) -> Booking:
    """Staff booking for a walk-in or phone customer.

    No horizon limit and no payment evidence: the booking is confirmed and
    paid at the venue. The amount is whatever staff agreed with the customer.
    """
    _validate_fields(fields)

    notes = f"Manual booking by admin for: {fields.customer_name} ({fields.customer_phone}). {fields.notes or ''}"
    booking = Booking(
        user_id=None,
        ground_number=fields.ground_number,
        booking_date=fields.booking_date,
        start_time=fields.start_time,
        end_time=fields.end_time,
        duration_minutes=fields.duration,
        player_count=fields.player_count,
        total_amount=fields.total_amount,
        payment_method=PaymentMethod.VENUE,
        payment_status=PaymentStatus.PAID,
        status=BookingStatus.CONFIRMED,
        source=BookingSource.MANUAL,
        notes=notes.strip(),
    )
    return await _admit(
        db,
        booking,
        MANUAL_BOOKING_CREATED,
        {"createdBy": admin.id, "ground": fields.ground_number, "amount": fields.total_amount},
    )


async def set_status(
    db: AsyncSession,
    booking_id: int,
    status: BookingStatus,
    payment_status: PaymentStatus | None = None,
) -> Booking:
    """Admin approve/reject, optionally recording the payment outcome.

    Repeating the current status is only accepted together with a payment
    status, as a payment-only update. Cancelled bookings are closed.
    """
    result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound("booking_not_found", "Booking not found")

    previous = booking.status
    if status == previous:
        if payment_status is None:
            raise InvalidStatusTransition("status_transition", f"Booking is already {status.value}.")
        if previous == BookingStatus.CANCELLED:
            raise InvalidStatusTransition("status_transition", "Cannot update payment on a cancelled booking.")
    else:
        _raise_first(check_transition(previous, status))
        booking.status = status
        if status == BookingStatus.CANCELLED:
            booking.cancelled_at = datetime.now(UTC)

    if payment_status is not None:
        booking.payment_status = payment_status

    await record_event(
        db,
        BOOKING_STATUS_CHANGED,
        {
            "bookingId": booking.id,
            "from": previous.value,
            "to": booking.status.value,
            "paymentStatus": booking.payment_status.value,
        },
    )
    logger.info("Booking #%s %s -> %s (payment %s)", booking.id, previous.value, booking.status.value, booking.payment_status.value)
    return booking


async def cancel_booking(db: AsyncSession, booking_id: int, requester_id: int) -> Booking:
    """Customer cancellation of their own pending booking. Frees the slot."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
    booking = result.scalar_one_or_none()
    _raise_first(check_cancellation(booking, requester_id))

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = datetime.now(UTC)
    await record_event(db, BOOKING_CANCELLED, {"bookingId": booking.id, "userId": requester_id})
    logger.info("Booking #%s cancelled by user %s", booking.id, requester_id)
    return booking
