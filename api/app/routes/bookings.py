"""Booking routes: availability, create, list, cancel."""

from datetime import date

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.booking import Booking, BookingStatus
from app.models.user import User
from app.schemas import (
    AvailabilityCheckOut,
    BookingCreate,
    BookingCreatedOut,
    BookingOut,
    DayAvailabilityOut,
    IntervalOut,
    MessageOut,
    SlotOut,
    SlotRequest,
)
from app.services import admission
from app.services.booking_rules import (
    ALLOWED_DURATIONS,
    InvalidBookingField,
    booked_intervals,
    check_availability,
    check_ground,
    check_horizon,
    check_time_range,
)
from app.services.grounds import get_ground
from app.services.operating_hours import generate_slots
from app.services.uploads import read_payment_screenshot

router = APIRouter(prefix="/bookings", tags=["bookings"])


def field_error(exc: ValidationError) -> InvalidBookingField:
    """First pydantic error as a booking field violation."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "body"
    return InvalidBookingField(field, f"{field}: {error['msg']}")


def _unavailable(message: str, errors: list[dict] | None = None) -> JSONResponse:
    out = AvailabilityCheckOut(available=False, message=message, errors=errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=out.model_dump(exclude_none=True))


@router.post(
    "/check-availability",
    response_model=AvailabilityCheckOut,
    response_model_exclude_none=True,
    responses={400: {"model": AvailabilityCheckOut}},
)
async def check_slot(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    """Every answer, including bad input, is {available, message} for the booking page."""
    try:
        body = SlotRequest.model_validate(payload)
    except ValidationError as exc:
        return _unavailable("Invalid input data", exc.errors(include_url=False, include_context=False))

    violation = check_ground(body.ground_number) or check_time_range(body.start_time, body.end_time)
    if violation:
        return _unavailable(violation.message)

    outside = check_horizon(body.booking_date)
    if outside:
        return AvailabilityCheckOut(available=False, message=outside.message)

    availability = await check_availability(db, body.ground_number, body.booking_date, body.start_time, body.end_time)
    return AvailabilityCheckOut(available=availability.available, message=availability.message)


@router.get("/availability", response_model=DayAvailabilityOut)
async def day_availability(
    ground_number: int = Query(..., alias="groundNumber"),
    query_date: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
    duration: int = Query(60, description="Slot length in minutes"),
    db: AsyncSession = Depends(get_db),
):
    """Hourly grid for one ground on one day, as shown on the booking page."""
    ground = get_ground(ground_number)
    if ground is None:
        raise InvalidBookingField("ground_number", f"Ground {ground_number} does not exist.")
    if duration not in ALLOWED_DURATIONS:
        raise InvalidBookingField(
            "duration", f"Duration must be one of: {', '.join(str(d) for d in ALLOWED_DURATIONS)} minutes."
        )

    intervals = sorted(await booked_intervals(db, ground_number, query_date))
    slots = generate_slots(query_date, duration, intervals)

    return DayAvailabilityOut(
        ground_number=ground.number,
        ground_name=ground.name,
        date=query_date,
        duration_minutes=duration,
        booked=[IntervalOut(start_time=f"{start:%H:%M}", end_time=f"{end:%H:%M}") for start, end in intervals],
        slots=[SlotOut(**s) for s in slots],
    )


@router.post("/create", response_model=BookingCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    ground_number: str = Form(..., alias="groundNumber"),
    booking_date: str = Form(..., alias="bookingDate"),
    start_time: str = Form(..., alias="startTime"),
    end_time: str = Form(..., alias="endTime"),
    duration: str = Form(...),
    player_count: str = Form(..., alias="playerCount"),
    payment_method: str = Form(..., alias="paymentMethod"),
    total_amount: str = Form(..., alias="totalAmount"),
    notes: str | None = Form(None),
    payment_screenshot: UploadFile | None = File(None, alias="paymentScreenshot"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    # Multipart values arrive as strings; the schema does the coercion so
    # form and JSON callers get the same field errors.
    try:
        fields = BookingCreate(
            ground_number=ground_number,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            player_count=player_count,
            payment_method=payment_method,
            total_amount=total_amount,
            notes=notes or None,
        )
    except ValidationError as exc:
        raise field_error(exc) from None

    screenshot = await read_payment_screenshot(payment_screenshot)
    booking = await admission.create_booking(db, user, fields, screenshot)
    return BookingCreatedOut(message="Booking created successfully! Awaiting admin approval.", booking_id=booking.id)


@router.get("/my-bookings", response_model=list[BookingOut])
async def list_my_bookings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user.id, Booking.status != BookingStatus.CANCELLED)
        .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
    )
    return result.scalars().all()


@router.put("/cancel/{booking_id}", response_model=MessageOut)
async def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await admission.cancel_booking(db, booking_id, user.id)
    return MessageOut(message="Booking cancelled successfully")
