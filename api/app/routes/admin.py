"""Admin routes: dashboard, booking management, customers, updates, analytics.

Every route requires an admin bearer token.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.core.dependencies import require_admin
from app.models.booking import Booking, BookingStatus
from app.models.update import Update
from app.models.user import User
from app.schemas import (
    AdminBookingOut,
    AnalyticsOut,
    BookingCreatedOut,
    BookingOut,
    CustomerDetailOut,
    CustomerOut,
    DashboardOut,
    ManualBookingCreate,
    MessageOut,
    StatusUpdate,
    UpdateCreatedOut,
    UpdateIn,
    UpdateOut,
)
from app.services import admission, reports
from app.services.booking_rules import BookingNotFound

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _admin_view(booking: Booking) -> AdminBookingOut:
    out = AdminBookingOut.model_validate(booking)
    if booking.user is not None:
        out.user_name = booking.user.name
        out.user_email = booking.user.email
        out.user_phone = booking.user.phone
    return out


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(db: AsyncSession = Depends(get_db)):
    return DashboardOut(**await reports.dashboard_stats(db))


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@router.get("/bookings", response_model=list[AdminBookingOut])
async def list_bookings(
    booking_status: BookingStatus | None = Query(None, alias="status"),
    booking_date: date | None = Query(None, alias="date"),
    ground: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Booking).options(selectinload(Booking.user))
    if booking_status:
        query = query.where(Booking.status == booking_status)
    if booking_date:
        query = query.where(Booking.booking_date == booking_date)
    if ground:
        query = query.where(Booking.ground_number == ground)

    result = await db.execute(query.order_by(Booking.created_at.desc(), Booking.id.desc()))
    return [_admin_view(b) for b in result.scalars().all()]


@router.get("/bookings/{booking_id}", response_model=AdminBookingOut)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Booking).options(selectinload(Booking.user)).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound("booking_not_found", "Booking not found")
    return _admin_view(booking)


@router.put("/bookings/{booking_id}/status", response_model=MessageOut)
async def update_booking_status(booking_id: int, body: StatusUpdate, db: AsyncSession = Depends(get_db)):
    await admission.set_status(db, booking_id, body.status, body.payment_status)
    return MessageOut(message="Booking status updated successfully")


@router.post("/bookings/manual", response_model=BookingCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_manual_booking(
    body: ManualBookingCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    booking = await admission.create_manual_booking(db, admin, body)
    return BookingCreatedOut(message="Manual booking created successfully", booking_id=booking.id)


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


@router.get("/customers", response_model=list[CustomerOut])
async def list_customers(db: AsyncSession = Depends(get_db)):
    return await reports.list_customers(db)


@router.get("/customers/{customer_id}", response_model=CustomerDetailOut)
async def get_customer(customer_id: int, db: AsyncSession = Depends(get_db)):
    detail = await reports.customer_detail(db, customer_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerDetailOut(
        customer=CustomerOut(**detail["customer"]),
        bookings=[BookingOut.model_validate(b) for b in detail["bookings"]],
    )


# ---------------------------------------------------------------------------
# Updates (news posts)
# ---------------------------------------------------------------------------


async def _get_update(db: AsyncSession, update_id: int) -> Update:
    update = await db.get(Update, update_id)
    if update is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Update not found")
    return update


@router.get("/updates", response_model=list[UpdateOut])
async def list_updates(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Update).order_by(Update.created_at.desc(), Update.id.desc()))
    return result.scalars().all()


@router.post("/updates", response_model=UpdateCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_update(body: UpdateIn, db: AsyncSession = Depends(get_db)):
    update = Update(
        title=body.title,
        content=body.content,
        image_url=str(body.image_url) if body.image_url else None,
        is_featured=body.is_featured,
    )
    db.add(update)
    await db.flush()
    return UpdateCreatedOut(message="Update created successfully", update_id=update.id)


@router.put("/updates/{update_id}", response_model=MessageOut)
async def edit_update(update_id: int, body: UpdateIn, db: AsyncSession = Depends(get_db)):
    update = await _get_update(db, update_id)
    update.title = body.title
    update.content = body.content
    update.image_url = str(body.image_url) if body.image_url else None
    update.is_featured = body.is_featured
    return MessageOut(message="Update updated successfully")


@router.delete("/updates/{update_id}", response_model=MessageOut)
async def delete_update(update_id: int, db: AsyncSession = Depends(get_db)):
    update = await _get_update(db, update_id)
    await db.delete(update)
    return MessageOut(message="Update deleted successfully")


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@router.get("/analytics", response_model=AnalyticsOut)
async def analytics(db: AsyncSession = Depends(get_db)):
    return AnalyticsOut(**await reports.analytics_summary(db))
