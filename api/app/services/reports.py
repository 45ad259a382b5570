"""Admin reporting: dashboard figures, analytics and customer totals.

Cancelled bookings never count towards bookings or revenue.
"""

from datetime import date, timedelta

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingStatus
from app.models.user import User, UserRole
from app.services.booking_rules import venue_today

MONTHS_SHOWN = 12
POPULAR_SLOTS_SHOWN = 10
CUSTOMER_RECENT_BOOKINGS = 10

_active = Booking.status != BookingStatus.CANCELLED


async def _period(db: AsyncSession, *conditions) -> dict:
    result = await db.execute(
        select(func.count(Booking.id), func.coalesce(func.sum(Booking.total_amount), 0)).where(_active, *conditions)
    )
    count, revenue = result.one()
    return {"bookings": count, "revenue": float(revenue)}


async def monthly_revenue(db: AsyncSession, limit: int = MONTHS_SHOWN) -> list[dict]:
    """Bookings and revenue per calendar month of play, newest month first."""
    year = func.extract("year", Booking.booking_date).label("year")
    month = func.extract("month", Booking.booking_date).label("month")
    result = await db.execute(
        select(year, month, func.count(Booking.id), func.coalesce(func.sum(Booking.total_amount), 0))
        .where(_active)
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .limit(limit)
    )
    return [
        {"month": f"{int(y):04d}-{int(m):02d}", "bookings": count, "revenue": float(revenue)}
        for y, m, count, revenue in result.all()
    ]


async def dashboard_stats(db: AsyncSession, today: date | None = None) -> dict:
    today = today or venue_today()
    pending = await db.execute(select(func.count(Booking.id)).where(Booking.status == BookingStatus.PENDING))
    return {
        "today": await _period(db, Booking.booking_date == today),
        "weekly": await _period(db, Booking.booking_date >= today - timedelta(days=7)),
        "monthly": await _period(db, Booking.booking_date >= today.replace(day=1)),
        "pending_approvals": pending.scalar_one(),
        "monthly_revenue": await monthly_revenue(db),
    }


async def analytics_summary(db: AsyncSession) -> dict:
    """Popular start times, per-ground utilisation and the monthly revenue series."""
    booking_count = func.count(Booking.id).label("bookings")
    popular = await db.execute(
        select(Booking.start_time, booking_count)
        .where(_active)
        .group_by(Booking.start_time)
        .order_by(booking_count.desc(), Booking.start_time)
        .limit(POPULAR_SLOTS_SHOWN)
    )
    grounds = await db.execute(
        select(Booking.ground_number, func.count(Booking.id), func.coalesce(func.sum(Booking.total_amount), 0))
        .where(_active)
        .group_by(Booking.ground_number)
        .order_by(Booking.ground_number)
    )
    return {
        "popular_slots": [{"start_time": start.strftime("%H:%M"), "bookings": count} for start, count in popular.all()],
        "ground_stats": [
            {"ground_number": number, "bookings": count, "revenue": float(revenue)} for number, count, revenue in grounds.all()
        ],
        "monthly_revenue": await monthly_revenue(db),
    }


def _customer_totals_query():
    return (
        select(
            User,
            func.count(Booking.id).label("total_bookings"),
            func.coalesce(func.sum(Booking.total_amount), 0).label("total_spent"),
        )
        .outerjoin(Booking, and_(Booking.user_id == User.id, _active))
        .where(User.role == UserRole.CUSTOMER)
        .group_by(User.id)
    )


def _customer_row(user: User, total_bookings: int, total_spent) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "created_at": user.created_at,
        "total_bookings": total_bookings,
        "total_spent": float(total_spent),
    }


async def list_customers(db: AsyncSession) -> list[dict]:
    result = await db.execute(_customer_totals_query().order_by(User.created_at.desc()))
    return [_customer_row(*row) for row in result.all()]


async def customer_detail(db: AsyncSession, customer_id: int) -> dict | None:
    """Customer with booking totals and their most recent bookings, or None."""
    result = await db.execute(_customer_totals_query().where(User.id == customer_id))
    row = result.one_or_none()
    if row is None:
        return None
    bookings = await db.execute(
        select(Booking)
        .where(Booking.user_id == customer_id)
        .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        .limit(CUSTOMER_RECENT_BOOKINGS)
    )
    return {"customer": _customer_row(*row), "bookings": bookings.scalars().all()}
