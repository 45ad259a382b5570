"""Seed the database with The Green Field demo data.

Run with: python -m scripts.seed
Creates the schema, an admin, a demo customer, a few news posts and sample
bookings for the coming days. Bookings go through the normal admission
pipeline, so the seed data obeys the same rules as real traffic.
"""

import asyncio
from datetime import timedelta

from sqlalchemy import select

from app.core.auth import hash_password
from app.core.database import async_session_factory
from app.models import PaymentMethod, Update, User, UserRole
from app.schemas import BookingCreate, ManualBookingCreate, parse_clock
from app.services.admission import create_booking, create_manual_booking
from app.services.booking_rules import calc_end_time, venue_today
from app.services.bootstrap import init_models
from app.services.pricing import calculate_booking_fee

UPDATES = [
    {
        "title": "Floodlights upgraded",
        "content": "Both grounds now have new LED floodlights for night matches.",
        "is_featured": True,
    },
    {
        "title": "Weekend tournaments",
        "content": "7 vs 7 football tournament every Friday. Register your team at the venue.",
        "is_featured": False,
    },
]

# (days ahead, ground, start, duration, players, payment method)
CUSTOMER_BOOKINGS = [
    (1, 1, "09:00", 60, 14, PaymentMethod.BKASH),
    (1, 1, "18:00", 90, 12, PaymentMethod.NAGAD),
    (2, 2, "16:00", 60, 12, PaymentMethod.VENUE),
]

# (days ahead, ground, start, duration, players, amount, name, phone)
MANUAL_BOOKINGS = [
    (1, 2, "20:00", 90, 12, 1800, "Dhanmondi Strikers", "01711000000"),
    (3, 1, "21:00", 60, 14, 1500, "Office League", "01811000000"),
]


async def _get_or_create_user(db, email: str, **fields) -> tuple[User, bool]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user, False
    user = User(email=email, **fields)
    db.add(user)
    await db.commit()
    return user, True


async def seed():
    await init_models()
    today = venue_today()

    async with async_session_factory() as db:
        admin, _ = await _get_or_create_user(
            db,
            "admin@thegreenfield.com",
            name="Admin User",
            phone="01700000000",
            hashed_password=hash_password("admin123"),
            role=UserRole.ADMIN,
        )
        customer, created = await _get_or_create_user(
            db,
            "player@example.com",
            name="Demo Player",
            phone="01900000000",
            hashed_password=hash_password("player123"),
        )
        if not created:
            print("Demo data already present, nothing to do.")
            return

        db.add_all(Update(**data) for data in UPDATES)
        await db.commit()

        for days, ground, start, duration, players, method in CUSTOMER_BOOKINGS:
            start_time = parse_clock(start)
            fee, _ = calculate_booking_fee(ground, start_time, duration)
            fields = BookingCreate(
                ground_number=ground,
                booking_date=today + timedelta(days=days),
                start_time=start_time,
                end_time=calc_end_time(start_time, duration),
                duration=duration,
                player_count=players,
                payment_method=method,
                total_amount=fee,
            )
            await create_booking(db, customer, fields)

        for days, ground, start, duration, players, amount, name, phone in MANUAL_BOOKINGS:
            start_time = parse_clock(start)
            fields = ManualBookingCreate(
                ground_number=ground,
                booking_date=today + timedelta(days=days),
                start_time=start_time,
                end_time=calc_end_time(start_time, duration),
                duration=duration,
                player_count=players,
                total_amount=amount,
                customer_name=name,
                customer_phone=phone,
            )
            await create_manual_booking(db, admin, fields)

    print("Seeded: The Green Field")
    print(f"  {len(UPDATES)} updates")
    print(f"  {len(CUSTOMER_BOOKINGS)} customer bookings (pending approval)")
    print(f"  {len(MANUAL_BOOKINGS)} manual bookings (confirmed)")
    print("  2 test users:")
    print("    admin@thegreenfield.com / admin123")
    print("    player@example.com / player123")


if __name__ == "__main__":
    asyncio.run(seed())
