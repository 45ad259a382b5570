"""Opening hours and slot generation for ground availability.

Pure calculation module, no database or FastAPI dependencies. The venue is
open round the clock, so the grid is every hour from 00:00 whose slot still
ends before midnight.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.services.booking_rules import find_conflict

OPEN_TIME = time(0, 0)
SLOT_STEP_MINUTES = 60


def generate_slots(
    query_date: date,
    duration_minutes: int,
    booked_intervals: list[tuple[time, time]],
    now: datetime | None = None,
) -> list[dict]:
    """Generate the hourly slot grid for a ground on a given date.

    Returns a list of dicts with keys: start_time, end_time, is_available.
    Slots that already started and slots that collide with a booking (buffer
    included, same rule as the availability checker) are marked unavailable.
    """
    tz = ZoneInfo(settings.venue_timezone)
    now = now or datetime.now(tz)

    slots: list[dict] = []
    current = datetime.combine(query_date, OPEN_TIME, tzinfo=tz)
    midnight = current + timedelta(days=1)

    while current + timedelta(minutes=duration_minutes) < midnight:
        slot_start = current.time()
        slot_end = (current + timedelta(minutes=duration_minutes)).time()

        is_past = current <= now
        conflict = find_conflict(slot_start, slot_end, booked_intervals)

        slots.append(
            {
                "start_time": slot_start.strftime("%H:%M"),
                "end_time": slot_end.strftime("%H:%M"),
                "is_available": not is_past and conflict is None,
            }
        )
        current += timedelta(minutes=SLOT_STEP_MINUTES)

    return slots
