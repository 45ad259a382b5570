"""Analytics/audit event recording.

Events are written in the caller's session so they commit (or roll back)
together with the change they describe.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.analytics import AnalyticsEvent

BOOKING_CREATED = "booking_created"
MANUAL_BOOKING_CREATED = "manual_booking_created"
BOOKING_STATUS_CHANGED = "booking_status_changed"
BOOKING_CANCELLED = "booking_cancelled"
CONTACT_FORM = "contact_form"


async def record_event(db: AsyncSession, event_type: str, data: dict) -> AnalyticsEvent:
    event = AnalyticsEvent(event_type=event_type, event_data=data)
    db.add(event)
    await db.flush()
    return event
