"""Analytics event log.

Append-only record of business events (bookings created, status changes,
contact-form messages). Doubles as the audit trail for admissions.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    event_data: Mapped[dict | None] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (Index("ix_analytics_type_created", "event_type", "created_at"),)

    def __repr__(self) -> str:
        return f"<AnalyticsEvent {self.event_type} #{self.id}>"
