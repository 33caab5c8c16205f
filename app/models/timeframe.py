from sqlalchemy import String, Integer, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Timeframe(Base):
    """Bookable slot of an operation day. current_bookings is only moved by app.db.procedures."""
    __tablename__ = "booking_timeframes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    operation_day_id: Mapped[str] = mapped_column(String(36), index=True)

    start_time: Mapped[str] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5))    # HH:MM

    max_bookings: Mapped[int] = mapped_column(Integer, default=0)
    current_bookings: Mapped[int] = mapped_column(Integer, default=0)
    overbooking_allowed: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
