from decimal import Decimal
from sqlalchemy import String, DateTime, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Booking(Base):
    __tablename__ = "ticket_bookings"
    __table_args__ = (
        CheckConstraint("(ticket_type_id IS NULL) <> (voucher_type_id IS NULL)", name="ck_ticket_bookings_one_product"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_code: Mapped[str] = mapped_column(String(40), unique=True, index=True)

    operation_day_id: Mapped[str] = mapped_column(String(36), index=True)
    timeframe_id: Mapped[str] = mapped_column(String(36), index=True)

    # exactly one of the two products
    ticket_type_id: Mapped[str] = mapped_column(String(36), nullable=True)
    voucher_type_id: Mapped[str] = mapped_column(String(36), nullable=True)

    purchaser_name: Mapped[str] = mapped_column(String(200))
    purchaser_email: Mapped[str] = mapped_column(String(320), index=True)
    purchaser_phone: Mapped[str] = mapped_column(String(40), nullable=True)

    price_paid_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    payment_intent_id: Mapped[str] = mapped_column(String(120), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, confirmed, cancelled

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
