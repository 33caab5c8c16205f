from decimal import Decimal
from sqlalchemy import String, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Voucher(Base):
    __tablename__ = "vouchers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    voucher_code: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    voucher_type_id: Mapped[str] = mapped_column(String(36), index=True)

    purchaser_name: Mapped[str] = mapped_column(String(200))
    purchaser_email: Mapped[str] = mapped_column(String(320), index=True)
    purchaser_phone: Mapped[str] = mapped_column(String(40), nullable=True)

    price_paid_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    payment_intent_id: Mapped[str] = mapped_column(String(120), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="active")  # active, redeemed, expired, cancelled
    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)  # null = never expires
    notes: Mapped[str] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
