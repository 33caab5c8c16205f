from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class VoucherType(Base):
    __tablename__ = "voucher_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[str] = mapped_column(String(500), nullable=True)
    price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    validity_months: Mapped[int] = mapped_column(Integer, nullable=True)  # null/0 = never expires
    code_prefix: Mapped[str] = mapped_column(String(10), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class TicketType(Base):
    __tablename__ = "ticket_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    code_prefix: Mapped[str] = mapped_column(String(10), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
