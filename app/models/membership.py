from decimal import Decimal
from sqlalchemy import String, Integer, Date, DateTime, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime, timezone
from app.db.session import Base

class MembershipType(Base):
    __tablename__ = "membership_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    duration_value: Mapped[int] = mapped_column(Integer, default=1)
    duration_unit: Mapped[str] = mapped_column(String(10), default="years")  # days, months, years
    member_number_prefix: Mapped[str] = mapped_column(String(10))
    member_category: Mapped[str] = mapped_column(String(40), nullable=True)
    auto_renew: Mapped[bool] = mapped_column(Boolean, default=False)
    price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class UserMembership(Base):
    __tablename__ = "user_memberships"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    membership_type_id: Mapped[str] = mapped_column(String(36), index=True)
    member_number: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="active")  # active, expired, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), default="unpaid")  # paid, unpaid, pending
    auto_renew: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[str] = mapped_column(String(500), nullable=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class PaymentStatusHistory(Base):
    __tablename__ = "payment_status_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    membership_id: Mapped[str] = mapped_column(String(36), index=True)
    old_status: Mapped[str] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20))
    changed_by: Mapped[str] = mapped_column(String(36), nullable=True)
    notes: Mapped[str] = mapped_column(String(500), nullable=True)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
