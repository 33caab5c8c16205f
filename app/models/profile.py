from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Profile(Base):
    """Personal data row, created together with the identity (same id)."""
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # == users.id
    email: Mapped[str] = mapped_column(String(320), index=True)
    name: Mapped[str] = mapped_column(String(120), default="")
    surname: Mapped[str] = mapped_column(String(120), default="")

    telephone: Mapped[str] = mapped_column(String(40), nullable=True)
    birthday: Mapped[str] = mapped_column(String(10), nullable=True)  # YYYY-MM-DD
    street: Mapped[str] = mapped_column(String(200), nullable=True)
    house_number: Mapped[str] = mapped_column(String(20), nullable=True)
    zip: Mapped[str] = mapped_column(String(20), nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(80), nullable=True)
    emergency_contact_name: Mapped[str] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[str] = mapped_column(String(40), nullable=True)

    member_category: Mapped[str] = mapped_column(String(40), nullable=True)
    custom_fields_json: Mapped[str] = mapped_column(Text, default="{}")

    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
