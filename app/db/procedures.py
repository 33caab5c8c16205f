"""
Store-side procedures.

Each function is a single statement followed by its own commit, so callers get
per-call atomicity and nothing more. Multi-step flows built on top of these
must compensate on their own (see app.services.saga).
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import as_utc, utcnow
from app.models.product import VoucherType
from app.models.timeframe import Timeframe
from app.models.voucher import Voucher

logger = logging.getLogger(__name__)


class SlotUnavailable(Exception):
    """increment_timeframe_bookings found the timeframe full, inactive or missing."""


@dataclass(frozen=True)
class TimeframeAvailability:
    available: bool
    max_bookings: int
    current_bookings: int
    overbooking_allowed: int
    slots_remaining: int


@dataclass(frozen=True)
class VoucherAvailability:
    available: bool
    voucher_id: str
    status: str
    valid_until: datetime | None
    voucher_type_name: str | None
    error_message: str | None


def check_timeframe_availability(db: Session, timeframe_id: str) -> TimeframeAvailability | None:
    row = db.execute(
        select(
            Timeframe.max_bookings,
            Timeframe.current_bookings,
            Timeframe.overbooking_allowed,
        ).where(Timeframe.id == timeframe_id)
    ).one_or_none()
    if row is None:
        return None
    max_bookings, current, overbooking = int(row[0] or 0), int(row[1] or 0), int(row[2] or 0)
    ceiling = max_bookings + overbooking
    return TimeframeAvailability(
        available=current < ceiling,
        max_bookings=max_bookings,
        current_bookings=current,
        overbooking_allowed=overbooking,
        slots_remaining=max(0, ceiling - current),
    )


def increment_timeframe_bookings(db: Session, timeframe_id: str) -> None:
    """Take one slot. Check and increment happen in one UPDATE, so the ceiling holds under concurrency."""
    stmt = (
        update(Timeframe)
        .where(
            Timeframe.id == timeframe_id,
            Timeframe.active.is_(True),
            Timeframe.current_bookings < Timeframe.max_bookings + Timeframe.overbooking_allowed,
        )
        .values(current_bookings=Timeframe.current_bookings + 1)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            raise SlotUnavailable(timeframe_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("increment_timeframe_bookings failed", extra={"timeframe_id": timeframe_id})
        raise


def is_voucher_available_for_booking(db: Session, voucher_code: str) -> VoucherAvailability | None:
    """Read-only voucher check used by the public booking widget. Never writes."""
    row = db.execute(
        select(Voucher, VoucherType.name)
        .outerjoin(VoucherType, VoucherType.id == Voucher.voucher_type_id)
        .where(Voucher.voucher_code == voucher_code)
    ).one_or_none()
    if row is None:
        return None
    voucher, type_name = row
    valid_until = as_utc(voucher.valid_until)

    if voucher.status != "active":
        available, status, error = False, voucher.status, f"Voucher is {voucher.status}"
    elif valid_until is not None and valid_until < utcnow():
        available, status, error = False, "expired", "Voucher has expired"
    else:
        available, status, error = True, voucher.status, None

    return VoucherAvailability(
        available=available,
        voucher_id=voucher.id,
        status=status,
        valid_until=valid_until,
        voucher_type_name=type_name,
        error_message=error,
    )
