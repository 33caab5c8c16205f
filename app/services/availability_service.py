import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ProvisioningError
from app.db import procedures
from app.models.operation_day import OperationDay
from app.models.timeframe import Timeframe

logger = logging.getLogger(__name__)


def get_bookable_timeframe(db: Session, timeframe_id: str, operation_day_id: str | None = None) -> Timeframe:
    tf = db.get(Timeframe, timeframe_id)
    if not tf or not tf.active or (operation_day_id is not None and tf.operation_day_id != operation_day_id):
        raise NotFound("Timeframe not found or inactive")
    return tf


def check_availability(db: Session, timeframe_id: str, operation_day_id: str | None = None) -> dict:
    """Capacity of one timeframe, read through the store's atomic availability check."""
    tf = get_bookable_timeframe(db, timeframe_id, operation_day_id)
    try:
        availability = procedures.check_timeframe_availability(db, timeframe_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("availability check failed", extra={"timeframe_id": timeframe_id, "error": str(exc)})
        raise ProvisioningError("Failed to check availability") from exc
    if availability is None:
        raise NotFound("Timeframe not found or inactive")

    return {
        "available": availability.available,
        "timeframe": {"id": tf.id, "startTime": tf.start_time, "endTime": tf.end_time},
        "capacity": {
            "maxBookings": availability.max_bookings,
            "currentBookings": availability.current_bookings,
            "overbookingAllowed": availability.overbooking_allowed,
            "slotsRemaining": availability.slots_remaining,
        },
    }


def list_open_operation_days(db: Session, from_date: date, limit: int = 30) -> list[dict]:
    """Operation days from `from_date` on that still have at least one timeframe with capacity."""
    days = (
        db.query(OperationDay)
        .filter(OperationDay.operation_date >= from_date)
        .order_by(OperationDay.operation_date.asc())
        .limit(limit)
        .all()
    )
    out = []
    for day in days:
        timeframes = (
            db.query(Timeframe)
            .filter(Timeframe.operation_day_id == day.id, Timeframe.active == True)
            .order_by(Timeframe.start_time.asc())
            .all()
        )
        open_tfs = []
        for tf in timeframes:
            ceiling = tf.max_bookings + tf.overbooking_allowed
            if tf.current_bookings >= ceiling:
                continue
            open_tfs.append({
                "id": tf.id,
                "startTime": tf.start_time,
                "endTime": tf.end_time,
                "maxBookings": tf.max_bookings,
                "currentBookings": tf.current_bookings,
                "overbookingAllowed": tf.overbooking_allowed,
                "slotsRemaining": ceiling - tf.current_bookings,
            })
        if open_tfs:
            out.append({
                "id": day.id,
                "date": day.operation_date.isoformat(),
                "notes": day.notes,
                "timeframes": open_tfs,
                "hasAvailability": True,
            })
    return out
