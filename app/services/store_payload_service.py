from datetime import date, datetime
from app.core.clock import as_utc
from app.models.booking import Booking
from app.models.operation_day import OperationDay
from app.models.product import TicketType, VoucherType
from app.models.timeframe import Timeframe
from app.models.voucher import Voucher


def _iso(v: date | datetime | None) -> str | None:
    if v is None:
        return None
    if isinstance(v, datetime):
        return as_utc(v).isoformat()
    return v.isoformat()

def _money(v) -> float | None:
    return float(v) if v is not None else None


def voucher_type_payload(t: VoucherType | None) -> dict | None:
    if t is None:
        return None
    return {
        "id": t.id,
        "name": t.name,
        "description": t.description,
        "priceEur": _money(t.price_eur),
        "validityMonths": t.validity_months,
        "codePrefix": t.code_prefix,
        "active": t.active,
        "sortOrder": t.sort_order,
    }

def ticket_type_payload(t: TicketType | None) -> dict | None:
    if t is None:
        return None
    return {"id": t.id, "name": t.name, "priceEur": _money(t.price_eur), "codePrefix": t.code_prefix, "active": t.active}

def timeframe_payload(tf: Timeframe | None) -> dict | None:
    if tf is None:
        return None
    return {
        "id": tf.id,
        "startTime": tf.start_time,
        "endTime": tf.end_time,
        "maxBookings": tf.max_bookings,
        "currentBookings": tf.current_bookings,
        "overbookingAllowed": tf.overbooking_allowed,
    }

def operation_day_payload(day: OperationDay | None) -> dict | None:
    if day is None:
        return None
    return {"id": day.id, "date": _iso(day.operation_date), "notes": day.notes}


def booking_payload(b: Booking, *, ticket_type=None, voucher_type=None, timeframe=None, operation_day=None) -> dict:
    return {
        "id": b.id,
        "code": b.booking_code,
        "status": b.status,
        "ticketType": ticket_type_payload(ticket_type),
        "voucherType": voucher_type_payload(voucher_type),
        "operationDay": operation_day_payload(operation_day),
        "timeframe": timeframe_payload(timeframe),
        "purchaserName": b.purchaser_name,
        "purchaserEmail": b.purchaser_email,
        "purchaserPhone": b.purchaser_phone,
        "pricePaid": _money(b.price_paid_eur),
    }

def voucher_payload(v: Voucher, voucher_type: VoucherType | None = None) -> dict:
    return {
        "id": v.id,
        "code": v.voucher_code,
        "status": v.status,
        "voucherType": voucher_type_payload(voucher_type),
        "validFrom": _iso(v.valid_from),
        "validUntil": _iso(v.valid_until),
        "purchaserName": v.purchaser_name,
        "purchaserEmail": v.purchaser_email,
        "pricePaid": _money(v.price_paid_eur),
    }
