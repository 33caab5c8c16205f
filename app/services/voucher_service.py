"""Voucher issuing and validation."""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.errors import NotFound, ProvisioningError, ValidationError
from app.db import procedures
from app.models.product import VoucherType
from app.models.voucher import Voucher
from app.services.code_service import insert_with_unique_code
from app.services.store_payload_service import voucher_payload

logger = logging.getLogger(__name__)

_KEEP = object()


@dataclass(frozen=True)
class VoucherValidation:
    valid: bool
    status: str | None = None
    voucher: dict | None = None
    error: str | None = None


def compute_valid_until(validity_months, valid_from: datetime) -> datetime | None:
    """Calendar-month expiry. Day-of-month overflow clamps to the month's last day (Jan 31 + 1 = Feb 28/29)."""
    if validity_months is None:
        return None
    try:
        months = max(0, math.floor(float(validity_months)))
    except (TypeError, ValueError):
        return None
    if months <= 0:
        return None
    return valid_from + relativedelta(months=months)


def issue_voucher(
    db: Session,
    *,
    voucher_type_id: str | None,
    purchaser_name: str | None,
    purchaser_email: str | None,
    price_paid: Decimal | None,
    purchaser_phone: str | None = None,
    payment_intent_id: str | None = None,
    notes: str | None = None,
    valid_until=_KEEP,
    now: datetime | None = None,
) -> dict:
    """Create an active voucher for a paid order.

    `valid_until` overrides the type's validity window (manual issue by the board).
    """
    if not all([voucher_type_id, purchaser_name, purchaser_email, price_paid]):
        raise ValidationError("Missing required fields")
    if price_paid < 0:
        raise ValidationError("pricePaid must not be negative")

    voucher_type = db.get(VoucherType, voucher_type_id)
    if not voucher_type:
        raise NotFound("Voucher type not found")

    prefix = voucher_type.code_prefix or settings.DEFAULT_VOUCHER_CODE_PREFIX
    valid_from = now or utcnow()
    if valid_until is _KEEP:
        valid_until = compute_valid_until(voucher_type.validity_months, valid_from)

    def build(code: str) -> Voucher:
        return Voucher(
            id=str(uuid.uuid4()),
            voucher_code=code,
            voucher_type_id=voucher_type.id,
            purchaser_name=purchaser_name,
            purchaser_email=purchaser_email,
            purchaser_phone=purchaser_phone or None,
            price_paid_eur=price_paid,
            payment_intent_id=payment_intent_id or None,
            status="active",
            valid_from=valid_from,
            valid_until=valid_until,
            notes=notes or None,
        )

    try:
        voucher = insert_with_unique_code(db, Voucher.voucher_code, prefix, build, now=valid_from)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("voucher insert failed", extra={"voucher_type_id": voucher_type_id, "error": str(exc)})
        raise ProvisioningError("Failed to create voucher") from exc

    logger.info("voucher issued", extra={"voucher_id": voucher.id, "voucher_type_id": voucher_type.id})
    return voucher_payload(voucher, voucher_type)


def validate_voucher(db: Session, code: str | None, now: datetime | None = None) -> VoucherValidation:
    """Check a code for use. An active voucher past its validity is marked expired here."""
    if not code or not code.strip():
        raise ValidationError("Voucher code is required")

    voucher = db.query(Voucher).filter(Voucher.voucher_code == code.strip().upper()).first()
    if not voucher:
        return VoucherValidation(valid=False, error="Voucher not found")

    if voucher.status != "active":
        return VoucherValidation(
            valid=False,
            status=voucher.status,
            voucher={"code": voucher.voucher_code, "status": voucher.status},
            error=f"Voucher is {voucher.status}",
        )

    valid_until = as_utc(voucher.valid_until)
    if valid_until is not None and valid_until < (now or utcnow()):
        voucher.status = "expired"
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("lazy expiry update failed", extra={"voucher_id": voucher.id})
        return VoucherValidation(
            valid=False,
            status="expired",
            voucher={"code": voucher.voucher_code, "status": "expired", "validUntil": valid_until.isoformat()},
            error="Voucher has expired",
        )

    voucher_type = db.get(VoucherType, voucher.voucher_type_id)
    return VoucherValidation(valid=True, status=voucher.status, voucher=voucher_payload(voucher, voucher_type))


def check_voucher_for_booking(db: Session, code: str | None) -> dict:
    """Public widget check through the store procedure. Read-only."""
    if not code or not code.strip():
        raise ValidationError("Voucher code is required")
    try:
        result = procedures.is_voucher_available_for_booking(db, code.strip().upper())
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("voucher availability check failed", extra={"error": str(exc)})
        raise ProvisioningError("Failed to validate voucher") from exc
    if result is None:
        return {"valid": False, "error": "Invalid voucher code"}
    return {
        "valid": result.available,
        "voucherId": result.voucher_id,
        "status": result.status,
        "validUntil": result.valid_until.isoformat() if result.valid_until else None,
        "voucherTypeName": result.voucher_type_name,
        "error": result.error_message,
    }


def list_active_voucher_types(db: Session) -> list[VoucherType]:
    return (
        db.query(VoucherType)
        .filter(VoucherType.active == True)
        .order_by(VoucherType.sort_order.asc(), VoucherType.name.asc())
        .all()
    )
