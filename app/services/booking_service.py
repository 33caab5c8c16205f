import logging
import uuid
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.core.errors import CapacityExceeded, NotFound, ProvisioningError, ValidationError
from app.db import procedures
from app.models.booking import Booking
from app.models.operation_day import OperationDay
from app.models.product import TicketType, VoucherType
from app.models.timeframe import Timeframe
from app.services.availability_service import check_availability
from app.services.code_service import insert_with_unique_code
from app.services.saga import Saga
from app.services.settings_service import StoreSettings
from app.services.store_payload_service import booking_payload

logger = logging.getLogger(__name__)


def _resolve_product(db: Session, ticket_type_id: str | None, voucher_type_id: str | None):
    if ticket_type_id:
        ticket_type = db.get(TicketType, ticket_type_id)
        if not ticket_type:
            raise NotFound("Ticket type not found")
        return ticket_type, None
    voucher_type = db.get(VoucherType, voucher_type_id)
    if not voucher_type:
        raise NotFound("Voucher type not found")
    return None, voucher_type


def create_booking(
    db: Session,
    store: StoreSettings,
    *,
    operation_day_id: str | None,
    timeframe_id: str | None,
    purchaser_name: str | None,
    purchaser_email: str | None,
    price_paid: Decimal | None,
    ticket_type_id: str | None = None,
    voucher_type_id: str | None = None,
    purchaser_phone: str | None = None,
    payment_intent_id: str | None = None,
) -> dict:
    """Allocate one slot of a timeframe and record the pending booking.

    Steps: capacity check, insert booking, take the slot. If taking the slot
    fails the booking is deleted again before the error is raised.
    """
    if not all([operation_day_id, timeframe_id, purchaser_name, purchaser_email, price_paid]):
        raise ValidationError("Missing required fields")
    if bool(ticket_type_id) == bool(voucher_type_id):
        raise ValidationError("Exactly one of ticketTypeId or voucherTypeId is required")
    if price_paid < 0:
        raise ValidationError("pricePaid must not be negative")
    if not store.allow_ticket_sales:
        raise ValidationError("Ticket sales are currently disabled")

    availability = check_availability(db, timeframe_id, operation_day_id)
    if not availability["available"]:
        raise CapacityExceeded("No slots available for this timeframe")

    ticket_type, voucher_type = _resolve_product(db, ticket_type_id, voucher_type_id)
    prefix = (ticket_type.code_prefix if ticket_type else None) or store.booking_code_prefix

    def build(code: str) -> Booking:
        return Booking(
            id=str(uuid.uuid4()),
            booking_code=code,
            operation_day_id=operation_day_id,
            timeframe_id=timeframe_id,
            ticket_type_id=ticket_type_id or None,
            voucher_type_id=voucher_type_id or None,
            purchaser_name=purchaser_name,
            purchaser_email=purchaser_email,
            purchaser_phone=purchaser_phone or None,
            price_paid_eur=price_paid,
            payment_intent_id=payment_intent_id or None,
            status="pending",
        )

    def persist_booking(ctx: dict) -> None:
        try:
            ctx["booking"] = insert_with_unique_code(db, Booking.booking_code, prefix, build)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("booking insert failed", extra={"timeframe_id": timeframe_id, "error": str(exc)})
            raise ProvisioningError("Failed to create booking") from exc

    def delete_booking(ctx: dict) -> None:
        booking_id = ctx["booking"].id
        try:
            db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        logger.info("booking rolled back", extra={"booking_id": booking_id})

    def reserve_slot(ctx: dict) -> None:
        try:
            procedures.increment_timeframe_bookings(db, timeframe_id)
        except procedures.SlotUnavailable as exc:
            raise CapacityExceeded("No slots available for this timeframe") from exc
        except SQLAlchemyError as exc:
            raise ProvisioningError("Failed to reserve slot") from exc

    ctx = (
        Saga("booking_allocation")
        .step("persist_booking", persist_booking, delete_booking)
        .step("reserve_slot", reserve_slot)
        .run()
    )
    booking = ctx["booking"]
    logger.info("booking created", extra={"booking_id": booking.id, "timeframe_id": timeframe_id})

    return booking_payload(
        booking,
        ticket_type=ticket_type,
        voucher_type=voucher_type,
        timeframe=db.get(Timeframe, timeframe_id),
        operation_day=db.get(OperationDay, operation_day_id),
    )
