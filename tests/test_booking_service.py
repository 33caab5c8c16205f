import re
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import CapacityExceeded, NotFound, ProvisioningError, ValidationError
from app.db import procedures
from app.models.booking import Booking
from app.models.timeframe import Timeframe
from app.services.booking_service import create_booking
from app.services.settings_service import StoreSettings

STORE = StoreSettings(booking_code_prefix="TKT")


def _book(db, tf, ticket_type_id=None, voucher_type_id=None, store=STORE, **overrides):
    kwargs = dict(
        operation_day_id=tf.operation_day_id,
        timeframe_id=tf.id,
        ticket_type_id=ticket_type_id,
        voucher_type_id=voucher_type_id,
        purchaser_name="Jane Doe",
        purchaser_email="jane@example.com",
        price_paid=Decimal("289.00"),
    )
    kwargs.update(overrides)
    return create_booking(db, store, **kwargs)


def _current(db, tf_id):
    db.expire_all()
    return db.get(Timeframe, tf_id).current_bookings


def test_books_last_slot_then_rejects(db, make_timeframe, ticket_type):
    tf = make_timeframe(max_bookings=2, current_bookings=1)

    booking = _book(db, tf, ticket_type_id=ticket_type.id)
    assert re.fullmatch(r"TKT-\d{4}-[A-Z0-9]{6}", booking["code"])
    assert booking["status"] == "pending"
    assert booking["pricePaid"] == 289.0
    assert _current(db, tf.id) == 2

    with pytest.raises(CapacityExceeded, match="No slots available"):
        _book(db, tf, ticket_type_id=ticket_type.id)
    assert _current(db, tf.id) == 2
    assert db.query(Booking).count() == 1


def test_overbooking_raises_the_ceiling(db, make_timeframe, ticket_type):
    tf = make_timeframe(max_bookings=1, current_bookings=1, overbooking_allowed=1)
    _book(db, tf, ticket_type_id=ticket_type.id)
    assert _current(db, tf.id) == 2
    with pytest.raises(CapacityExceeded):
        _book(db, tf, ticket_type_id=ticket_type.id)


def test_voucher_type_booking_uses_store_prefix(db, make_timeframe, make_voucher_type):
    tf = make_timeframe()
    vt = make_voucher_type()
    booking = _book(db, tf, voucher_type_id=vt.id, store=StoreSettings(booking_code_prefix="SKY"))
    assert booking["code"].startswith("SKY-")
    assert booking["voucherType"]["id"] == vt.id
    assert booking["ticketType"] is None


def test_failed_slot_reservation_deletes_booking(db, make_timeframe, ticket_type, monkeypatch):
    tf = make_timeframe(max_bookings=5)

    def broken_increment(session, timeframe_id):
        raise OperationalError("UPDATE booking_timeframes", {}, Exception("connection lost"))

    monkeypatch.setattr(procedures, "increment_timeframe_bookings", broken_increment)

    with pytest.raises(ProvisioningError, match="Failed to reserve slot"):
        _book(db, tf, ticket_type_id=ticket_type.id)
    assert db.query(Booking).count() == 0
    assert _current(db, tf.id) == 0


def test_slot_taken_between_check_and_increment(db, make_timeframe, ticket_type, monkeypatch):
    tf = make_timeframe(max_bookings=5)

    def full(session, timeframe_id):
        raise procedures.SlotUnavailable(timeframe_id)

    monkeypatch.setattr(procedures, "increment_timeframe_bookings", full)

    with pytest.raises(CapacityExceeded):
        _book(db, tf, ticket_type_id=ticket_type.id)
    assert db.query(Booking).count() == 0


@pytest.mark.parametrize("both", [True, False])
def test_requires_exactly_one_product(db, make_timeframe, ticket_type, make_voucher_type, both):
    tf = make_timeframe()
    vt_id = make_voucher_type().id if both else None
    tt_id = ticket_type.id if both else None
    with pytest.raises(ValidationError):
        _book(db, tf, ticket_type_id=tt_id, voucher_type_id=vt_id)
    assert db.query(Booking).count() == 0


def test_missing_fields_and_negative_price(db, make_timeframe, ticket_type):
    tf = make_timeframe()
    with pytest.raises(ValidationError, match="Missing required fields"):
        _book(db, tf, ticket_type_id=ticket_type.id, purchaser_email=None)
    with pytest.raises(ValidationError):
        _book(db, tf, ticket_type_id=ticket_type.id, price_paid=Decimal("-1"))


def test_inactive_or_mismatched_timeframe_is_not_found(db, make_timeframe, ticket_type):
    inactive = make_timeframe(active=False)
    with pytest.raises(NotFound):
        _book(db, inactive, ticket_type_id=ticket_type.id)

    tf = make_timeframe()
    with pytest.raises(NotFound):
        _book(db, tf, ticket_type_id=ticket_type.id, operation_day_id="other-day")


def test_unknown_ticket_type(db, make_timeframe):
    tf = make_timeframe()
    with pytest.raises(NotFound, match="Ticket type not found"):
        _book(db, tf, ticket_type_id="missing")
    assert _current(db, tf.id) == 0


def test_ticket_sales_disabled(db, make_timeframe, ticket_type):
    tf = make_timeframe()
    with pytest.raises(ValidationError):
        _book(db, tf, ticket_type_id=ticket_type.id,
              store=StoreSettings(booking_code_prefix="TKT", allow_ticket_sales=False))


def test_increment_never_passes_ceiling(db, make_timeframe):
    tf = make_timeframe(max_bookings=3, overbooking_allowed=1)
    for _ in range(4):
        procedures.increment_timeframe_bookings(db, tf.id)
    with pytest.raises(procedures.SlotUnavailable):
        procedures.increment_timeframe_bookings(db, tf.id)
    assert _current(db, tf.id) == 4

    availability = procedures.check_timeframe_availability(db, tf.id)
    assert availability.available is False
    assert availability.slots_remaining == 0
