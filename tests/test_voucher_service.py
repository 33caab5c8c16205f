import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core.errors import NotFound, ValidationError
from app.models.voucher import Voucher
from app.services.voucher_service import (
    check_voucher_for_booking,
    compute_valid_until,
    issue_voucher,
    validate_voucher,
)

UTC = timezone.utc


def _issue(db, vt, **kw):
    kwargs = dict(
        voucher_type_id=vt.id,
        purchaser_name="Jane Doe",
        purchaser_email="jane@example.com",
        price_paid=Decimal("289"),
    )
    kwargs.update(kw)
    return issue_voucher(db, **kwargs)


@pytest.mark.parametrize("months", [None, 0, -3, "abc"])
def test_no_expiry_without_positive_validity(months):
    assert compute_valid_until(months, datetime(2024, 1, 1, tzinfo=UTC)) is None


def test_month_end_clamps():
    start = datetime(2024, 1, 31, 12, 0, tzinfo=UTC)
    assert compute_valid_until(1, start) == datetime(2024, 2, 29, 12, 0, tzinfo=UTC)
    assert compute_valid_until(12, start) == datetime(2025, 1, 31, 12, 0, tzinfo=UTC)
    assert compute_valid_until(1.9, start) == datetime(2024, 2, 29, 12, 0, tzinfo=UTC)


def test_issue_twelve_month_voucher(db, make_voucher_type):
    vt = make_voucher_type(validity_months=12, code_prefix="TDM")
    voucher = _issue(db, vt, now=datetime(2024, 1, 31, 10, 0, tzinfo=UTC))

    assert re.fullmatch(r"TDM-2024-[A-Z0-9]{6}", voucher["code"])
    assert voucher["status"] == "active"
    assert voucher["validFrom"].startswith("2024-01-31")
    assert voucher["validUntil"].startswith("2025-01-31")
    assert voucher["voucherType"]["id"] == vt.id


def test_code_year_follows_issue_time(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type(validity_months=6), now=datetime(2019, 7, 1, tzinfo=UTC))
    assert voucher["code"].startswith("TDM-2019-")
    assert voucher["validFrom"].startswith("2019-07-01")


def test_issue_without_validity_never_expires(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type(validity_months=0))
    assert voucher["validUntil"] is None


def test_issue_falls_back_to_default_prefix(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type(code_prefix=None))
    assert voucher["code"].startswith("TDM-")


def test_issue_rejects_bad_input(db, make_voucher_type):
    vt = make_voucher_type()
    with pytest.raises(ValidationError):
        _issue(db, vt, purchaser_email="")
    with pytest.raises(NotFound):
        _issue(db, vt, voucher_type_id="missing")
    assert db.query(Voucher).count() == 0


def test_validate_active_voucher_case_insensitive(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type())
    result = validate_voucher(db, "  " + voucher["code"].lower() + " ")
    assert result.valid is True
    assert result.voucher["code"] == voucher["code"]


def test_validate_unknown_code(db):
    result = validate_voucher(db, "TDM-2024-NOPE00")
    assert result.valid is False
    assert result.status is None
    assert result.error == "Voucher not found"


def test_validate_expires_lazily(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type(validity_months=1), now=datetime(2020, 1, 1, tzinfo=UTC))

    result = validate_voucher(db, voucher["code"])
    assert result.valid is False
    assert result.status == "expired"
    assert result.error == "Voucher has expired"

    db.expire_all()
    stored = db.query(Voucher).filter(Voucher.voucher_code == voucher["code"]).one()
    assert stored.status == "expired"

    again = validate_voucher(db, voucher["code"])
    assert again.status == "expired"
    assert again.error == "Voucher is expired"


def test_validate_reports_redeemed(db, make_voucher_type):
    voucher = _issue(db, make_voucher_type())
    db.query(Voucher).update({"status": "redeemed"})
    db.commit()
    result = validate_voucher(db, voucher["code"])
    assert (result.valid, result.status) == (False, "redeemed")


def test_booking_widget_check_does_not_write(db, make_voucher_type):
    vt = make_voucher_type(validity_months=1, name="Tandem Voucher")
    voucher = _issue(db, vt, now=datetime(2020, 1, 1, tzinfo=UTC))

    result = check_voucher_for_booking(db, voucher["code"])
    assert result["valid"] is False
    assert result["status"] == "expired"
    assert result["voucherTypeName"] == "Tandem Voucher"

    db.expire_all()
    assert db.query(Voucher).one().status == "active"

    assert check_voucher_for_booking(db, "NOPE") == {"valid": False, "error": "Invalid voucher code"}
