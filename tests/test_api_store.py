from app.models.api_key import ApiKey
from app.models.booking import Booking
from app.services.settings_service import STORE_SETTINGS, set_setting_value


def _booking_body(tf, ticket_type):
    return {
        "poolId": tf.operation_day_id,
        "timeframeId": tf.id,
        "ticketTypeId": ticket_type.id,
        "purchaserName": "Jane Doe",
        "purchaserEmail": "jane@example.com",
        "pricePaid": 289,
        "paymentReference": "pi_123",
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_store_settings_defaults(client):
    r = client.get("/api/v1/store/settings")
    assert r.status_code == 200
    assert r.json()["allowVoucherSales"] is True
    assert "bookingCodePrefix" not in r.json()


def test_availability(client, make_timeframe):
    tf = make_timeframe(max_bookings=3, current_bookings=1, overbooking_allowed=1)
    r = client.post("/api/v1/store/bookings/availability",
                    json={"operationDayId": tf.operation_day_id, "timeframeId": tf.id})
    assert r.status_code == 200
    body = r.json()
    assert body["available"] is True
    assert body["capacity"] == {"maxBookings": 3, "currentBookings": 1, "overbookingAllowed": 1, "slotsRemaining": 3}


def test_availability_requires_ids(client):
    r = client.post("/api/v1/store/bookings/availability", json={"timeframeId": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "Operation day ID and timeframe ID are required"}


def test_booking_requires_api_key(client, make_timeframe, ticket_type):
    tf = make_timeframe()
    r = client.post("/api/v1/store/bookings/create", json=_booking_body(tf, ticket_type))
    assert r.status_code == 401
    assert r.json() == {"error": "API key required"}

    r = client.post("/api/v1/store/bookings/create", json=_booking_body(tf, ticket_type),
                    headers={"x-api-key": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid API key"}


def test_create_booking_over_http(client, db, make_timeframe, ticket_type, api_key):
    tf = make_timeframe(max_bookings=1)
    r = client.post("/api/v1/store/bookings/create", json=_booking_body(tf, ticket_type),
                    headers={"x-api-key": api_key})
    assert r.status_code == 200, r.text
    assert r.json()["success"] is True
    assert r.json()["booking"]["code"].startswith("TKT-")

    db.expire_all()
    assert db.query(ApiKey).one().last_used_at is not None
    assert db.query(Booking).one().payment_intent_id == "pi_123"

    r = client.post("/api/v1/store/bookings/create", json=_booking_body(tf, ticket_type),
                    headers={"x-api-key": api_key})
    assert r.status_code == 400
    assert r.json() == {"error": "No slots available for this timeframe"}


def test_inactive_api_key_rejected(client, db, api_key):
    db.query(ApiKey).update({"active": False})
    db.commit()
    r = client.post("/api/v1/store/vouchers/create", json={}, headers={"x-api-key": api_key})
    assert r.status_code == 401


def test_voucher_purchase_and_validation(client, make_voucher_type, api_key):
    vt = make_voucher_type()
    r = client.post("/api/v1/store/vouchers/create", headers={"x-api-key": api_key}, json={
        "voucherTypeId": vt.id,
        "purchaserName": "Jane Doe",
        "purchaserEmail": "jane@example.com",
        "pricePaid": "289.00",
    })
    assert r.status_code == 200, r.text
    code = r.json()["voucher"]["code"]

    r = client.post("/api/v1/store/vouchers/validate", json={"voucherCode": code})
    assert r.status_code == 200
    assert r.json()["valid"] is True

    r = client.post("/api/v1/vouchers/validate", json={"voucherCode": code})
    assert r.json()["valid"] is True
    assert r.json()["status"] == "active"

    r = client.post("/api/v1/store/vouchers/validate", json={"voucherCode": "TDM-2024-ZZZZZZ"})
    assert r.status_code == 404
    assert r.json() == {"valid": False, "error": "Voucher not found"}


def test_voucher_sales_disabled(client, db, make_voucher_type, api_key):
    set_setting_value(db, STORE_SETTINGS, {"allow_voucher_sales": False})
    vt = make_voucher_type()
    r = client.post("/api/v1/store/vouchers/create", headers={"x-api-key": api_key}, json={
        "voucherTypeId": vt.id, "purchaserName": "J", "purchaserEmail": "j@example.com", "pricePaid": 1,
    })
    assert r.status_code == 400


def test_voucher_types_sorted_and_active_only(client, make_voucher_type):
    make_voucher_type(name="B voucher")
    make_voucher_type(name="A voucher")
    make_voucher_type(name="Hidden", active=False)
    names = [t["name"] for t in client.get("/api/v1/store/voucher-types").json()["voucherTypes"]]
    assert names == ["A voucher", "B voucher"]


def test_operation_days_only_with_capacity(client, make_timeframe):
    from datetime import date
    make_timeframe(max_bookings=1, current_bookings=1, operation_date=date(2030, 6, 1))
    open_tf = make_timeframe(max_bookings=2, operation_date=date(2030, 6, 2))

    r = client.get("/api/v1/store/operation-days", params={"from": "2030-01-01"})
    assert r.status_code == 200
    days = r.json()["operationDays"]
    assert [d["date"] for d in days] == ["2030-06-02"]
    assert days[0]["timeframes"][0]["id"] == open_tf.id

    assert client.get("/api/v1/store/operation-days", params={"from": "June"}).status_code == 400


def test_unexpected_error_returns_json_500(engine, monkeypatch):
    from fastapi.testclient import TestClient
    from sqlalchemy.orm import sessionmaker

    from app.api.v1.routes import store as store_routes
    from app.db.session import get_db
    from app.main import app

    def broken(*args, **kwargs):
        raise RuntimeError("driver went away")

    monkeypatch.setattr(store_routes, "check_availability", broken)
    SessionLocal = sessionmaker(bind=engine)

    def _get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post("/api/v1/store/bookings/availability",
                       json={"operationDayId": "day", "timeframeId": "tf"})
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Internal server error"}
