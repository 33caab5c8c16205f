import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.core.security import create_access_token, encode_api_key, hash_password
from app.main import app
from app.models.api_key import ApiKey
from app.models.membership import MembershipType
from app.models.operation_day import OperationDay
from app.models.product import TicketType, VoucherType
from app.models.timeframe import Timeframe
from app.models.user import User
from app.services.settings_service import REGISTRATION_MEMBERSHIP_TYPE, set_setting_value


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_timeframe(db):
    def _make(max_bookings=2, current_bookings=0, overbooking_allowed=0, active=True, operation_date=None):
        day = OperationDay(id=str(uuid.uuid4()), operation_date=operation_date or date(2030, 6, 1))
        tf = Timeframe(
            id=str(uuid.uuid4()),
            operation_day_id=day.id,
            start_time="09:00",
            end_time="10:00",
            max_bookings=max_bookings,
            current_bookings=current_bookings,
            overbooking_allowed=overbooking_allowed,
            active=active,
        )
        db.add_all([day, tf])
        db.commit()
        return tf
    return _make


@pytest.fixture()
def ticket_type(db):
    tt = TicketType(id=str(uuid.uuid4()), name="Tandem Ticket", price_eur=289, code_prefix="TKT")
    db.add(tt)
    db.commit()
    return tt


@pytest.fixture()
def make_voucher_type(db):
    def _make(validity_months=12, code_prefix="TDM", active=True, name="Tandem Voucher"):
        vt = VoucherType(
            id=str(uuid.uuid4()),
            name=name,
            price_eur=289,
            validity_months=validity_months,
            code_prefix=code_prefix,
            active=active,
        )
        db.add(vt)
        db.commit()
        return vt
    return _make


@pytest.fixture()
def tandem_membership_type(db):
    mt = MembershipType(
        id=str(uuid.uuid4()),
        name="Tandem Try-Out",
        duration_value=1,
        duration_unit="days",
        member_number_prefix="T",
        member_category="tandem",
    )
    db.add(mt)
    db.commit()
    return mt


@pytest.fixture()
def registration_configured(db, tandem_membership_type):
    set_setting_value(db, REGISTRATION_MEMBERSHIP_TYPE, tandem_membership_type.id)
    return tandem_membership_type


@pytest.fixture()
def api_key(db):
    raw = "store-key-123"
    db.add(ApiKey(id=str(uuid.uuid4()), name="web store", key_hash=encode_api_key(raw), active=True))
    db.commit()
    return raw


@pytest.fixture()
def board_headers(db):
    user = User(
        id=str(uuid.uuid4()),
        email="board@example.com",
        role="member,board",
        password_hash=hash_password("secret"),
        email_confirmed=True,
    )
    db.add(user)
    db.commit()
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def registration_form():
    return {
        "name": "Anna",
        "surname": "Berger",
        "email": "Anna.Berger@example.com",
        "telephone": "+43 660 1234567",
        "birthday": "1990-04-12",
        "street": "Flugplatzstrasse",
        "house_number": "3",
        "zip": "5020",
        "city": "Salzburg",
        "country": "AT",
        "emergency_contact_name": "Max Berger",
        "emergency_contact_phone": "+43 660 7654321",
        "terms_accepted": True,
        "custom_fields": {"weight_kg": "68"},
    }
