import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.db.session import SessionLocal
from app.core.config import settings
from app.core.security import hash_password
from app.models.membership import MembershipType
from app.models.product import TicketType, VoucherType
from app.models.profile import Profile
from app.models.user import User
from app.services.settings_service import (
    REGISTRATION_MEMBERSHIP_TYPE,
    STORE_SETTINGS,
    get_setting_value,
    set_setting_value,
)

logger = logging.getLogger(__name__)


def ensure_board_user(db: Session, email: str, password: str) -> None:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        return
    user_id = str(uuid.uuid4())
    db.add(User(
        id=user_id,
        email=email,
        role="member,board",
        password_hash=hash_password(password),
        email_confirmed=True,
        is_active=True,
    ))
    db.add(Profile(id=user_id, email=email, name="Board", surname=""))
    db.commit()


def ensure_tandem_membership_type(db: Session) -> MembershipType:
    mt = db.query(MembershipType).filter(MembershipType.member_number_prefix == "T").first()
    if mt:
        return mt
    mt = MembershipType(
        id=str(uuid.uuid4()),
        name="Tandem Try-Out",
        duration_value=1,
        duration_unit="days",
        member_number_prefix="T",
        member_category="tandem",
        auto_renew=False,
        price_eur=0,
    )
    db.add(mt)
    db.commit()
    return mt


def ensure_products(db: Session) -> None:
    if not db.query(VoucherType).first():
        db.add(VoucherType(
            id=str(uuid.uuid4()),
            name="Tandem Jump Voucher",
            price_eur=289,
            validity_months=12,
            code_prefix=settings.DEFAULT_VOUCHER_CODE_PREFIX,
            sort_order=10,
        ))
    if not db.query(TicketType).first():
        db.add(TicketType(
            id=str(uuid.uuid4()),
            name="Tandem Jump Ticket",
            price_eur=289,
            code_prefix=settings.DEFAULT_BOOKING_CODE_PREFIX,
        ))
    db.commit()


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        if settings.SEED_BOARD_PASSWORD:
            ensure_board_user(db, settings.SEED_BOARD_EMAIL, settings.SEED_BOARD_PASSWORD)

        mt = ensure_tandem_membership_type(db)
        if get_setting_value(db, REGISTRATION_MEMBERSHIP_TYPE) in (None, "", "null"):
            set_setting_value(db, REGISTRATION_MEMBERSHIP_TYPE, mt.id)

        ensure_products(db)

        if get_setting_value(db, STORE_SETTINGS) is None:
            set_setting_value(db, STORE_SETTINGS, {
                "booking_code_prefix": settings.DEFAULT_BOOKING_CODE_PREFIX,
                "allow_voucher_sales": True,
                "allow_ticket_sales": True,
            })
    finally:
        db.close()


if __name__ == "__main__":
    run()
