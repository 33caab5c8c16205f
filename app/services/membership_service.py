import logging
import uuid
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.core.errors import DuplicateError, NotFound, ValidationError
from app.models.membership import MembershipType, PaymentStatusHistory, UserMembership
from app.models.profile import Profile
from app.models.user import User

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("paid", "unpaid", "pending")


def compute_end_date(start_date: date, duration_value: int, duration_unit: str) -> date:
    value = int(duration_value or 0)
    if duration_unit == "days":
        return start_date + timedelta(days=value)
    if duration_unit == "months":
        return start_date + relativedelta(months=value)
    if duration_unit == "years":
        return start_date + relativedelta(years=value)
    logger.warning("unknown membership duration unit", extra={"duration_unit": duration_unit})
    return start_date


def next_member_number(db: Session, prefix: str) -> str:
    """Next number after the highest one issued under `prefix`, zero-padded to 4 digits.

    Only numbers made of exactly `prefix` plus digits count, so "T" ignores
    "TA0005". Read-then-write without a lock: two concurrent callers can get
    the same number. The unique index on member_number catches that and
    create_membership re-reads and retries.
    """
    candidates = (
        db.query(UserMembership.member_number)
        .filter(UserMembership.member_number.startswith(prefix, autoescape=True))
        .all()
    )
    last_number = 0
    for (number,) in candidates:
        # LIKE is case-insensitive on some backends
        if not number.startswith(prefix):
            continue
        suffix = number[len(prefix):]
        if suffix.isdecimal():
            last_number = max(last_number, int(suffix))
    return f"{prefix}{str(last_number + 1).zfill(4)}"


def create_membership(
    db: Session,
    *,
    user_id: str,
    membership_type: MembershipType,
    start_date: date,
    payment_status: str,
    created_by: str | None,
    auto_renew: bool | None = None,
    notes: str | None = None,
) -> UserMembership:
    """Insert an active membership with a freshly sequenced member number."""
    end_date = compute_end_date(start_date, membership_type.duration_value, membership_type.duration_unit)
    attempts = max(1, settings.MEMBER_NUMBER_ATTEMPTS)
    last_exc: IntegrityError | None = None
    for attempt in range(attempts):
        membership = UserMembership(
            id=str(uuid.uuid4()),
            user_id=user_id,
            membership_type_id=membership_type.id,
            member_number=next_member_number(db, membership_type.member_number_prefix),
            start_date=start_date,
            end_date=end_date,
            status="active",
            payment_status=payment_status,
            auto_renew=membership_type.auto_renew if auto_renew is None else auto_renew,
            notes=notes,
            created_by=created_by,
        )
        db.add(membership)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            last_exc = exc
            logger.warning(
                "member number taken, re-sequencing",
                extra={"member_number": membership.member_number, "attempt": attempt + 1},
            )
            continue
        db.refresh(membership)
        return membership
    raise DuplicateError("Could not allocate a unique member number") from last_exc


def record_membership_side_effects(
    db: Session,
    membership: UserMembership,
    membership_type: MembershipType,
    changed_by: str | None,
    old_status: str | None = None,
    notes: str | None = None,
) -> None:
    """Category on the profile and the first payment-status history row. Best effort."""
    try:
        profile = db.get(Profile, membership.user_id)
        if profile:
            profile.member_category = membership_type.member_category
            profile.updated_at = utcnow()
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("member category update failed", extra={"user_id": membership.user_id})

    try:
        db.add(PaymentStatusHistory(
            id=str(uuid.uuid4()),
            membership_id=membership.id,
            old_status=old_status,
            new_status=membership.payment_status,
            changed_by=changed_by,
            notes=notes,
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("payment status history insert failed", extra={"membership_id": membership.id})


def assign_membership(
    db: Session,
    *,
    user_id: str,
    membership_type_id: str,
    start_date: date,
    created_by: str,
    payment_status: str = "unpaid",
    auto_renew: bool | None = None,
    notes: str | None = None,
) -> UserMembership:
    """Board/manifest action: give an existing member a membership."""
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError("Invalid payment status")
    if not db.get(User, user_id):
        raise NotFound("User not found")
    membership_type = db.get(MembershipType, membership_type_id)
    if not membership_type:
        raise NotFound("Membership type not found")

    membership = create_membership(
        db,
        user_id=user_id,
        membership_type=membership_type,
        start_date=start_date,
        payment_status=payment_status,
        created_by=created_by,
        auto_renew=auto_renew,
        notes=notes,
    )
    record_membership_side_effects(
        db, membership, membership_type, changed_by=created_by,
        notes=f"Membership created with payment status: {payment_status}",
    )
    return membership
