"""
Public self-service registration (tandem try-out members).

Creates identity, profile and membership as one unit. There is no
transaction spanning those writes, so every step that leaves something behind
registers an undo with the saga runner; a failure after the identity exists
removes everything this run created.
"""

import json
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import ConfigurationError, DomainError, DuplicateError, ProvisioningError, ValidationError
from app.core.security import generate_random_password
from app.models.membership import MembershipType
from app.models.profile import Profile
from app.services.identity_service import IdentityProvider
from app.services.membership_service import create_membership, record_membership_side_effects
from app.services.saga import Saga
from app.services.settings_service import RegistrationConfig

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "name",
    "surname",
    "email",
    "telephone",
    "birthday",
    "street",
    "house_number",
    "zip",
    "city",
    "country",
    "emergency_contact_name",
    "emergency_contact_phone",
)

PROFILE_FIELDS = REQUIRED_FIELDS[3:]

MEMBERSHIP_NOTE = "Tandem try-out registration - payment collected on-site"
RETRY_MESSAGE = "Failed to complete registration. Please try again."


def validate_registration_form(form: dict) -> None:
    for field in REQUIRED_FIELDS:
        value = form.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Missing required field: {field}")
    if form.get("terms_accepted") is not True:
        raise ValidationError("Terms and conditions must be accepted")


def apply_profile_fields(db: Session, user_id: str, form: dict, now: datetime) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise ProvisioningError("Profile row missing for new identity")
    for field in PROFILE_FIELDS:
        setattr(profile, field, form[field])
    profile.custom_fields_json = json.dumps(form.get("custom_fields") or {}, ensure_ascii=False)
    profile.joined_at = now
    profile.updated_at = now
    db.commit()
    return profile


def register_member(
    db: Session,
    form: dict,
    config: RegistrationConfig,
    identity: IdentityProvider,
    now: datetime | None = None,
) -> dict:
    now = now or utcnow()

    # no side effects before the identity step
    validate_registration_form(form)
    if not config.membership_type_id:
        logger.error("registration membership type not configured")
        raise ConfigurationError("Tandem registration is not configured. Please contact the club.")
    email = form["email"].strip().lower()
    if identity.find_user_by_email(email):
        raise DuplicateError(
            "An account with this email already exists. Please contact the club if you need assistance."
        )

    def create_identity(ctx: dict) -> None:
        try:
            user = identity.create_user(
                email,
                generate_random_password(),
                email_confirmed=True,
                metadata={"name": form["name"], "surname": form["surname"]},
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("identity creation failed", extra={"error": str(exc)})
            raise ProvisioningError("Failed to create account. Please try again.") from exc
        ctx["user_id"] = user.id

    def delete_identity(ctx: dict) -> None:
        identity.delete_user(ctx["user_id"])

    def update_profile(ctx: dict) -> None:
        try:
            apply_profile_fields(db, ctx["user_id"], form, now)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("profile update failed", extra={"user_id": ctx["user_id"], "error": str(exc)})
            raise ProvisioningError("Failed to create profile. Please try again.") from exc

    def delete_profile(ctx: dict) -> None:
        db.query(Profile).filter(Profile.id == ctx["user_id"]).delete(synchronize_session=False)
        db.commit()

    def load_membership_type(ctx: dict) -> None:
        try:
            membership_type = db.get(MembershipType, config.membership_type_id)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("membership type lookup failed", extra={"error": str(exc)})
            raise ProvisioningError(RETRY_MESSAGE) from exc
        if membership_type is None:
            logger.error("configured membership type missing", extra={"membership_type_id": config.membership_type_id})
            raise ProvisioningError(RETRY_MESSAGE)
        ctx["membership_type"] = membership_type

    def create_paid_membership(ctx: dict) -> None:
        try:
            ctx["membership"] = create_membership(
                db,
                user_id=ctx["user_id"],
                membership_type=ctx["membership_type"],
                start_date=now.date(),
                payment_status="paid",
                created_by=ctx["user_id"],
                notes=MEMBERSHIP_NOTE,
            )
        except (SQLAlchemyError, DomainError) as exc:
            db.rollback()
            logger.error("membership creation failed", extra={"user_id": ctx["user_id"], "error": str(exc)})
            raise ProvisioningError(RETRY_MESSAGE) from exc

    def rollback_session(compensation):
        def run(ctx: dict) -> None:
            try:
                compensation(ctx)
            except SQLAlchemyError:
                db.rollback()
                raise
        return run

    ctx = (
        Saga("tandem_registration")
        .step("create_identity", create_identity, rollback_session(delete_identity))
        .step("update_profile", update_profile, rollback_session(delete_profile))
        .step("load_membership_type", load_membership_type)
        .step("create_membership", create_paid_membership)
        .run()
    )

    membership = ctx["membership"]
    record_membership_side_effects(db, membership, ctx["membership_type"], changed_by=ctx["user_id"])
    logger.info(
        "tandem registration complete",
        extra={"user_id": ctx["user_id"], "member_number": membership.member_number},
    )
    return {"userId": ctx["user_id"], "memberNumber": membership.member_number}
