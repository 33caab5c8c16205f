import json

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import ConfigurationError, DuplicateError, ProvisioningError, ValidationError
from app.models.membership import PaymentStatusHistory, UserMembership
from app.models.profile import Profile
from app.models.user import User
from app.services import registration_service
from app.services.identity_service import IdentityProvider
from app.services.registration_service import register_member
from app.services.settings_service import RegistrationConfig, load_registration_config


def _counts(db):
    db.expire_all()
    return db.query(User).count(), db.query(Profile).count(), db.query(UserMembership).count()


def _db_error(*args, **kwargs):
    raise OperationalError("INSERT", {}, Exception("database unavailable"))


def test_registers_identity_profile_and_membership(db, registration_configured, registration_form):
    result = register_member(db, registration_form, load_registration_config(db), IdentityProvider(db))

    assert result["memberNumber"] == "T0001"
    user = db.get(User, result["userId"])
    assert user.email == "anna.berger@example.com"
    assert user.email_confirmed is True

    profile = db.get(Profile, user.id)
    assert profile.city == "Salzburg"
    assert profile.member_category == "tandem"
    assert json.loads(profile.custom_fields_json) == {"weight_kg": "68"}

    membership = db.query(UserMembership).filter_by(user_id=user.id).one()
    assert membership.payment_status == "paid"
    assert (membership.end_date - membership.start_date).days == 1
    assert db.query(PaymentStatusHistory).filter_by(membership_id=membership.id).count() == 1


def test_second_registration_gets_next_number(db, registration_configured, registration_form):
    config = load_registration_config(db)
    register_member(db, registration_form, config, IdentityProvider(db))
    second = dict(registration_form, email="someone.else@example.com")
    assert register_member(db, second, config, IdentityProvider(db))["memberNumber"] == "T0002"


def test_terms_not_accepted_creates_nothing(db, registration_configured, registration_form):
    form = dict(registration_form, terms_accepted=False)
    with pytest.raises(ValidationError, match="Terms and conditions must be accepted"):
        register_member(db, form, load_registration_config(db), IdentityProvider(db))
    assert _counts(db) == (0, 0, 0)


def test_missing_field_is_named(db, registration_configured, registration_form):
    form = dict(registration_form, zip="  ")
    with pytest.raises(ValidationError, match="Missing required field: zip"):
        register_member(db, form, load_registration_config(db), IdentityProvider(db))


def test_unconfigured_membership_type(db, registration_form):
    with pytest.raises(ConfigurationError):
        register_member(db, registration_form, RegistrationConfig(membership_type_id=None), IdentityProvider(db))
    assert _counts(db) == (0, 0, 0)


def test_duplicate_email(db, registration_configured, registration_form):
    config = load_registration_config(db)
    register_member(db, registration_form, config, IdentityProvider(db))
    again = dict(registration_form, email="ANNA.BERGER@example.com")
    with pytest.raises(DuplicateError):
        register_member(db, again, config, IdentityProvider(db))
    assert _counts(db) == (1, 1, 1)


def test_profile_failure_removes_identity(db, registration_configured, registration_form, monkeypatch):
    monkeypatch.setattr(registration_service, "apply_profile_fields", _db_error)
    with pytest.raises(ProvisioningError):
        register_member(db, registration_form, load_registration_config(db), IdentityProvider(db))
    assert _counts(db) == (0, 0, 0)


def test_membership_failure_removes_profile_and_identity(db, registration_configured, registration_form, monkeypatch):
    monkeypatch.setattr(registration_service, "create_membership", _db_error)
    with pytest.raises(ProvisioningError, match="Failed to complete registration"):
        register_member(db, registration_form, load_registration_config(db), IdentityProvider(db))
    assert _counts(db) == (0, 0, 0)


def test_missing_membership_type_row_compensates(db, registration_form):
    config = RegistrationConfig(membership_type_id="deleted-type")
    with pytest.raises(ProvisioningError):
        register_member(db, registration_form, config, IdentityProvider(db))
    assert _counts(db) == (0, 0, 0)
