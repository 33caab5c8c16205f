import json
from dataclasses import dataclass, field
from sqlalchemy.orm import Session
from app.core.clock import utcnow
from app.core.config import settings
from app.models.setting import Setting

REGISTRATION_MEMBERSHIP_TYPE = "tandem_registration_membership_type"
REGISTRATION_PASSWORD = "tandem_registration_password"
REGISTRATION_CUSTOM_FIELDS = "tandem_registration_custom_fields"
STORE_SETTINGS = "store_settings"

DEFAULT_REDIRECT_URL = "https://skydive-salzburg.com"


@dataclass(frozen=True)
class RegistrationConfig:
    membership_type_id: str | None
    password: str = ""
    custom_fields: list = field(default_factory=list)


@dataclass(frozen=True)
class StoreSettings:
    booking_code_prefix: str
    redirect_url: str = DEFAULT_REDIRECT_URL
    allow_voucher_sales: bool = True
    allow_ticket_sales: bool = True


def get_setting_value(db: Session, key: str, default=None):
    s = db.get(Setting, key)
    if not s or s.value_json is None:
        return default
    try:
        return json.loads(s.value_json)
    except (json.JSONDecodeError, TypeError):
        return default

def set_setting_value(db: Session, key: str, value, updated_by: str | None = None, commit: bool = True):
    s = db.get(Setting, key)
    if not s:
        s = Setting(key=key)
        db.add(s)
    s.value_json = json.dumps(value)
    s.updated_by = updated_by
    s.updated_at = utcnow()
    if commit:
        db.commit()
    return value


def load_registration_config(db: Session) -> RegistrationConfig:
    membership_type_id = get_setting_value(db, REGISTRATION_MEMBERSHIP_TYPE)
    # older rows store the literal string "null"
    if membership_type_id in (None, "", "null"):
        membership_type_id = None
    custom_fields = get_setting_value(db, REGISTRATION_CUSTOM_FIELDS, [])
    return RegistrationConfig(
        membership_type_id=str(membership_type_id) if membership_type_id is not None else None,
        password=str(get_setting_value(db, REGISTRATION_PASSWORD, "") or ""),
        custom_fields=custom_fields if isinstance(custom_fields, list) else [],
    )

def save_registration_config(db: Session, config: RegistrationConfig, updated_by: str | None = None) -> RegistrationConfig:
    set_setting_value(db, REGISTRATION_MEMBERSHIP_TYPE, config.membership_type_id, updated_by, commit=False)
    set_setting_value(db, REGISTRATION_PASSWORD, config.password, updated_by, commit=False)
    set_setting_value(db, REGISTRATION_CUSTOM_FIELDS, list(config.custom_fields or []), updated_by, commit=False)
    db.commit()
    return config


def load_store_settings(db: Session) -> StoreSettings:
    raw = get_setting_value(db, STORE_SETTINGS, {})
    if not isinstance(raw, dict):
        raw = {}
    return StoreSettings(
        booking_code_prefix=raw.get("booking_code_prefix") or settings.DEFAULT_BOOKING_CODE_PREFIX,
        redirect_url=raw.get("redirect_url") or DEFAULT_REDIRECT_URL,
        allow_voucher_sales=raw.get("allow_voucher_sales", True) is not False,
        allow_ticket_sales=raw.get("allow_ticket_sales", True) is not False,
    )
