from datetime import date
from typing import Optional
from pydantic import Field
from app.schemas.store import CamelModel


class RegistrationRequest(CamelModel):
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    birthday: Optional[str] = None  # YYYY-MM-DD
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    terms_accepted: bool = False
    custom_fields: Optional[dict] = None


class RegistrationPasswordRequest(CamelModel):
    password: Optional[str] = None


class RegistrationSettingsIn(CamelModel):
    membership_type_id: Optional[str] = None
    password: str = ""
    custom_fields: list = Field(default_factory=list)


class MembershipAssignRequest(CamelModel):
    user_id: str
    membership_type_id: str
    start_date: date
    payment_status: str = "unpaid"
    auto_renew: Optional[bool] = None
    notes: Optional[str] = None
