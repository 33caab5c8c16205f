import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_identity_provider, require_roles
from app.core.errors import ConfigurationError, DomainError, Unauthorized, ValidationError
from app.models.user import User
from app.schemas.registration import RegistrationPasswordRequest, RegistrationRequest, RegistrationSettingsIn
from app.services.identity_service import IdentityProvider
from app.services.registration_service import register_member
from app.services.settings_service import RegistrationConfig, load_registration_config, save_registration_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["registration"])


@router.post("/registration/tandem")
def register_tandem(body: RegistrationRequest, db: Session = Depends(get_db),
                    identity: IdentityProvider = Depends(get_identity_provider)):
    try:
        register_member(db, body.model_dump(), load_registration_config(db), identity)
    except DomainError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=e.status_code)
    return {"success": True, "message": "Registration successful! Welcome to the club."}


@router.post("/registration/tandem/auth")
def check_registration_password(body: RegistrationPasswordRequest, db: Session = Depends(get_db)):
    """Gate for the registration kiosk page."""
    if not body.password:
        raise ValidationError("Password is required")
    config = load_registration_config(db)
    if not config.password:
        raise ConfigurationError("Configuration error")
    if body.password != config.password:
        raise Unauthorized("Incorrect password")
    return {"success": True}


@router.get("/registration/tandem/fields")
def get_registration_fields(db: Session = Depends(get_db)):
    try:
        return {"customFields": load_registration_config(db).custom_fields}
    except SQLAlchemyError:
        db.rollback()
        logger.exception("custom fields lookup failed")
        return {"customFields": []}


@router.get("/settings/tandem-registration")
def get_registration_settings(db: Session = Depends(get_db),
                              me: User = Depends(require_roles("board"))):
    config = load_registration_config(db)
    return {
        "membershipTypeId": config.membership_type_id,
        "password": config.password,
        "customFields": config.custom_fields,
    }


@router.post("/settings/tandem-registration")
def update_registration_settings(body: RegistrationSettingsIn, db: Session = Depends(get_db),
                                 me: User = Depends(require_roles("board"))):
    save_registration_config(
        db,
        RegistrationConfig(
            membership_type_id=body.membership_type_id or None,
            password=body.password or "",
            custom_fields=body.custom_fields or [],
        ),
        updated_by=me.id,
    )
    return {"success": True}
