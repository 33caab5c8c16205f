import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.clock import utcnow
from app.core.errors import Unauthorized
from app.core.security import encode_api_key
from app.models.api_key import ApiKey

logger = logging.getLogger(__name__)


def authenticate_api_key(db: Session, raw_key: str | None) -> ApiKey:
    """Resolve an active machine credential and stamp last_used_at.

    The stamp is committed right away, before the caller's own work, so it
    sticks even when the rest of the request fails.
    """
    if not raw_key:
        raise Unauthorized("API key required")
    record = (
        db.query(ApiKey)
        .filter(ApiKey.key_hash == encode_api_key(raw_key), ApiKey.active == True)
        .first()
    )
    if not record:
        raise Unauthorized("Invalid API key")

    record.last_used_at = utcnow()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("api key last_used_at update failed", extra={"api_key_id": record.id})
    return record
