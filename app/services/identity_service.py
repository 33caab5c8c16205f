"""
Identity provider.

Accounts are an identity row (users) plus a profile row that the provider
creates alongside it, the way an auth backend's signup trigger would.
Callers treat both as one unit: delete_user removes both.
"""

import json
import logging
import uuid

from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models.profile import Profile
from app.models.user import User

logger = logging.getLogger(__name__)


class IdentityProvider:
    def __init__(self, db: Session):
        self.db = db

    def find_user_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def create_user(self, email: str, password: str, email_confirmed: bool = False, metadata: dict | None = None) -> User:
        metadata = metadata or {}
        user = User(
            id=str(uuid.uuid4()),
            email=email.strip().lower(),
            role="member",
            password_hash=hash_password(password),
            email_confirmed=email_confirmed,
            is_active=True,
            metadata_json=json.dumps(metadata, ensure_ascii=False),
        )
        self.db.add(user)
        self.db.add(Profile(
            id=user.id,
            email=user.email,
            name=metadata.get("name", "") or "",
            surname=metadata.get("surname", "") or "",
        ))
        self.db.commit()
        return user

    def delete_user(self, user_id: str) -> None:
        self.db.query(Profile).filter(Profile.id == user_id).delete(synchronize_session=False)
        self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        self.db.commit()
        logger.info("identity deleted", extra={"user_id": user_id})
