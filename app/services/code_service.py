import logging
import random
import string
from datetime import datetime
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.core.errors import DuplicateError

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
INSERT_ATTEMPTS = 3

T = TypeVar("T")


def generate_code(prefix: str, now: datetime | None = None) -> str:
    """Human-readable code: PREFIX-YYYY-XXXXXX. Not unique by construction."""
    year = (now or utcnow()).year
    suffix = "".join(random.choices(CODE_ALPHABET, k=6))
    return f"{prefix}-{year}-{suffix}"


def allocate_code(
    db: Session, code_column, prefix: str, attempts: int | None = None, now: datetime | None = None
) -> str:
    """Probe the store for a free code.

    After `attempts` collisions the next candidate is returned unchecked; the
    unique index on insert is the final arbiter (see insert_with_unique_code).
    """
    if attempts is None:
        attempts = settings.CODE_GENERATION_ATTEMPTS
    code = generate_code(prefix, now)
    for _ in range(attempts):
        exists = db.query(code_column).filter(code_column == code).first()
        if not exists:
            return code
        code = generate_code(prefix, now)
    logger.warning("code probe exhausted, using unchecked candidate", extra={"prefix": prefix, "attempts": attempts})
    return code


def insert_with_unique_code(
    db: Session, code_column, prefix: str, build: Callable[[str], T], now: datetime | None = None
) -> T:
    """Allocate a code, insert the row built from it and commit.

    `now` fixes the year in the code (defaults to the current time).
    A duplicate-key failure means another request took the code between probe
    and insert; a fresh code is allocated and the insert retried.
    """
    last_exc: IntegrityError | None = None
    for _ in range(INSERT_ATTEMPTS):
        code = allocate_code(db, code_column, prefix, now=now)
        row = build(code)
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            last_exc = exc
            logger.warning("code collided on insert, retrying", extra={"prefix": prefix, "code": code})
            continue
        db.refresh(row)
        return row
    raise DuplicateError("Could not allocate a unique code") from last_exc
