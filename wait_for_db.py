"""Block until the configured database accepts connections (used by start_api.py)."""

import logging
import os
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

logger = logging.getLogger("wait_for_db")


def wait_for_db(database_url: str, timeout_s: int | None = None, interval_s: float = 1.0) -> None:
    if timeout_s is None:
        timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    engine = create_engine(database_url, pool_pre_ping=True)
    deadline = time.monotonic() + timeout_s
    logger.info("waiting for database", extra={"backend": engine.url.get_backend_name(), "timeout_s": timeout_s})
    try:
        while True:
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info("database is ready")
                return
            except OperationalError:
                if time.monotonic() > deadline:
                    logger.error("timed out waiting for database")
                    raise
                time.sleep(interval_s)
    finally:
        engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    from app.core.config import settings
    wait_for_db(settings.DATABASE_URL)
