#!/usr/bin/env python3
"""
Container entrypoint: wait for Postgres, apply migrations, seed defaults, then
replace this process with uvicorn.
"""
import logging
import os
import sys

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.seed import run as run_seed
from wait_for_db import wait_for_db

logger = logging.getLogger("start_api")


def migrate() -> None:
    cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(cfg, "head")


def seed() -> None:
    # separate engine so seeding sees the tables the migration just created
    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    try:
        run_seed(sessionmaker(bind=engine, autoflush=False)())
    finally:
        engine.dispose()


def main() -> None:
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    if settings.DATABASE_URL.startswith("postgresql"):
        wait_for_db(settings.DATABASE_URL)
    migrate()
    seed()
    port = os.getenv("PORT", "8000")
    logger.info("starting uvicorn", extra={"port": port})
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    main()
