import logging
import os
from datetime import datetime, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("MACHINEHUB_DATABASE_URL", "sqlite:///./machinehub.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def utcnow() -> datetime:
    # Stored naive in UTC so SQLite and Postgres round-trip the same value.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def check_connection() -> None:
    """Open a connection and run a trivial query; raises if the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database reachable at %s", engine.url.render_as_string(hide_password=True))
