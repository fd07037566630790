"""Durable per-machine configuration records.

Reads and writes touch different freshness columns: a device fetch only
moves ``last_pinged``, an admin update only moves ``last_modified``.
Every operation is a single statement against one row, so concurrent
requests for the same machine need no in-process locking.
"""
import logging
from datetime import datetime

from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from machinehub.db import utcnow
from machinehub.errors import NotFoundError
from machinehub.models.machine_config import (
    DEFAULT_HOURS,
    DEFAULT_PX_FORMAT,
    DEFAULT_RESOLUTION,
    MachineConfig,
)
from machinehub.schemas.machine import ConfigPatch

logger = logging.getLogger(__name__)


def default_config(machine_id: str, now: datetime) -> dict:
    return {
        "id": machine_id,
        "paused": False,
        "backup": False,
        "resolution": DEFAULT_RESOLUTION,
        "px_format": DEFAULT_PX_FORMAT,
        "hours": list(DEFAULT_HOURS),
        "last_modified": now,
        "last_pinged": now,
    }


def _dialect_name(db: Session) -> str:
    return db.get_bind().dialect.name


def _insert_if_absent(db: Session, values: dict) -> bool:
    """Insert ``values`` unless a row with the same id exists. Returns True when a row was created."""
    dialect = _dialect_name(db)
    if dialect == "postgresql":
        stmt = postgresql.insert(MachineConfig).values(**values).on_conflict_do_nothing(index_elements=["id"])
    elif dialect == "sqlite":
        stmt = sqlite.insert(MachineConfig).values(**values).on_conflict_do_nothing(index_elements=["id"])
    else:
        try:
            db.execute(insert(MachineConfig).values(**values))
            db.commit()
        except IntegrityError:
            db.rollback()
            return False
        return True
    result = db.execute(stmt)
    db.commit()
    return result.rowcount == 1


def fetch_or_register(db: Session, machine_id: str, register_if_absent: bool) -> MachineConfig | None:
    now = utcnow()
    touched = db.execute(
        update(MachineConfig).where(MachineConfig.id == machine_id).values(last_pinged=now)
    )
    db.commit()
    if touched.rowcount == 0:
        if not register_if_absent:
            return None
        if _insert_if_absent(db, default_config(machine_id, now)):
            logger.info("Registered machine %s with default config", machine_id)
    return db.execute(select(MachineConfig).where(MachineConfig.id == machine_id)).scalar_one_or_none()


def fetch_for_admin(db: Session, machine_id: str) -> MachineConfig | None:
    return db.get(MachineConfig, machine_id)


def list_summaries(db: Session) -> list:
    return db.execute(
        select(MachineConfig.id, MachineConfig.last_modified, MachineConfig.last_pinged).order_by(MachineConfig.id)
    ).all()


def apply_update(db: Session, machine_id: str, patch: ConfigPatch) -> None:
    result = db.execute(
        update(MachineConfig)
        .where(MachineConfig.id == machine_id)
        .values(
            paused=patch.paused,
            px_format=patch.px_format,
            resolution=patch.resolution,
            hours=list(patch.hours),
            last_modified=utcnow(),
        )
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError(f'Machine with id "{machine_id}" not found', {"id": machine_id})
    db.commit()
    logger.info("Updated config for machine %s", machine_id)
