import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from machinehub.db import utcnow
from machinehub.models.error_log import ErrorLog

logger = logging.getLogger(__name__)


def append(db: Session, machine_id: str, error_code: int) -> ErrorLog:
    entry = ErrorLog(machine_id=machine_id, error=error_code, timestamp=utcnow())
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("Machine %s reported error %s", machine_id, error_code)
    return entry


def list_for(db: Session, machine_id: str) -> list[ErrorLog]:
    return list(
        db.execute(select(ErrorLog).where(ErrorLog.machine_id == machine_id).order_by(ErrorLog.seq)).scalars()
    )
