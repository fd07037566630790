import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from machinehub.db import SessionLocal
from machinehub.errors import InvalidPathParamError
from machinehub.schemas.machine import (
    Ack,
    AdminView,
    ConfigBody,
    DeviceView,
    ErrorBody,
    ErrorLogOut,
    ImageBody,
    MachineSummary,
)
from machinehub.services import sync

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/machines", tags=["machines"])


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _check_path_param(value: str | None, name: str) -> str:
    if not value or not isinstance(value, str):
        raise InvalidPathParamError("Invalid path parameter", {"name": name, "value": value})
    return value


@router.get("", response_model=list[MachineSummary])
@router.get("/", response_model=list[MachineSummary])
def list_machines(db: Session = Depends(get_db)):
    return sync.get_fleet_summary(db)


@router.get("/{machine_id}", response_model=DeviceView)
def get_config(
    machine_id: str,
    initial_connection: str | None = Query(None, alias="initialConnection"),
    db: Session = Depends(get_db),
):
    _check_path_param(machine_id, "id")
    # Any non-empty value registers; a bare or empty flag does not.
    return sync.get_device_config(db, machine_id, bool(initial_connection))


@router.get("/{machine_id}/errors", response_model=list[ErrorLogOut])
def get_errors(machine_id: str, db: Session = Depends(get_db)):
    _check_path_param(machine_id, "id")
    return sync.get_device_errors(db, machine_id)


@router.get("/{machine_id}/frontend", response_model=AdminView)
def get_config_frontend(machine_id: str, db: Session = Depends(get_db)):
    _check_path_param(machine_id, "id")
    return sync.get_device_config_for_admin(db, machine_id)


@router.post("/{machine_id}", response_model=Ack)
def post_config(machine_id: str, payload: ConfigBody, db: Session = Depends(get_db)):
    _check_path_param(machine_id, "id")
    sync.update_device_config(db, machine_id, sync.to_patch(payload))
    return Ack()


@router.post("/{machine_id}/errors", response_model=Ack)
def post_error(machine_id: str, payload: ErrorBody, db: Session = Depends(get_db)):
    _check_path_param(machine_id, "id")
    sync.report_device_error(db, machine_id, payload.error_code)
    return Ack()


@router.post("/{machine_id}/image", response_model=Ack)
def post_image(machine_id: str, payload: ImageBody):
    _check_path_param(machine_id, "id")
    sync.record_device_image(machine_id, sync.decode_image(payload.image))
    return Ack()


@router.get("/{machine_id}/images", response_model=list[str])
def get_images(machine_id: str):
    _check_path_param(machine_id, "id")
    return sync.list_device_images(machine_id)
