"""Operations the machine routes call.

Each output shape is built by its own mapping function from the stored
record; the record itself is never mutated to produce a view.
"""
import base64
import binascii
import logging
import time

from sqlalchemy.orm import Session

from machinehub.errors import InvalidBodyError, NotFoundError
from machinehub.models.error_log import ErrorLog
from machinehub.models.machine_config import MachineConfig
from machinehub.schemas.machine import (
    AdminView,
    ConfigBody,
    ConfigPatch,
    DeviceView,
    ErrorLogOut,
    MachineSummary,
)
from machinehub.services import config_store, error_log, images

logger = logging.getLogger(__name__)


def _not_found(machine_id: str) -> NotFoundError:
    return NotFoundError(f'Machine with id "{machine_id}" not found', {"id": machine_id})


def _response_timestamp() -> str:
    return str(int(time.time() * 1000))


def to_device_view(config: MachineConfig, timestamp: str) -> DeviceView:
    return DeviceView(
        paused=config.paused,
        backup=config.backup,
        px_format=config.px_format,
        resolution=config.resolution,
        hours=list(config.hours),
        timestamp=timestamp,
    )


def to_admin_view(config: MachineConfig) -> AdminView:
    return AdminView(
        id=config.id,
        paused=config.paused,
        backup=config.backup,
        resolution=config.resolution,
        hours=list(config.hours),
        px_format=config.px_format,
        last_modified=config.last_modified,
        last_pinged=config.last_pinged,
    )


def to_summary(row) -> MachineSummary:
    return MachineSummary(id=row.id, last_modified=row.last_modified, last_pinged=row.last_pinged)


def to_error_out(entry: ErrorLog) -> ErrorLogOut:
    return ErrorLogOut(id=entry.machine_id, error=entry.error, timestamp=entry.timestamp)


def to_patch(body: ConfigBody) -> ConfigPatch:
    return ConfigPatch(
        paused=body.paused,
        px_format=body.px_format,
        resolution=body.resolution,
        hours=body.hours,
    )


def get_fleet_summary(db: Session) -> list[MachineSummary]:
    return [to_summary(row) for row in config_store.list_summaries(db)]


def get_device_config(db: Session, machine_id: str, initial_connection: bool) -> DeviceView:
    config = config_store.fetch_or_register(db, machine_id, initial_connection)
    if config is None:
        raise _not_found(machine_id)
    return to_device_view(config, _response_timestamp())


def get_device_config_for_admin(db: Session, machine_id: str) -> AdminView:
    config = config_store.fetch_for_admin(db, machine_id)
    if config is None:
        raise _not_found(machine_id)
    return to_admin_view(config)


def update_device_config(db: Session, machine_id: str, patch: ConfigPatch) -> None:
    config_store.apply_update(db, machine_id, patch)


def get_device_errors(db: Session, machine_id: str) -> list[ErrorLogOut]:
    return [to_error_out(entry) for entry in error_log.list_for(db, machine_id)]


def report_device_error(db: Session, machine_id: str, error_code: int) -> None:
    error_log.append(db, machine_id, error_code)


def decode_image(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidBodyError("Image is not valid base64", {"reason": str(exc)}) from exc


def record_device_image(machine_id: str, content: bytes) -> str:
    return images.record_image(machine_id, content)


def list_device_images(machine_id: str) -> list[str]:
    return images.list_images(machine_id)
