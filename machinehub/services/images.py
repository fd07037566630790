"""Per-machine image naming and listing.

Blobs live in one folder per machine id. Names are derived from the
upload time, so they sort chronologically and need no coordination
between concurrent uploads; two uploads in the same microsecond
overwrite each other.
"""
import logging
import os
from datetime import datetime, timezone

from machinehub.errors import InvalidBodyError, InvalidPathParamError
from machinehub.services import storage

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/stored"
IMAGE_EXTENSION = ".jpg"
MAX_IMAGE_BYTES = int(os.getenv("MACHINEHUB_MAX_IMAGE_BYTES", str(15 * 1024 * 1024)))


def _check_namespace(machine_id: str) -> None:
    if machine_id in {".", ".."} or os.path.basename(machine_id) != machine_id or "\\" in machine_id:
        raise InvalidPathParamError(
            "Machine id cannot be used as an image namespace",
            {"name": "id", "value": machine_id},
        )


def new_image_name(now: datetime | None = None) -> str:
    current = now or datetime.now(timezone.utc)
    return f"{current.strftime('%Y%m%dT%H%M%S%fZ')}{IMAGE_EXTENSION}"


def public_path(machine_id: str, name: str) -> str:
    return f"{PUBLIC_PREFIX}/{machine_id}/{name}"


def record_image(machine_id: str, content: bytes) -> str:
    _check_namespace(machine_id)
    if not content:
        raise InvalidBodyError("Image payload is empty")
    if len(content) > MAX_IMAGE_BYTES:
        raise InvalidBodyError(
            f"Image exceeds the {MAX_IMAGE_BYTES} byte limit",
            {"size": len(content), "limit": MAX_IMAGE_BYTES},
        )
    name = new_image_name()
    storage.save_stored(content, name, machine_id)
    logger.info("Stored image %s for machine %s (%d bytes)", name, machine_id, len(content))
    return name


def list_images(machine_id: str) -> list[str]:
    _check_namespace(machine_id)
    return [public_path(machine_id, name) for name in storage.list_stored(machine_id)]
