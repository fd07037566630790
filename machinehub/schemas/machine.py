from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_serializer


def utc_iso(value: datetime) -> str:
    """Render a stored timestamp as fixed-width ISO 8601 UTC with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="microseconds").replace("+00:00", "Z")


class ConfigBody(BaseModel):
    paused: bool
    # Accepted for compatibility with older admin clients; updates never persist it.
    backup: bool | None = None
    resolution: int = Field(..., ge=0, le=63)
    hours: list[str]
    px_format: str = Field(..., alias="pxFormat")

    class Config:
        populate_by_name = True


class ErrorBody(BaseModel):
    error_code: int = Field(..., alias="errorCode")

    class Config:
        populate_by_name = True


class ImageBody(BaseModel):
    image: str = Field(..., min_length=1)


class ConfigPatch(BaseModel):
    paused: bool
    px_format: str
    resolution: int = Field(..., ge=0, le=63)
    hours: list[str]


class DeviceView(BaseModel):
    paused: bool
    backup: bool
    px_format: str = Field(..., alias="pxFormat")
    resolution: int
    hours: list[str]
    timestamp: str

    class Config:
        populate_by_name = True


class AdminView(BaseModel):
    id: str
    paused: bool
    backup: bool
    resolution: int
    hours: list[str]
    px_format: str = Field(..., alias="pxFormat")
    last_modified: datetime = Field(..., alias="lastModified")
    last_pinged: datetime = Field(..., alias="lastPinged")

    class Config:
        populate_by_name = True

    @field_serializer("last_modified", "last_pinged")
    def _serialize_utc(self, value: datetime) -> str:
        return utc_iso(value)


class MachineSummary(BaseModel):
    id: str
    last_modified: datetime = Field(..., alias="lastModified")
    last_pinged: datetime = Field(..., alias="lastPinged")

    class Config:
        populate_by_name = True

    @field_serializer("last_modified", "last_pinged")
    def _serialize_utc(self, value: datetime) -> str:
        return utc_iso(value)


class ErrorLogOut(BaseModel):
    id: str
    error: int
    timestamp: datetime

    @field_serializer("timestamp")
    def _serialize_utc(self, value: datetime) -> str:
        return utc_iso(value)


class Ack(BaseModel):
    ok: bool = True
