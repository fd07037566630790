from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Integer, String
from machinehub.db import Base, utcnow

DEFAULT_RESOLUTION = 2
DEFAULT_PX_FORMAT = "PXFORMAT_JPEG"
DEFAULT_HOURS = ["12:00"]


class MachineConfig(Base):
    __tablename__ = "machine_config"
    __table_args__ = (
        CheckConstraint("resolution >= 0 AND resolution <= 63", name="ck_machine_config_resolution"),
    )

    id = Column(String, primary_key=True)
    paused = Column(Boolean, nullable=False, default=False)
    backup = Column(Boolean, nullable=False, default=False)
    resolution = Column(Integer, nullable=False, default=DEFAULT_RESOLUTION)
    hours = Column(JSON, nullable=False, default=lambda: list(DEFAULT_HOURS))
    px_format = Column(String, nullable=False, default=DEFAULT_PX_FORMAT)
    last_modified = Column(DateTime, nullable=False, default=utcnow)
    last_pinged = Column(DateTime, nullable=False, default=utcnow)
