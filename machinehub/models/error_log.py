from sqlalchemy import Column, DateTime, Integer, String
from machinehub.db import Base, utcnow


class ErrorLog(Base):
    __tablename__ = "error_log"

    # Autoincrement key doubles as the insertion-order key for listings.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    machine_id = Column(String, nullable=False, index=True)
    error = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=utcnow)
