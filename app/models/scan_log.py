"""
Scan Log Model - Append-only raw badge scans from the scanner bridge
"""
from sqlalchemy import Column, BigInteger, Integer, String, DateTime
from sqlalchemy.sql import func
from atams.db import Base


class ScanLog(Base):
    """Scan Log model - Table: scan_logs"""
    __tablename__ = "scan_logs"

    sl_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True, autoincrement=True)
    sl_badge_id = Column(String(64), nullable=True, index=True)  # Raw input, may be missing
    sl_timestamp = Column(DateTime, nullable=True, index=True)  # Naive UTC
    sl_received_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
