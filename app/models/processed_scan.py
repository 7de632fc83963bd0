"""
Processed Scan Model - Idempotency ledger for redelivered scans
"""
from sqlalchemy import Column, String, DateTime
from atams.db import Base


class ProcessedScan(Base):
    """Processed Scan model - Table: processed_scans"""
    __tablename__ = "processed_scans"

    ps_key = Column(String(64), primary_key=True, index=True)  # sha256 of 'badge|timestamp'
    ps_badge_id = Column(String(64), nullable=False)
    ps_processed_at = Column(DateTime, nullable=False)  # Naive UTC
