"""
Processed Scan Repository - Idempotency ledger for applied scans
"""
import hashlib
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from atams.db import BaseRepository
from app.models.processed_scan import ProcessedScan
from app.utils.timestamps import utcnow


def scan_key(badge_id: str, timestamp: datetime) -> str:
    """Stable ledger key for a (badge, timestamp) pair"""
    raw = f"{badge_id}|{timestamp.isoformat(timespec='microseconds')}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ProcessedScanRepository(BaseRepository[ProcessedScan]):
    def __init__(self):
        super().__init__(ProcessedScan)

    def is_processed(self, db: Session, badge_id: str, timestamp: datetime) -> bool:
        """Check whether a scan already produced a state change"""
        key = scan_key(badge_id, timestamp)
        return db.query(ProcessedScan).filter(ProcessedScan.ps_key == key).first() is not None

    def claim(self, db: Session, badge_id: str, timestamp: datetime) -> bool:
        """
        Stage the ledger entry for a scan inside the caller's transaction.
        Returns True if staged, False if another writer already claimed it.

        The entry is flushed, not committed, so it lands together with the
        attendance write it guards. On conflict the whole transaction is
        rolled back.
        """
        try:
            db.add(ProcessedScan(
                ps_key=scan_key(badge_id, timestamp),
                ps_badge_id=badge_id,
                ps_processed_at=utcnow()
            ))
            db.flush()
            return True
        except IntegrityError:
            # Duplicate delivery detected
            db.rollback()
            return False

    def cleanup_old_entries(self, db: Session, older_than_days: int = 7) -> int:
        """
        Clean up ledger entries older than specified days using ORM.
        Returns count of deleted records.
        """
        cutoff_time = utcnow() - timedelta(days=older_than_days)

        count = db.query(ProcessedScan).filter(
            ProcessedScan.ps_processed_at < cutoff_time
        ).delete(synchronize_session=False)
        db.commit()

        return count
