"""
Cleanup Service - Maintenance operations for database hygiene
"""
from sqlalchemy.orm import Session

from app.repositories.processed_scan_repository import ProcessedScanRepository


class CleanupService:
    def __init__(self) -> None:
        self.ledger_repo = ProcessedScanRepository()

    def cleanup_scan_ledger(self, db: Session, days_old: int = 7) -> int:
        """
        Delete old processed-scan ledger entries to prevent table bloat

        Redeliveries older than the retention window are no longer detected.

        Args:
            db: Database session
            days_old: Delete records older than this many days (default: 7)

        Returns:
            int: Number of records deleted
        """
        return self.ledger_repo.cleanup_old_entries(db, older_than_days=days_old)
