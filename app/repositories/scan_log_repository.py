"""
Scan Log Repository - Append-only store of raw badge scans
"""
from typing import List
from datetime import datetime
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.scan_log import ScanLog


class ScanLogRepository(BaseRepository[ScanLog]):
    def __init__(self):
        super().__init__(ScanLog)

    def append(self, db: Session, badge_id: str = None, timestamp: datetime = None) -> ScanLog:
        """Append one raw scan; malformed entries are kept as-is"""
        return self.create(db, {"sl_badge_id": badge_id, "sl_timestamp": timestamp})

    def get_scans_with_filters(
        self,
        db: Session,
        badge_id: str = None,
        date_from: datetime = None,
        date_to: datetime = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ScanLog]:
        """Get scans with various filters using ORM, newest first"""
        query = self._filtered(db, badge_id, date_from, date_to)
        return query.order_by(ScanLog.sl_id.desc()).offset(skip).limit(limit).all()

    def count_scans_with_filters(
        self,
        db: Session,
        badge_id: str = None,
        date_from: datetime = None,
        date_to: datetime = None
    ) -> int:
        return self._filtered(db, badge_id, date_from, date_to).count()

    def get_in_range(self, db: Session, date_from: datetime = None, date_to: datetime = None, limit: int = 1000) -> List[ScanLog]:
        """Well-formed scans in timestamp order, for replay"""
        query = self._filtered(db, None, date_from, date_to).filter(
            ScanLog.sl_badge_id.isnot(None),
            ScanLog.sl_timestamp.isnot(None)
        )
        return query.order_by(ScanLog.sl_timestamp.asc(), ScanLog.sl_id.asc()).limit(limit).all()

    def _filtered(self, db: Session, badge_id: str, date_from: datetime, date_to: datetime):
        query = db.query(ScanLog)
        if badge_id:
            query = query.filter(ScanLog.sl_badge_id == badge_id)
        if date_from:
            query = query.filter(ScanLog.sl_timestamp >= date_from)
        if date_to:
            query = query.filter(ScanLog.sl_timestamp <= date_to)
        return query
