"""
Scan Service - Scan log ingest, listing and replay
"""
from typing import List, Optional
from collections import Counter
from datetime import datetime
from sqlalchemy.orm import Session

from atams.logging import get_logger
from app.repositories.scan_log_repository import ScanLogRepository
from app.schemas.scan import ScanRequest, ScanResult, ScanLog, ReplayRequest, ReplayResult
from app.services.active_session_service import ActiveSessionService
from app.services.derivation_service import AttendanceDerivationService

logger = get_logger(__name__)


class ScanService:
    def __init__(self, derivation: AttendanceDerivationService) -> None:
        self.repo = ScanLogRepository()
        self.derivation = derivation
        self.active_session_service = ActiveSessionService()

    def ingest(self, db: Session, request: ScanRequest) -> ScanResult:
        """
        Append the raw scan to the log, then derive attendance from it

        The log entry is stored even when the scan turns out to be unusable.
        """
        self.repo.append(db, badge_id=request.uid, timestamp=request.timestamp)
        return self.derivation.process_scan(db, request.uid, request.timestamp)

    def list_scans(
        self,
        db: Session,
        badge_id: str = None,
        date_from: datetime = None,
        date_to: datetime = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ScanLog]:
        scans = self.repo.get_scans_with_filters(db, badge_id, date_from, date_to, skip, limit)
        return [ScanLog.model_validate(s) for s in scans]

    def count_scans(self, db: Session, badge_id: str = None, date_from: datetime = None, date_to: datetime = None) -> int:
        return self.repo.count_scans_with_filters(db, badge_id, date_from, date_to)

    def replay(self, db: Session, request: Optional[ReplayRequest] = None) -> ReplayResult:
        """
        Redeliver stored scans to the derivation engine in timestamp order

        The processed-scan ledger turns already applied scans into no-ops.
        Each scan is resolved against the sessions that were live at its own
        timestamp, so a backlog can be replayed after the fact.
        """
        request = request or ReplayRequest()
        scans = self.repo.get_in_range(db, request.date_from, request.date_to, request.limit)

        outcomes = Counter()
        for scan in scans:
            projection = self.active_session_service.as_of(db, scan.sl_timestamp)
            result = self.derivation.process_scan(db, scan.sl_badge_id, scan.sl_timestamp, projection=projection)
            outcomes[result.outcome] += 1

        recorded = outcomes["checked_in"] + outcomes["checked_out"]
        logger.info("Replayed %d scans, %d recorded", len(scans), recorded)
        return ReplayResult(processed=len(scans), recorded=recorded, outcomes=dict(outcomes))
