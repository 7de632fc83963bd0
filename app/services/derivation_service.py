"""
Attendance Derivation Service - turns one badge scan into a check-in or check-out
"""
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from atams.logging import get_logger
from app.events import EventBus, CheckInRecorded, CheckOutRecorded
from app.repositories.enrollment_repository import EnrollmentRepository
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.repositories.processed_scan_repository import ProcessedScanRepository
from app.schemas.active_session import ActiveSessionEntry, ActiveSessionProjection
from app.schemas.scan import ScanResult
from app.services.active_session_service import ActiveSessionService
from app.services.badge_index import BadgeIndex, badge_index

logger = get_logger(__name__)


class AttendanceDerivationService:
    def __init__(self, bus: Optional[EventBus] = None, index: Optional[BadgeIndex] = None) -> None:
        self.bus = bus if bus is not None else EventBus()
        self.badge_index = index if index is not None else badge_index
        self.enrollment_repo = EnrollmentRepository()
        self.record_repo = AttendanceRecordRepository()
        self.ledger_repo = ProcessedScanRepository()
        self.active_session_service = ActiveSessionService()

    def process_scan(
        self,
        db: Session,
        badge_id: Optional[str],
        timestamp: Optional[datetime],
        projection: Optional[ActiveSessionProjection] = None
    ) -> ScanResult:
        """
        Apply one scan to the attendance record it belongs to

        Writes at most one of checkInTime / checkOutTime. Never raises for
        bad input or unresolvable references; the outcome says what happened.

        Args:
            db: Database session
            badge_id: Badge number read by the scanner
            timestamp: Scan instant (naive UTC)
            projection: Active-session snapshot; the persisted one when omitted

        Returns:
            ScanResult: Outcome plus the resolved record key
        """
        result = ScanResult(outcome="rejected", badge_id=badge_id, timestamp=timestamp)

        # 1. Malformed entry
        if not badge_id or timestamp is None:
            logger.warning("Rejected scan with missing uid or timestamp: uid=%r timestamp=%r", badge_id, timestamp)
            result.message = "Scan is missing uid or timestamp"
            return result

        # 2. Redelivery of an already applied scan
        if self.ledger_repo.is_processed(db, badge_id, timestamp):
            result.outcome = "duplicate"
            result.message = "Scan already applied"
            return result

        # 3. Badge -> student
        student_id = self.badge_index.lookup(db, badge_id)
        if student_id is None:
            logger.warning("No student registered for badge %s", badge_id)
            result.outcome = "unknown_badge"
            result.message = "Badge is not registered"
            return result
        result.student_id = student_id

        # 4. Session whose own window contains the scan
        if projection is None:
            projection = self.active_session_service.current(db)
        candidates = projection.sessions_containing(timestamp)
        if not candidates:
            logger.info("No active session at %s for badge %s", timestamp, badge_id)
            result.outcome = "no_active_session"
            result.message = "No session is running at this time"
            return result

        # 5. Enrollment gate; earliest open session wins among overlapping ones
        enrolled = self.enrollment_repo.get_event_ids(db, student_id)
        eligible = [entry for entry in candidates if entry.event_id in enrolled]
        if not eligible:
            logger.info("Student %s not enrolled in any active event", student_id)
            result.outcome = "not_enrolled"
            result.message = "Student is not enrolled in the running event"
            return result
        target, record = self._pick_target(db, eligible, student_id)
        result.event_id = target.event_id
        result.session_id = target.session_id

        # 6. Record transition
        return self._apply(db, result, timestamp, record)

    def _pick_target(self, db: Session, eligible: List[ActiveSessionEntry], student_id: str):
        """First candidate whose record is still open; the earliest one if all are closed"""
        fallback = None
        for entry in eligible:
            record = self.record_repo.get_record(db, entry.event_id, entry.session_id, student_id)
            if not self._is_closed(record):
                return entry, record
            if fallback is None:
                fallback = (entry, record)
        return fallback

    @staticmethod
    def _is_closed(record) -> bool:
        if record is None:
            return False
        if record.ar_actual_status is not None:
            return True
        return record.ar_check_in_time is not None and record.ar_check_out_time is not None

    def _apply(self, db: Session, result: ScanResult, timestamp: datetime, record) -> ScanResult:
        if record is not None and record.ar_actual_status is not None:
            result.outcome = "closed"
            result.message = "Attendance for this session is already complete"
            return result
        if record is not None and record.ar_check_in_time is not None:
            if record.ar_check_out_time is not None:
                result.outcome = "closed"
                result.message = "Already checked in and out"
                return result
            if timestamp < record.ar_check_in_time:
                logger.warning(
                    "Discarded out-of-order check-out for %s/%s/%s: %s before check-in %s",
                    result.event_id, result.session_id, result.student_id, timestamp, record.ar_check_in_time
                )
                result.outcome = "out_of_order"
                result.message = "Scan is earlier than the recorded check-in"
                return result

        try:
            if not self.ledger_repo.claim(db, result.badge_id, timestamp):
                result.outcome = "duplicate"
                result.message = "Scan already applied"
                return result

            if record is None:
                record = self.record_repo.add_record(db, result.event_id, result.session_id, result.student_id)

            if record.ar_check_in_time is None:
                record.ar_check_in_time = timestamp
                event = CheckInRecorded(result.event_id, result.session_id, result.student_id, timestamp)
                result.outcome = "checked_in"
                result.message = f"Checked in {timestamp.strftime('%H:%M')}"
            else:
                record.ar_check_out_time = timestamp
                event = CheckOutRecorded(result.event_id, result.session_id, result.student_id, timestamp)
                result.outcome = "checked_out"
                result.message = f"Checked out {timestamp.strftime('%H:%M')}"

            db.commit()
        except (StaleDataError, IntegrityError):
            db.rollback()
            logger.warning(
                "Concurrent write on %s/%s/%s, scan not applied",
                result.event_id, result.session_id, result.student_id
            )
            result.outcome = "conflict"
            result.message = "Record changed concurrently, retry the scan"
            return result
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to store scan for badge %s", result.badge_id)
            result.outcome = "error"
            result.message = "Scan could not be stored"
            return result

        logger.info("%s: student %s in %s/%s", result.outcome, result.student_id, result.event_id, result.session_id)
        self.bus.publish(db, event)
        return result
