"""
Absence Sweep Service - fills explicit absent records for recently finished sessions
"""
from typing import Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from atams.logging import get_logger
from app.core.config import settings
from app.models.attendance_record import AttendanceRecord
from app.repositories.enrollment_repository import EnrollmentRepository
from app.repositories.event_session_repository import EventSessionRepository
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.schemas.attendance import SweepReport
from app.utils.timestamps import utcnow, local_date

logger = get_logger(__name__)


class AbsenceSweepService:
    def __init__(self, timezone_name: str = None) -> None:
        self.timezone_name = timezone_name or settings.TIMEZONE
        self.enrollment_repo = EnrollmentRepository()
        self.session_repo = EventSessionRepository()
        self.record_repo = AttendanceRecordRepository()

    def sweep(self, db: Session, now: Optional[datetime] = None) -> SweepReport:
        """
        Write absent records for every enrolled student who has no valid
        check-in in a session that started today or yesterday and has
        already ended.

        A record with a check-in inside the session window is never touched.

        Args:
            db: Database session
            now: Reference instant (naive UTC); defaults to the current time

        Returns:
            SweepReport: Counters for examined entries, fills, skips and errors
        """
        if now is None:
            now = utcnow()
        today = local_date(now, self.timezone_name)
        # Yesterday is revisited for sessions that were still running at its sweep
        window = (today - timedelta(days=1), today)
        report = SweepReport()

        enrollments = self.enrollment_repo.get_all_grouped(db)
        event_ids = sorted({event_id for events in enrollments.values() for event_id in events})
        sessions_by_event = self.session_repo.get_grouped_by_event(db, event_ids)

        due = {}
        for event_id, sessions in sessions_by_event.items():
            for session in sessions:
                if session.es_start_time is None or session.es_end_time is None:
                    logger.warning("Session %s of event %s has no start/end time, skipped", session.es_id, event_id)
                    report.skipped_sessions += 1
                    continue
                if local_date(session.es_start_time, self.timezone_name) not in window:
                    continue
                if session.es_end_time >= now:
                    continue
                due.setdefault(event_id, []).append(session)

        for student_id in sorted(enrollments):
            for event_id in sorted(enrollments[student_id]):
                for session in due.get(event_id, []):
                    report.examined += 1
                    try:
                        if self._fill_if_absent(db, event_id, session, student_id):
                            report.marked_absent += 1
                    except SQLAlchemyError:
                        db.rollback()
                        report.errors += 1
                        logger.exception("Absence sweep failed for %s/%s/%s", event_id, session.es_id, student_id)

        logger.info(
            "Absence sweep for %s: examined=%d marked_absent=%d errors=%d",
            today, report.examined, report.marked_absent, report.errors
        )
        return report

    def _fill_if_absent(self, db: Session, event_id: str, session, student_id: str) -> bool:
        record = self.record_repo.get_record(db, event_id, session.es_id, student_id)

        if record is not None:
            if self._has_valid_check_in(record, session):
                return False
            if self._is_absent_fill(record):
                return False
        else:
            record = self.record_repo.add_record(db, event_id, session.es_id, student_id)

        record.ar_check_in_time = None
        record.ar_check_out_time = None
        record.ar_status = "absent"
        record.ar_actual_status = "absent"
        record.ar_attendance_percentage = 0
        record.ar_duration_minutes = None
        db.commit()
        return True

    @staticmethod
    def _has_valid_check_in(record: AttendanceRecord, session) -> bool:
        check_in = record.ar_check_in_time
        return check_in is not None and session.es_start_time <= check_in <= session.es_end_time

    @staticmethod
    def _is_absent_fill(record: AttendanceRecord) -> bool:
        return (
            record.ar_check_in_time is None
            and record.ar_status == "absent"
            and record.ar_actual_status == "absent"
        )
