"""
Classifier Service - derives status, duration and presence from recorded times
"""
from datetime import timedelta
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import SQLAlchemyError

from atams.logging import get_logger
from app.core.config import settings
from app.events import CheckInRecorded, CheckOutRecorded
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.repositories.event_session_repository import EventSessionRepository

logger = get_logger(__name__)

PRESENT_THRESHOLD_PERCENT = 70


class ClassifierService:
    def __init__(self, grace_minutes: int = None) -> None:
        self.grace_minutes = settings.CHECKIN_GRACE_MINUTES if grace_minutes is None else grace_minutes
        self.record_repo = AttendanceRecordRepository()
        self.session_repo = EventSessionRepository()

    def on_check_in(self, db: Session, event: CheckInRecorded) -> None:
        """Mark the record onTime or late against the session start plus grace"""
        record = self.record_repo.get_record(db, event.event_id, event.session_id, event.student_id)
        if record is None or record.ar_check_in_time is None:
            return
        if record.ar_status is not None or record.ar_actual_status is not None:
            return

        session = self.session_repo.get_session(db, event.event_id, event.session_id)
        if session is None or session.es_start_time is None:
            logger.warning("Session %s/%s has no start time, check-in not classified", event.event_id, event.session_id)
            return

        grace_deadline = session.es_start_time + timedelta(minutes=self.grace_minutes)
        record.ar_status = "onTime" if record.ar_check_in_time <= grace_deadline else "late"
        self._save(db, event)

    def on_check_out(self, db: Session, event: CheckOutRecorded) -> None:
        """Compute duration, percentage and the present/absent outcome"""
        record = self.record_repo.get_record(db, event.event_id, event.session_id, event.student_id)
        if record is None or record.ar_actual_status is not None:
            return
        if record.ar_check_in_time is None or record.ar_check_out_time is None:
            logger.warning("Record %s has a check-out without a check-in, not classified", event.record_key)
            return

        session = self.session_repo.get_session(db, event.event_id, event.session_id)
        if session is None or session.es_start_time is None or session.es_end_time is None:
            logger.warning("Session %s/%s has no start/end time, check-out not classified", event.event_id, event.session_id)
            return

        session_minutes = (session.es_end_time - session.es_start_time).total_seconds() / 60
        if session_minutes <= 0:
            logger.error("Session %s/%s has non-positive duration", event.event_id, event.session_id)
            return

        duration_minutes = (record.ar_check_out_time - record.ar_check_in_time).total_seconds() / 60
        percentage = 100.0 * duration_minutes / session_minutes

        if percentage >= PRESENT_THRESHOLD_PERCENT:
            record.ar_actual_status = "present"
        else:
            record.ar_actual_status = "absent"
            record.ar_status = "absent"
            percentage = 0.0

        record.ar_duration_minutes = round(duration_minutes, 2)
        record.ar_attendance_percentage = round(percentage, 2)
        self._save(db, event)

    def _save(self, db: Session, event) -> None:
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.warning("Record %s changed during classification, skipped", event.record_key)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to store classification for %s", event.record_key)
