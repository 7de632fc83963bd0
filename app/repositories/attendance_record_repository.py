"""
Attendance Record Repository - Data access layer for per-student session records
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.attendance_record import AttendanceRecord


class AttendanceRecordRepository(BaseRepository[AttendanceRecord]):
    def __init__(self):
        super().__init__(AttendanceRecord)

    def get_record(self, db: Session, event_id: str, session_id: str, student_id: str) -> Optional[AttendanceRecord]:
        """Get one record by its composite key using ORM"""
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_event_id == event_id,
            AttendanceRecord.ar_session_id == session_id,
            AttendanceRecord.ar_student_id == student_id
        ).first()

    def get_by_session(self, db: Session, event_id: str, session_id: str) -> List[AttendanceRecord]:
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_event_id == event_id,
            AttendanceRecord.ar_session_id == session_id
        ).order_by(AttendanceRecord.ar_student_id.asc()).all()

    def get_all(self, db: Session) -> List[AttendanceRecord]:
        return db.query(AttendanceRecord).all()

    def add_record(self, db: Session, event_id: str, session_id: str, student_id: str) -> AttendanceRecord:
        """Stage an empty record; caller fills it and commits"""
        record = AttendanceRecord(
            ar_event_id=event_id,
            ar_session_id=session_id,
            ar_student_id=student_id
        )
        db.add(record)
        return record

    def exists_for_event(self, db: Session, event_id: str) -> bool:
        """Check if any attendance was recorded for an event using native SQL"""
        query = "SELECT 1 FROM attendance_records WHERE ar_event_id = :event_id LIMIT 1"
        return self.execute_raw_sql_scalar(db, query, {"event_id": event_id}) is not None

    def delete_by_event(self, db: Session, event_id: str) -> int:
        """Delete all records of an event; caller commits"""
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_event_id == event_id
        ).delete(synchronize_session=False)

    def delete_by_student(self, db: Session, student_id: str) -> int:
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_student_id == student_id
        ).delete(synchronize_session=False)
