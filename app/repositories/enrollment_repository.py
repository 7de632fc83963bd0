"""
Enrollment Repository - Data access layer for student <-> event enrollments
"""
from typing import Dict, Set
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.student import StudentEnrollment


class EnrollmentRepository(BaseRepository[StudentEnrollment]):
    def __init__(self):
        super().__init__(StudentEnrollment)

    def is_enrolled(self, db: Session, student_id: str, event_id: str) -> bool:
        return db.query(StudentEnrollment).filter(
            StudentEnrollment.se_student_id == student_id,
            StudentEnrollment.se_event_id == event_id
        ).first() is not None

    def get_event_ids(self, db: Session, student_id: str) -> Set[str]:
        """Events one student is enrolled in"""
        rows = db.query(StudentEnrollment.se_event_id).filter(
            StudentEnrollment.se_student_id == student_id
        ).all()
        return {row[0] for row in rows}

    def get_all_grouped(self, db: Session) -> Dict[str, Set[str]]:
        """student_id -> enrolled event IDs for the whole roster"""
        grouped: Dict[str, Set[str]] = {}
        for student_id, event_id in db.query(StudentEnrollment.se_student_id, StudentEnrollment.se_event_id).all():
            grouped.setdefault(student_id, set()).add(event_id)
        return grouped

    def remove(self, db: Session, student_id: str, event_id: str) -> bool:
        deleted = db.query(StudentEnrollment).filter(
            StudentEnrollment.se_student_id == student_id,
            StudentEnrollment.se_event_id == event_id
        ).delete(synchronize_session=False)
        db.commit()
        return deleted > 0

    def delete_by_event(self, db: Session, event_id: str) -> int:
        """Drop every enrollment in an event; caller commits"""
        return db.query(StudentEnrollment).filter(
            StudentEnrollment.se_event_id == event_id
        ).delete(synchronize_session=False)

    def delete_by_student(self, db: Session, student_id: str) -> int:
        """Drop every enrollment of a student; caller commits"""
        return db.query(StudentEnrollment).filter(
            StudentEnrollment.se_student_id == student_id
        ).delete(synchronize_session=False)
