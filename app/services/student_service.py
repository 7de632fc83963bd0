"""
Student Service - Business logic for the student roster and enrollments
"""
import uuid
from typing import List
from sqlalchemy.orm import Session

from app.models.student import Student as StudentModel
from app.repositories.student_repository import StudentRepository
from app.repositories.enrollment_repository import EnrollmentRepository
from app.repositories.event_repository import EventRepository
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.schemas.student import StudentCreate, StudentUpdate, Student
from app.services.badge_index import BadgeIndex, badge_index
from atams.exceptions import (
    NotFoundException,
    ConflictException,
)


class StudentService:
    def __init__(self, index: BadgeIndex = None) -> None:
        self.repo = StudentRepository()
        self.enrollment_repo = EnrollmentRepository()
        self.event_repo = EventRepository()
        self.record_repo = AttendanceRecordRepository()
        self.badge_index = index if index is not None else badge_index

    def _to_schema(self, db: Session, student: StudentModel) -> Student:
        result = Student.model_validate(student)
        result.enrolled_event_ids = sorted(self.enrollment_repo.get_event_ids(db, student.st_id))
        return result

    def _get_or_404(self, db: Session, st_id: str) -> StudentModel:
        student = self.repo.get_by_id(db, st_id)
        if not student:
            raise NotFoundException("Student not found")
        return student

    def list_students(self, db: Session, search: str = "", skip: int = 0, limit: int = 100) -> List[Student]:
        students = self.repo.get_students_with_search(db, search=search, skip=skip, limit=limit)
        return [self._to_schema(db, s) for s in students]

    def count_students(self, db: Session) -> int:
        return self.repo.count_students(db)

    def get_student(self, db: Session, st_id: str) -> Student:
        return self._to_schema(db, self._get_or_404(db, st_id))

    def create_student(self, db: Session, payload: StudentCreate) -> Student:
        st_id = payload.st_id or uuid.uuid4().hex[:20]
        if self.repo.get_by_id(db, st_id):
            raise ConflictException("Student with this ID already exists")
        if self.repo.check_badge_taken(db, payload.st_badge_id):
            raise ConflictException("Badge is already assigned to another student")

        data = payload.model_dump()
        data["st_id"] = st_id
        student = self.repo.create(db, data)
        self.badge_index.invalidate()
        return self._to_schema(db, student)

    def update_student(self, db: Session, st_id: str, payload: StudentUpdate) -> Student:
        student = self._get_or_404(db, st_id)
        update_data = payload.model_dump(exclude_unset=True)

        badge = update_data.get("st_badge_id")
        if badge and self.repo.check_badge_taken(db, badge, exclude_student_id=st_id):
            raise ConflictException("Badge is already assigned to another student")

        student = self.repo.update(db, student, update_data)
        if "st_badge_id" in update_data:
            self.badge_index.invalidate()
        return self._to_schema(db, student)

    def delete_student(self, db: Session, st_id: str) -> None:
        student = self._get_or_404(db, st_id)
        self.record_repo.delete_by_student(db, st_id)
        self.enrollment_repo.delete_by_student(db, st_id)
        db.delete(student)
        db.commit()
        self.badge_index.invalidate()
        return None

    def enroll(self, db: Session, st_id: str, ev_id: str) -> Student:
        """
        Enroll a student in an event, consuming one seat of the quota
        when the event still has seats left.

        Raises:
            NotFoundException: If student or event not found
            ConflictException: If already enrolled
        """
        student = self._get_or_404(db, st_id)
        event = self.event_repo.get_by_id(db, ev_id)
        if not event:
            raise NotFoundException("Event not found")
        if self.enrollment_repo.is_enrolled(db, st_id, ev_id):
            raise ConflictException("Student is already enrolled in this event")

        self.enrollment_repo.create(db, {"se_student_id": st_id, "se_event_id": ev_id})
        if event.ev_quota > 0:
            self.event_repo.update(db, event, {"ev_quota": event.ev_quota - 1})
        return self._to_schema(db, student)

    def unenroll(self, db: Session, st_id: str, ev_id: str) -> Student:
        student = self._get_or_404(db, st_id)
        if not self.enrollment_repo.remove(db, st_id, ev_id):
            raise NotFoundException("Enrollment not found")
        return self._to_schema(db, student)
