"""
Student Repository - Data access layer for the student roster
"""
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.student import Student


class StudentRepository(BaseRepository[Student]):
    def __init__(self):
        super().__init__(Student)

    def get_by_id(self, db: Session, student_id: str) -> Optional[Student]:
        """Get student by ID using ORM"""
        return db.query(Student).filter(Student.st_id == student_id).first()

    def get_by_ids(self, db: Session, student_ids: List[str]) -> List[Student]:
        if not student_ids:
            return []
        return db.query(Student).filter(Student.st_id.in_(student_ids)).all()

    def get_badge_pairs(self, db: Session) -> List[Tuple[str, str]]:
        """(badge_id, student_id) for the whole roster using native SQL"""
        query = "SELECT st_badge_id, st_id FROM students"
        return [(row[0], row[1]) for row in self.execute_raw_sql(db, query)]

    def get_students_with_search(self, db: Session, search: str = "", skip: int = 0, limit: int = 100) -> List[Student]:
        """Get students with optional name/matric search using ORM"""
        query = db.query(Student)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                Student.st_first_name.ilike(pattern)
                | Student.st_last_name.ilike(pattern)
                | Student.st_matric.ilike(pattern)
            )

        return query.order_by(Student.st_first_name.asc()).offset(skip).limit(limit).all()

    def count_students(self, db: Session) -> int:
        return self.execute_raw_sql_scalar(db, "SELECT COUNT(*) FROM students")

    def check_badge_taken(self, db: Session, badge_id: str, exclude_student_id: str = None) -> bool:
        """Check if a badge is already assigned using native SQL"""
        query = "SELECT st_id FROM students WHERE st_badge_id = :badge_id LIMIT 1"
        owner = self.execute_raw_sql_scalar(db, query, {"badge_id": badge_id})
        return owner is not None and owner != exclude_student_id
