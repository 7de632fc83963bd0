"""
Student Models - Roster and event enrollments
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class Student(Base):
    """Student model - Table: students"""
    __tablename__ = "students"

    st_id = Column(String(64), primary_key=True, index=True)
    st_badge_id = Column(String(64), nullable=False, unique=True, index=True)  # Card number read by the scanner
    st_first_name = Column(String(100), nullable=False)
    st_last_name = Column(String(100), nullable=True)
    st_matric = Column(String(50), nullable=True)
    st_email = Column(String(255), nullable=True)
    st_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    st_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


class StudentEnrollment(Base):
    """Student Enrollment model - Table: student_enrollments"""
    __tablename__ = "student_enrollments"

    se_student_id = Column(String(64), ForeignKey("students.st_id", ondelete="CASCADE"), primary_key=True)
    se_event_id = Column(String(64), ForeignKey("events.ev_id", ondelete="CASCADE"), primary_key=True, index=True)
    se_enrolled_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
