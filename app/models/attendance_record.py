"""
Attendance Record Model - Per (event, session, student) derived attendance
"""
from sqlalchemy import Column, Integer, String, DateTime, Float
from sqlalchemy.sql import func
from atams.db import Base


class AttendanceRecord(Base):
    """Attendance Record model - Table: attendance_records"""
    __tablename__ = "attendance_records"

    ar_event_id = Column(String(64), primary_key=True)
    ar_session_id = Column(String(96), primary_key=True)
    ar_student_id = Column(String(64), primary_key=True, index=True)
    ar_check_in_time = Column(DateTime, nullable=True)
    ar_check_out_time = Column(DateTime, nullable=True)
    ar_status = Column(String(10), nullable=True)  # 'onTime', 'late' or 'absent'
    ar_actual_status = Column(String(10), nullable=True)  # 'present' or 'absent'
    ar_duration_minutes = Column(Float, nullable=True)
    ar_attendance_percentage = Column(Float, nullable=True)
    ar_version = Column(Integer, nullable=False)
    ar_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ar_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __mapper_args__ = {"version_id_col": ar_version}
