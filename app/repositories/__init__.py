from .event_repository import EventRepository
from .event_session_repository import EventSessionRepository
from .student_repository import StudentRepository
from .enrollment_repository import EnrollmentRepository
from .scan_log_repository import ScanLogRepository
from .active_session_repository import ActiveSessionRepository
from .attendance_record_repository import AttendanceRecordRepository
from .processed_scan_repository import ProcessedScanRepository

__all__ = [
    "EventRepository",
    "EventSessionRepository",
    "StudentRepository",
    "EnrollmentRepository",
    "ScanLogRepository",
    "ActiveSessionRepository",
    "AttendanceRecordRepository",
    "ProcessedScanRepository"
]
