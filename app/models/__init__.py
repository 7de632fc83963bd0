from .event import Event, EventSession
from .student import Student, StudentEnrollment
from .scan_log import ScanLog
from .active_session import ActiveSession, ProjectionState
from .attendance_record import AttendanceRecord
from .processed_scan import ProcessedScan

__all__ = [
    "Event",
    "EventSession",
    "Student",
    "StudentEnrollment",
    "ScanLog",
    "ActiveSession",
    "ProjectionState",
    "AttendanceRecord",
    "ProcessedScan"
]
