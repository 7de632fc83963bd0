from .active_session_service import ActiveSessionService
from .derivation_service import AttendanceDerivationService
from .classifier_service import ClassifierService
from .absence_sweep_service import AbsenceSweepService
from .notification_service import NotificationService, EmailSender
from .event_service import EventService
from .student_service import StudentService
from .attendance_service import AttendanceService
from .scan_service import ScanService
from .cleanup_service import CleanupService

__all__ = [
    "ActiveSessionService",
    "AttendanceDerivationService",
    "ClassifierService",
    "AbsenceSweepService",
    "NotificationService",
    "EmailSender",
    "EventService",
    "StudentService",
    "AttendanceService",
    "ScanService",
    "CleanupService"
]
