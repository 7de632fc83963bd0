from .event import Event, EventCreate, EventUpdate, EventSession, SessionSchedule
from .student import Student, StudentCreate, StudentUpdate
from .scan import ScanRequest, ScanResult, ScanLog, ReplayRequest, ReplayResult
from .active_session import ActiveSessionEntry, ActiveSessionProjection
from .attendance import (
    AttendanceRecord,
    RosterEntry,
    SessionRoster,
    WeeklyAnalysis,
    SweepReport,
    RefreshResult,
    CleanupResult
)
from .common import DataResponse, PaginationResponse

__all__ = [
    # Event schemas
    "Event",
    "EventCreate",
    "EventUpdate",
    "EventSession",
    "SessionSchedule",
    # Student schemas
    "Student",
    "StudentCreate",
    "StudentUpdate",
    # Scan schemas
    "ScanRequest",
    "ScanResult",
    "ScanLog",
    "ReplayRequest",
    "ReplayResult",
    # Active session projection
    "ActiveSessionEntry",
    "ActiveSessionProjection",
    # Attendance schemas
    "AttendanceRecord",
    "RosterEntry",
    "SessionRoster",
    "WeeklyAnalysis",
    "SweepReport",
    "RefreshResult",
    "CleanupResult",
    # Common schemas
    "DataResponse",
    "PaginationResponse"
]
