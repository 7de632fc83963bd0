"""
Attendance Schemas for derived records, rosters and reports
"""
from typing import Optional, Literal, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class AttendanceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ar_event_id: str
    ar_session_id: str
    ar_student_id: str
    ar_check_in_time: Optional[datetime] = None
    ar_check_out_time: Optional[datetime] = None
    ar_status: Optional[Literal["onTime", "late", "absent"]] = None
    ar_actual_status: Optional[Literal["present", "absent"]] = None
    ar_duration_minutes: Optional[float] = None
    ar_attendance_percentage: Optional[float] = None


class RosterEntry(BaseModel):
    st_id: str
    name: str
    st_matric: Optional[str] = None


class SessionRoster(BaseModel):
    """Students of one session grouped by check-in status"""
    ev_id: str
    es_id: str
    on_time: List[RosterEntry] = Field(default_factory=list)
    late: List[RosterEntry] = Field(default_factory=list)
    absent: List[RosterEntry] = Field(default_factory=list)


class WeeklyAnalysis(BaseModel):
    """Per-weekday aggregates, index 0 = Sunday"""
    days: List[str]
    percentage: List[float]
    present: List[int]
    absent: List[int]
    event_counts: List[int]


class SweepReport(BaseModel):
    examined: int = 0
    marked_absent: int = 0
    skipped_sessions: int = 0
    errors: int = 0


class RefreshResult(BaseModel):
    version: int
    refreshed_at: Optional[datetime] = None
    active_session_count: int
    sessions: dict


class CleanupResult(BaseModel):
    """Cleanup operation result"""
    deleted_count: int
    message: str
