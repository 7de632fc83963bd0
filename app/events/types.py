"""
Attendance domain events published after a scan changes a record
"""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AttendanceEvent:
    event_id: str
    session_id: str
    student_id: str
    occurred_at: datetime

    @property
    def record_key(self):
        return (self.event_id, self.session_id, self.student_id)


@dataclass(frozen=True)
class CheckInRecorded(AttendanceEvent):
    """checkInTime was set on a record"""


@dataclass(frozen=True)
class CheckOutRecorded(AttendanceEvent):
    """checkOutTime was set on a record"""
