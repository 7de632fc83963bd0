from .types import AttendanceEvent, CheckInRecorded, CheckOutRecorded
from .bus import EventBus

__all__ = [
    "AttendanceEvent",
    "CheckInRecorded",
    "CheckOutRecorded",
    "EventBus"
]
