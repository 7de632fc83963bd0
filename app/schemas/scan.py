"""
Scan Schemas for ingest, replay and derivation results
"""
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

from app.utils.timestamps import to_utc_naive


ScanOutcome = Literal[
    "checked_in",
    "checked_out",
    "closed",
    "out_of_order",
    "duplicate",
    "conflict",
    "rejected",
    "unknown_badge",
    "no_active_session",
    "not_enrolled",
    "error",
]


class ScanRequest(BaseModel):
    """Raw scan posted by the scanner bridge: {uid, timestamp}"""
    uid: Optional[str] = None  # Badge / card number
    timestamp: Optional[datetime] = None

    @field_validator('timestamp', mode='after')
    @classmethod
    def normalize_utc(cls, v):
        return to_utc_naive(v)


class ScanLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sl_id: int
    sl_badge_id: Optional[str] = None
    sl_timestamp: Optional[datetime] = None
    sl_received_at: datetime

    @field_validator('sl_received_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        """Fix datetime timezone format from PostgreSQL"""
        if v == '' or v is None:
            return None

        if isinstance(v, str):
            import re
            pattern = r'([+-]\d{2})$'
            match = re.search(pattern, v)
            if match:
                v = v + ':00'

        return v


class ScanResult(BaseModel):
    """What the derivation engine did with one scan"""
    outcome: ScanOutcome
    badge_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    student_id: Optional[str] = None
    event_id: Optional[str] = None
    session_id: Optional[str] = None
    message: str = ""


class ReplayRequest(BaseModel):
    """Re-run derivation over stored scans (redelivery)"""
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: int = 1000

    @field_validator('date_from', 'date_to', mode='after')
    @classmethod
    def normalize_utc(cls, v):
        return to_utc_naive(v)


class ReplayResult(BaseModel):
    processed: int
    recorded: int
    outcomes: dict
