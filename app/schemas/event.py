"""
Event Schemas for request/response validation
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.utils.timestamps import to_utc_naive


class SessionSchedule(BaseModel):
    """Scheduled time window of one session"""
    es_day: Optional[str] = None
    es_start_time: datetime
    es_end_time: datetime

    @field_validator('es_start_time', 'es_end_time', mode='after')
    @classmethod
    def normalize_utc(cls, v):
        return to_utc_naive(v)

    @model_validator(mode='after')
    def check_window(self):
        if self.es_end_time <= self.es_start_time:
            raise ValueError("es_end_time must be after es_start_time")
        return self


class EventBase(BaseModel):
    ev_name: str
    ev_code: Optional[str] = None
    ev_organizer_id: Optional[str] = None
    ev_quota: int = Field(0, ge=0)


class EventCreate(EventBase):
    ev_id: Optional[str] = Field(None, max_length=64)  # Generated when omitted
    sessions: List[SessionSchedule] = Field(default_factory=list)


class EventUpdate(BaseModel):
    ev_name: Optional[str] = None
    ev_code: Optional[str] = None
    ev_organizer_id: Optional[str] = None
    ev_quota: Optional[int] = Field(None, ge=0)
    sessions: Optional[List[SessionSchedule]] = None


class EventSession(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    es_id: str
    es_event_id: str
    es_day: Optional[str] = None
    es_start_time: Optional[datetime] = None
    es_end_time: Optional[datetime] = None


class EventInDB(EventBase):
    model_config = ConfigDict(from_attributes=True)

    ev_id: str
    ev_created_at: datetime
    ev_updated_at: Optional[datetime] = None

    @field_validator('ev_updated_at', 'ev_created_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        """
        Fix datetime timezone format from PostgreSQL
        PostgreSQL returns: '2025-10-01 09:17:39.587802+00'
        Pydantic expects: '2025-10-01 09:17:39.587802+00:00'
        """
        if v == '' or v is None:
            return None

        if isinstance(v, str):
            import re
            pattern = r'([+-]\d{2})$'
            match = re.search(pattern, v)
            if match:
                v = v + ':00'

        return v


class Event(EventInDB):
    sessions: List[EventSession] = Field(default_factory=list)
