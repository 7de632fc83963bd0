"""
Student Schemas for roster management
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentBase(BaseModel):
    st_badge_id: str = Field(..., min_length=1, max_length=64)
    st_first_name: str
    st_last_name: Optional[str] = None
    st_matric: Optional[str] = None
    st_email: Optional[str] = None


class StudentCreate(StudentBase):
    st_id: Optional[str] = Field(None, max_length=64)  # Generated when omitted


class StudentUpdate(BaseModel):
    st_badge_id: Optional[str] = Field(None, min_length=1, max_length=64)
    st_first_name: Optional[str] = None
    st_last_name: Optional[str] = None
    st_matric: Optional[str] = None
    st_email: Optional[str] = None


class StudentInDB(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    st_id: str
    st_created_at: datetime
    st_updated_at: Optional[datetime] = None

    @field_validator('st_updated_at', 'st_created_at', mode='before')
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


class Student(StudentInDB):
    enrolled_event_ids: List[str] = Field(default_factory=list)
