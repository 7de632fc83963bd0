"""
Event Models - Event catalog and its scheduled sessions
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class Event(Base):
    """Event model - Table: events"""
    __tablename__ = "events"

    ev_id = Column(String(64), primary_key=True, index=True)
    ev_name = Column(String(255), nullable=False)
    ev_code = Column(String(50), nullable=True)
    ev_organizer_id = Column(String(64), nullable=True)
    ev_quota = Column(Integer, nullable=False, default=0)  # Remaining seats
    ev_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ev_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


class EventSession(Base):
    """Event Session model - Table: event_sessions"""
    __tablename__ = "event_sessions"

    es_id = Column(String(96), primary_key=True, index=True)  # '{ev_id}-session-{index}'
    es_event_id = Column(String(64), ForeignKey("events.ev_id", ondelete="CASCADE"), nullable=False, index=True)
    es_day = Column(String(10), nullable=True)  # Weekday label, informational only
    es_start_time = Column(DateTime, nullable=True)  # Naive UTC
    es_end_time = Column(DateTime, nullable=True)  # Naive UTC
    es_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    es_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
