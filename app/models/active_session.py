"""
Active Session Models - Materialized projection of sessions live "now"
"""
from sqlalchemy import Column, Integer, String, DateTime
from atams.db import Base


class ActiveSession(Base):
    """Active Session model - Table: active_sessions (replaced wholesale on every refresh)"""
    __tablename__ = "active_sessions"

    acs_event_id = Column(String(64), primary_key=True)
    acs_session_id = Column(String(96), primary_key=True)
    acs_event_name = Column(String(255), nullable=False)
    acs_session_start = Column(DateTime, nullable=False)
    acs_session_end = Column(DateTime, nullable=False)
    acs_version = Column(Integer, nullable=False)


class ProjectionState(Base):
    """Projection State model - Table: projection_state (one row per projection)"""
    __tablename__ = "projection_state"

    ps_name = Column(String(50), primary_key=True)
    ps_version = Column(Integer, nullable=False, default=0)
    ps_refreshed_at = Column(DateTime, nullable=True)  # Naive UTC "now" of the last refresh
