"""
Active Session Repository - Persistence of the materialized active-session projection
"""
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.active_session import ActiveSession, ProjectionState

PROJECTION_NAME = "active_sessions"


class ActiveSessionRepository(BaseRepository[ActiveSession]):
    def __init__(self):
        super().__init__(ActiveSession)

    def get_all(self, db: Session) -> List[ActiveSession]:
        return db.query(ActiveSession).order_by(
            ActiveSession.acs_session_start.asc(),
            ActiveSession.acs_event_id.asc(),
            ActiveSession.acs_session_id.asc()
        ).all()

    def get_state(self, db: Session) -> Optional[ProjectionState]:
        return db.query(ProjectionState).filter(ProjectionState.ps_name == PROJECTION_NAME).first()

    def replace_all(self, db: Session, rows: List[dict], version: int, refreshed_at: datetime) -> None:
        """
        Swap the whole projection and stamp its version in one transaction.
        Readers see either the previous projection or the new one.
        """
        db.query(ActiveSession).delete(synchronize_session=False)
        db.add_all([ActiveSession(acs_version=version, **row) for row in rows])

        state = self.get_state(db)
        if state is None:
            state = ProjectionState(ps_name=PROJECTION_NAME)
            db.add(state)
        state.ps_version = version
        state.ps_refreshed_at = refreshed_at

        db.commit()

    def touch(self, db: Session, refreshed_at: datetime) -> None:
        """Record a refresh that left the projection unchanged"""
        state = self.get_state(db)
        if state is None:
            state = ProjectionState(ps_name=PROJECTION_NAME, ps_version=0)
            db.add(state)
        state.ps_refreshed_at = refreshed_at
        db.commit()
