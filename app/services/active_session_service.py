"""
Active Session Service - materializes the set of sessions live "now"
"""
from typing import Optional, List
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from atams.logging import get_logger
from app.repositories.event_repository import EventRepository
from app.repositories.event_session_repository import EventSessionRepository
from app.repositories.active_session_repository import ActiveSessionRepository
from app.schemas.active_session import ActiveSessionEntry, ActiveSessionProjection
from app.utils.timestamps import utcnow

logger = get_logger(__name__)


class ActiveSessionService:
    def __init__(self) -> None:
        self.event_repo = EventRepository()
        self.session_repo = EventSessionRepository()
        self.active_repo = ActiveSessionRepository()

    def collect_live_sessions(self, db: Session, now: datetime) -> List[ActiveSessionEntry]:
        """Scan the whole catalog for sessions with start <= now <= end"""
        events = {event.ev_id: event for event in self.event_repo.get_all(db)}
        live: List[ActiveSessionEntry] = []

        for event_id, sessions in self.session_repo.get_grouped_by_event(db).items():
            event = events.get(event_id)
            if event is None:
                continue
            for session in sessions:
                if session.es_start_time is None or session.es_end_time is None:
                    logger.warning("Session %s of event %s has no start/end time, skipped", session.es_id, event_id)
                    continue
                if session.es_start_time <= now <= session.es_end_time:
                    live.append(ActiveSessionEntry(
                        event_id=event_id,
                        session_id=session.es_id,
                        event_name=event.ev_name,
                        session_start=session.es_start_time,
                        session_end=session.es_end_time
                    ))
        return live

    def refresh(self, db: Session, now: Optional[datetime] = None) -> Optional[ActiveSessionProjection]:
        """
        Recompute and persist the active-session projection

        The previous projection is replaced wholesale. The version only moves
        when the set of live sessions changed, so refreshing twice with the
        same catalog and clock yields the same projection.

        Args:
            db: Database session
            now: Reference instant (naive UTC); defaults to the current time

        Returns:
            ActiveSessionProjection: The new projection, or None when the store failed
        """
        if now is None:
            now = utcnow()

        try:
            live = self.collect_live_sessions(db, now)
            previous = self.current(db)
            candidate = ActiveSessionProjection.from_entries(live)

            if previous.refreshed_at is not None and candidate.sessions == previous.sessions:
                self.active_repo.touch(db, now)
                version = previous.version
            else:
                version = previous.version + 1
                rows = [
                    {
                        "acs_event_id": entry.event_id,
                        "acs_session_id": entry.session_id,
                        "acs_event_name": entry.event_name,
                        "acs_session_start": entry.session_start,
                        "acs_session_end": entry.session_end,
                    }
                    for entry in live
                ]
                self.active_repo.replace_all(db, rows, version, now)
        except SQLAlchemyError:
            logger.exception("Active session refresh failed; keeping previous projection")
            db.rollback()
            return None

        logger.info("Active sessions refreshed: %d live (version %d)", len(live), version)
        return ActiveSessionProjection.from_entries(live, version=version, refreshed_at=now)

    def current(self, db: Session) -> ActiveSessionProjection:
        """Load the last persisted projection"""
        state = self.active_repo.get_state(db)
        entries = [
            ActiveSessionEntry(
                event_id=row.acs_event_id,
                session_id=row.acs_session_id,
                event_name=row.acs_event_name,
                session_start=row.acs_session_start,
                session_end=row.acs_session_end
            )
            for row in self.active_repo.get_all(db)
        ]
        return ActiveSessionProjection.from_entries(
            entries,
            version=state.ps_version if state else 0,
            refreshed_at=state.ps_refreshed_at if state else None
        )

    def as_of(self, db: Session, at: datetime) -> ActiveSessionProjection:
        """Unpersisted projection of the sessions live at a past instant"""
        return ActiveSessionProjection.from_entries(self.collect_live_sessions(db, at), refreshed_at=at)
