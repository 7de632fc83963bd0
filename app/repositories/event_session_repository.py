"""
Event Session Repository - Data access layer for scheduled sessions
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.event import EventSession


class EventSessionRepository(BaseRepository[EventSession]):
    def __init__(self):
        super().__init__(EventSession)

    def get_session(self, db: Session, event_id: str, session_id: str) -> Optional[EventSession]:
        """Get one session of an event using ORM"""
        return db.query(EventSession).filter(
            EventSession.es_event_id == event_id,
            EventSession.es_id == session_id
        ).first()

    def get_by_event(self, db: Session, event_id: str) -> List[EventSession]:
        """Sessions of one event ordered by ID"""
        return db.query(EventSession).filter(
            EventSession.es_event_id == event_id
        ).order_by(EventSession.es_id.asc()).all()

    def get_grouped_by_event(self, db: Session, event_ids: List[str] = None) -> Dict[str, List[EventSession]]:
        """Sessions keyed by event ID, optionally restricted to some events"""
        query = db.query(EventSession)
        if event_ids is not None:
            if not event_ids:
                return {}
            query = query.filter(EventSession.es_event_id.in_(event_ids))

        grouped: Dict[str, List[EventSession]] = {}
        for session in query.order_by(EventSession.es_event_id.asc(), EventSession.es_id.asc()).all():
            grouped.setdefault(session.es_event_id, []).append(session)
        return grouped

    def replace_for_event(self, db: Session, event_id: str, sessions: List[dict]) -> List[EventSession]:
        """Swap the session list of an event; caller commits"""
        self.delete_by_event(db, event_id)
        created = [EventSession(**data) for data in sessions]
        db.add_all(created)
        return created

    def delete_by_event(self, db: Session, event_id: str) -> int:
        """Delete all sessions of an event; caller commits"""
        return db.query(EventSession).filter(
            EventSession.es_event_id == event_id
        ).delete(synchronize_session=False)
