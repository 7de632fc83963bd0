"""
Event Repository - Data access layer for the event catalog
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.event import Event


class EventRepository(BaseRepository[Event]):
    def __init__(self):
        super().__init__(Event)

    def get_by_id(self, db: Session, event_id: str) -> Optional[Event]:
        """Get event by ID using ORM"""
        return db.query(Event).filter(Event.ev_id == event_id).first()

    def get_all(self, db: Session) -> List[Event]:
        """Load the full catalog ordered by ID"""
        return db.query(Event).order_by(Event.ev_id.asc()).all()

    def get_events_with_search(self, db: Session, search: str = "", skip: int = 0, limit: int = 100) -> List[Event]:
        """Get events with optional name/code search using ORM"""
        query = db.query(Event)

        if search:
            pattern = f"%{search}%"
            query = query.filter(Event.ev_name.ilike(pattern) | Event.ev_code.ilike(pattern))

        return query.order_by(Event.ev_name.asc()).offset(skip).limit(limit).all()

    def count_events_with_search(self, db: Session, search: str = "") -> int:
        """Count events with optional search filter using native SQL"""
        if search:
            query = """
                SELECT COUNT(*)
                FROM events
                WHERE LOWER(ev_name) LIKE LOWER(:search) OR LOWER(ev_code) LIKE LOWER(:search)
            """
            return self.execute_raw_sql_scalar(db, query, {"search": f"%{search}%"})
        return self.execute_raw_sql_scalar(db, "SELECT COUNT(*) FROM events")

    def check_event_exists(self, db: Session, event_id: str) -> bool:
        """Check if event exists using native SQL"""
        query = "SELECT 1 FROM events WHERE ev_id = :event_id LIMIT 1"
        result = self.execute_raw_sql_scalar(db, query, {"event_id": event_id})
        return result is not None
