"""
Event Service - Business logic for the event catalog
"""
import uuid
from typing import List
from sqlalchemy.orm import Session

from app.models.event import Event as EventModel
from app.repositories.event_repository import EventRepository
from app.repositories.event_session_repository import EventSessionRepository
from app.repositories.enrollment_repository import EnrollmentRepository
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.schemas.event import EventCreate, EventUpdate, Event, EventSession, SessionSchedule
from atams.exceptions import (
    NotFoundException,
    ConflictException,
)


def session_id_for(event_id: str, index: int) -> str:
    return f"{event_id}-session-{index}"


class EventService:
    def __init__(self) -> None:
        self.repo = EventRepository()
        self.session_repo = EventSessionRepository()
        self.enrollment_repo = EnrollmentRepository()
        self.record_repo = AttendanceRecordRepository()

    def _to_schema(self, db: Session, event: EventModel) -> Event:
        result = Event.model_validate(event)
        result.sessions = [EventSession.model_validate(s) for s in self.session_repo.get_by_event(db, event.ev_id)]
        return result

    def _session_rows(self, event_id: str, sessions: List[SessionSchedule]) -> List[dict]:
        return [
            {
                "es_id": session_id_for(event_id, index),
                "es_event_id": event_id,
                "es_day": s.es_day,
                "es_start_time": s.es_start_time,
                "es_end_time": s.es_end_time,
            }
            for index, s in enumerate(sessions)
        ]

    def list_events(self, db: Session, search: str = "", skip: int = 0, limit: int = 100) -> List[Event]:
        events = self.repo.get_events_with_search(db, search=search, skip=skip, limit=limit)
        return [self._to_schema(db, e) for e in events]

    def count_events(self, db: Session, search: str = "") -> int:
        return self.repo.count_events_with_search(db, search=search)

    def get_event(self, db: Session, ev_id: str) -> Event:
        event = self.repo.get_by_id(db, ev_id)
        if not event:
            raise NotFoundException("Event not found")
        return self._to_schema(db, event)

    def create_event(self, db: Session, payload: EventCreate) -> Event:
        ev_id = payload.ev_id or uuid.uuid4().hex[:20]
        if self.repo.check_event_exists(db, ev_id):
            raise ConflictException("Event with this ID already exists")

        event = EventModel(
            ev_id=ev_id,
            ev_name=payload.ev_name,
            ev_code=payload.ev_code,
            ev_organizer_id=payload.ev_organizer_id,
            ev_quota=payload.ev_quota,
        )
        db.add(event)
        db.flush()
        self.session_repo.replace_for_event(db, ev_id, self._session_rows(ev_id, payload.sessions))
        db.commit()
        db.refresh(event)
        return self._to_schema(db, event)

    def update_event(self, db: Session, ev_id: str, payload: EventUpdate) -> Event:
        """
        Update event fields and optionally its session list.

        Raises:
            NotFoundException: If event not found
            ConflictException: If sessions are replaced after attendance was recorded
        """
        event = self.repo.get_by_id(db, ev_id)
        if not event:
            raise NotFoundException("Event not found")

        update_data = payload.model_dump(exclude_unset=True, exclude={"sessions"})
        for field, value in update_data.items():
            setattr(event, field, value)

        if payload.sessions is not None:
            if self.record_repo.exists_for_event(db, ev_id):
                db.rollback()
                raise ConflictException("Sessions cannot be changed once attendance has been recorded")
            self.session_repo.replace_for_event(db, ev_id, self._session_rows(ev_id, payload.sessions))

        db.commit()
        db.refresh(event)
        return self._to_schema(db, event)

    def delete_event(self, db: Session, ev_id: str) -> None:
        event = self.repo.get_by_id(db, ev_id)
        if not event:
            raise NotFoundException("Event not found")

        self.record_repo.delete_by_event(db, ev_id)
        self.enrollment_repo.delete_by_event(db, ev_id)
        self.session_repo.delete_by_event(db, ev_id)
        db.delete(event)
        db.commit()
        return None
