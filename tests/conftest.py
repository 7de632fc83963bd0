import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite:///./.pytest_attendance.db")
os.environ.setdefault("ATLAS_APP_CODE", "EVENT_ATTENDANCE")
os.environ.setdefault("SCANNER_API_KEY", "test-scanner-key")
os.environ.setdefault("LOGGING_ENABLED", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from atams.db import Base
from app.models import Event, EventSession, Student, StudentEnrollment
from app.services.badge_index import BadgeIndex, badge_index
from app.services.classifier_service import ClassifierService
from app.services.derivation_service import AttendanceDerivationService
from app.services.pipeline import build_event_bus

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Monday 10 March 2025, all times naive UTC
DAY = datetime(2025, 3, 10)


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute, second=second)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_badge_index():
    badge_index.invalidate()
    yield
    badge_index.invalidate()


@pytest.fixture()
def add_event(db):
    def _add(ev_id, sessions, name=None, quota=0):
        db.add(Event(ev_id=ev_id, ev_name=name or f"Event {ev_id}", ev_quota=quota))
        for index, (start, end) in enumerate(sessions):
            db.add(EventSession(
                es_id=f"{ev_id}-session-{index}",
                es_event_id=ev_id,
                es_start_time=start,
                es_end_time=end,
            ))
        db.commit()
        return ev_id
    return _add


@pytest.fixture()
def add_student(db):
    def _add(st_id, badge_id, events=(), email=None):
        db.add(Student(st_id=st_id, st_badge_id=badge_id, st_first_name=st_id.title(), st_email=email))
        for event_id in events:
            db.add(StudentEnrollment(se_student_id=st_id, se_event_id=event_id))
        db.commit()
        return st_id
    return _add


@pytest.fixture()
def classifier():
    return ClassifierService(grace_minutes=5)


@pytest.fixture()
def derivation(classifier):
    return AttendanceDerivationService(bus=build_event_bus(classifier=classifier), index=BadgeIndex())
