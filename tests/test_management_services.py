from datetime import datetime, timezone, timedelta

import pytest
from atams.exceptions import ConflictException, NotFoundException

from app.models import AttendanceRecord, EventSession, StudentEnrollment
from app.schemas import EventCreate, EventUpdate, SessionSchedule, StudentCreate, StudentUpdate
from app.services.badge_index import BadgeIndex
from app.services.event_service import EventService
from app.services.student_service import StudentService
from conftest import at


def _schedule(start, end):
    return SessionSchedule(es_start_time=start, es_end_time=end)


def test_create_event_numbers_sessions_from_zero(db):
    event = EventService().create_event(db, EventCreate(
        ev_id="math101",
        ev_name="Mathematics",
        sessions=[_schedule(at(9), at(11)), _schedule(at(13), at(15))],
    ))

    assert [s.es_id for s in event.sessions] == ["math101-session-0", "math101-session-1"]
    assert event.sessions[1].es_start_time == at(13)


def test_create_event_generates_id(db):
    event = EventService().create_event(db, EventCreate(ev_name="Biology"))

    assert event.ev_id
    assert event.sessions == []


def test_create_event_rejects_duplicate_id(db, add_event):
    add_event("ev1", [])

    with pytest.raises(ConflictException):
        EventService().create_event(db, EventCreate(ev_id="ev1", ev_name="Again"))


def test_session_times_are_normalized_to_utc():
    schedule = SessionSchedule(
        es_start_time=datetime(2025, 3, 10, 17, 0, tzinfo=timezone(timedelta(hours=8))),
        es_end_time="2025-03-10T11:00:00Z",
    )

    assert schedule.es_start_time == at(9)
    assert schedule.es_end_time == at(11)


def test_session_window_must_be_positive():
    with pytest.raises(ValueError):
        SessionSchedule(es_start_time=at(11), es_end_time=at(9))


def test_update_event_replaces_sessions_before_attendance(db, add_event):
    add_event("ev1", [(at(9), at(11))])

    event = EventService().update_event(db, "ev1", EventUpdate(
        ev_name="Renamed", sessions=[_schedule(at(10), at(12))]
    ))

    assert event.ev_name == "Renamed"
    assert [(s.es_id, s.es_start_time) for s in event.sessions] == [("ev1-session-0", at(10))]


def test_update_event_refuses_session_change_after_attendance(db, add_event):
    add_event("ev1", [(at(9), at(11))])
    db.add(AttendanceRecord(
        ar_event_id="ev1", ar_session_id="ev1-session-0", ar_student_id="alice", ar_check_in_time=at(9)
    ))
    db.commit()
    service = EventService()

    with pytest.raises(ConflictException):
        service.update_event(db, "ev1", EventUpdate(sessions=[_schedule(at(10), at(12))]))

    assert service.get_event(db, "ev1").sessions[0].es_start_time == at(9)
    assert service.update_event(db, "ev1", EventUpdate(ev_quota=3)).ev_quota == 3


def test_delete_event_removes_dependents(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"])
    db.add(AttendanceRecord(ar_event_id="ev1", ar_session_id="ev1-session-0", ar_student_id="alice"))
    db.commit()

    EventService().delete_event(db, "ev1")

    assert db.query(EventSession).count() == 0
    assert db.query(StudentEnrollment).count() == 0
    assert db.query(AttendanceRecord).count() == 0
    with pytest.raises(NotFoundException):
        EventService().get_event(db, "ev1")


def test_badge_must_be_unique(db, add_student):
    add_student("alice", "B001")
    service = StudentService(index=BadgeIndex())

    with pytest.raises(ConflictException):
        service.create_student(db, StudentCreate(st_badge_id="B001", st_first_name="Eve"))
    with pytest.raises(ConflictException):
        service.create_student(db, StudentCreate(st_id="alice", st_badge_id="B009", st_first_name="Eve"))


def test_badge_change_refreshes_index(db, add_student):
    add_student("alice", "B001")
    index = BadgeIndex()
    service = StudentService(index=index)
    assert index.lookup(db, "B001") == "alice"

    service.update_student(db, "alice", StudentUpdate(st_badge_id="B777"))

    assert index.lookup(db, "B777") == "alice"
    assert index.lookup(db, "B001") is None


def test_badge_taken_on_update(db, add_student):
    add_student("alice", "B001")
    add_student("bob", "B002")

    with pytest.raises(ConflictException):
        StudentService(index=BadgeIndex()).update_student(db, "bob", StudentUpdate(st_badge_id="B001"))


def test_enroll_consumes_quota_while_available(db, add_event, add_student):
    add_event("ev1", [], quota=1)
    add_student("alice", "B001")
    add_student("bob", "B002")
    students = StudentService(index=BadgeIndex())
    events = EventService()

    assert students.enroll(db, "alice", "ev1").enrolled_event_ids == ["ev1"]
    assert events.get_event(db, "ev1").ev_quota == 0
    students.enroll(db, "bob", "ev1")
    assert events.get_event(db, "ev1").ev_quota == 0


def test_enroll_twice_conflicts_and_unenroll(db, add_event, add_student):
    add_event("ev1", [])
    add_student("alice", "B001", events=["ev1"])
    service = StudentService(index=BadgeIndex())

    with pytest.raises(ConflictException):
        service.enroll(db, "alice", "ev1")
    assert service.unenroll(db, "alice", "ev1").enrolled_event_ids == []
    with pytest.raises(NotFoundException):
        service.unenroll(db, "alice", "ev1")


def test_enroll_unknown_event(db, add_student):
    add_student("alice", "B001")

    with pytest.raises(NotFoundException):
        StudentService(index=BadgeIndex()).enroll(db, "alice", "missing")


def test_delete_student_drops_badge(db, add_event, add_student):
    add_event("ev1", [])
    add_student("alice", "B001", events=["ev1"])
    index = BadgeIndex()
    assert index.lookup(db, "B001") == "alice"

    StudentService(index=index).delete_student(db, "alice")

    assert index.lookup(db, "B001") is None
    assert db.query(StudentEnrollment).count() == 0
