from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from app.models import AttendanceRecord, EventSession
from app.services.absence_sweep_service import AbsenceSweepService
from app.services.active_session_service import ActiveSessionService
from conftest import at


def _record(db, event_id, student_id, session_index=0):
    db.expire_all()
    return db.get(AttendanceRecord, (event_id, f"{event_id}-session-{session_index}", student_id))


def _sweeper():
    return AbsenceSweepService(timezone_name="UTC")


def test_valid_check_in_is_never_clobbered(db, add_event, add_student, derivation):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"])
    derivation.process_scan(db, "B001", at(9, 2), ActiveSessionService().as_of(db, at(9, 2)))
    before = _record(db, "ev1", "alice")
    snapshot = (before.ar_check_in_time, before.ar_status, before.ar_version)

    report = _sweeper().sweep(db, now=at(12))

    after = _record(db, "ev1", "alice")
    assert (after.ar_check_in_time, after.ar_status, after.ar_version) == snapshot
    assert after.ar_actual_status is None
    assert report.marked_absent == 0
    assert report.examined == 1


def test_gap_fill_for_missing_record(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("bob", "B002", events=["ev1"])

    report = _sweeper().sweep(db, now=at(12))

    record = _record(db, "ev1", "bob")
    assert record.ar_status == "absent"
    assert record.ar_actual_status == "absent"
    assert record.ar_attendance_percentage == 0
    assert record.ar_check_in_time is None
    assert record.ar_check_out_time is None
    assert report.marked_absent == 1


def test_check_in_outside_window_is_replaced(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("bob", "B002", events=["ev1"])
    db.add(AttendanceRecord(
        ar_event_id="ev1", ar_session_id="ev1-session-0", ar_student_id="bob",
        ar_check_in_time=at(8, 30), ar_status="onTime"
    ))
    db.commit()

    _sweeper().sweep(db, now=at(12))

    record = _record(db, "ev1", "bob")
    assert record.ar_check_in_time is None
    assert record.ar_status == "absent"
    assert record.ar_actual_status == "absent"


def test_sweep_twice_fills_once(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("bob", "B002", events=["ev1"])
    sweeper = _sweeper()

    assert sweeper.sweep(db, now=at(12)).marked_absent == 1
    version = _record(db, "ev1", "bob").ar_version
    assert sweeper.sweep(db, now=at(12)).marked_absent == 0
    assert _record(db, "ev1", "bob").ar_version == version


def test_only_finished_sessions_of_today_and_yesterday(db, add_event, add_student):
    add_event("ev1", [
        (at(9), at(11)),
        (at(13), at(15)),
        (at(9) - timedelta(days=1), at(11) - timedelta(days=1)),
        (at(9) - timedelta(days=2), at(11) - timedelta(days=2)),
    ])
    add_student("bob", "B002", events=["ev1"])

    report = _sweeper().sweep(db, now=at(12))

    assert report.marked_absent == 2
    assert _record(db, "ev1", "bob", 0) is not None
    assert _record(db, "ev1", "bob", 1) is None
    assert _record(db, "ev1", "bob", 2) is not None
    assert _record(db, "ev1", "bob", 3) is None


def test_session_running_past_nightly_sweep_is_filled_next_day(db, add_event, add_student):
    add_event("ev1", [(at(23), at(23, 45))])
    add_student("bob", "B002", events=["ev1"])
    sweeper = _sweeper()

    assert sweeper.sweep(db, now=at(23, 30)).marked_absent == 0
    assert _record(db, "ev1", "bob") is None

    assert sweeper.sweep(db, now=at(23, 30) + timedelta(days=1)).marked_absent == 1
    record = _record(db, "ev1", "bob")
    assert record is not None
    assert record.ar_actual_status == "absent"
    assert record.ar_attendance_percentage == 0


def test_today_follows_configured_timezone(db, add_event, add_student):
    # 20:00 UTC on the 8th is already the 9th, yesterday, in Kuala Lumpur
    add_event("ev1", [(at(20) - timedelta(days=2), at(21) - timedelta(days=2))])
    add_student("bob", "B002", events=["ev1"])

    assert AbsenceSweepService(timezone_name="UTC").sweep(db, now=at(12)).marked_absent == 0
    assert AbsenceSweepService(timezone_name="Asia/Kuala_Lumpur").sweep(db, now=at(12)).marked_absent == 1


def test_only_enrolled_students_are_swept(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("bob", "B002")

    assert _sweeper().sweep(db, now=at(12)).examined == 0
    assert db.query(AttendanceRecord).count() == 0


def test_sessions_without_times_are_skipped(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    db.add(EventSession(es_id="ev1-session-1", es_event_id="ev1", es_start_time=None, es_end_time=None))
    db.commit()
    add_student("bob", "B002", events=["ev1"])

    report = _sweeper().sweep(db, now=at(12))

    assert report.skipped_sessions == 1
    assert report.marked_absent == 1


def test_failure_on_one_student_does_not_stop_sweep(db, add_event, add_student, monkeypatch):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"])
    add_student("bob", "B002", events=["ev1"])
    sweeper = _sweeper()
    original = sweeper._fill_if_absent

    def flaky(db, event_id, session, student_id):
        if student_id == "alice":
            raise SQLAlchemyError("deadlock")
        return original(db, event_id, session, student_id)

    monkeypatch.setattr(sweeper, "_fill_if_absent", flaky)

    report = sweeper.sweep(db, now=at(12))

    assert report.errors == 1
    assert report.marked_absent == 1
    assert _record(db, "ev1", "bob").ar_status == "absent"
