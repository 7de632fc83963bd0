from app.events import EventBus, CheckInRecorded, CheckOutRecorded
from app.services.active_session_service import ActiveSessionService
from app.services.badge_index import BadgeIndex
from app.services.derivation_service import AttendanceDerivationService
from app.services.notification_service import NotificationService
from app.services.pipeline import build_event_bus
from conftest import at


class RecordingSender:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, recipient, subject, body):
        if self.fail:
            raise OSError("smtp down")
        self.sent.append((recipient, subject, body))


def test_handlers_run_in_subscription_order(db):
    bus = EventBus()
    calls = []
    bus.subscribe(CheckInRecorded, lambda db, e: calls.append("first"))
    bus.subscribe(CheckInRecorded, lambda db, e: calls.append("second"))
    bus.subscribe(CheckOutRecorded, lambda db, e: calls.append("other"))

    delivered = bus.publish(db, CheckInRecorded("ev1", "ev1-session-0", "alice", at(9)))

    assert delivered == 2
    assert calls == ["first", "second"]


def test_failing_handler_does_not_stop_the_others(db):
    bus = EventBus()
    calls = []

    def broken(db, event):
        raise RuntimeError("boom")

    bus.subscribe(CheckOutRecorded, broken)
    bus.subscribe(CheckOutRecorded, lambda db, e: calls.append(e.student_id))

    delivered = bus.publish(db, CheckOutRecorded("ev1", "ev1-session-0", "alice", at(10)))

    assert delivered == 1
    assert calls == ["alice"]


def test_derivation_publishes_after_commit(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"])
    bus = EventBus()
    seen = []
    bus.subscribe(CheckInRecorded, lambda db, e: seen.append(("in", e.record_key, e.occurred_at)))
    bus.subscribe(CheckOutRecorded, lambda db, e: seen.append(("out", e.record_key, e.occurred_at)))
    derivation = AttendanceDerivationService(bus=bus, index=BadgeIndex())
    projection = ActiveSessionService().as_of(db, at(9))

    derivation.process_scan(db, "B001", at(9, 1), projection)
    derivation.process_scan(db, "B001", at(10, 59), projection)
    derivation.process_scan(db, "B001", at(10, 59), projection)

    key = ("ev1", "ev1-session-0", "alice")
    assert seen == [("in", key, at(9, 1)), ("out", key, at(10, 59))]


def test_notification_sent_on_check_in_and_out(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))], name="Chemistry")
    add_student("alice", "B001", events=["ev1"], email="alice@example.com")
    sender = RecordingSender()
    notifier = NotificationService(sender=sender, enabled=True)
    derivation = AttendanceDerivationService(bus=build_event_bus(notifier=notifier), index=BadgeIndex())
    projection = ActiveSessionService().as_of(db, at(9))

    derivation.process_scan(db, "B001", at(9, 1), projection)
    derivation.process_scan(db, "B001", at(10, 59), projection)

    assert [s[1] for s in sender.sent] == ["Check-in recorded", "Check-out recorded"]
    assert all(s[0] == "alice@example.com" for s in sender.sent)
    assert "Chemistry" in sender.sent[0][2]


def test_notification_skipped_when_disabled_or_no_email(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"], email="alice@example.com")
    add_student("bob", "B002", events=["ev1"])
    sender = RecordingSender()
    event = CheckInRecorded("ev1", "ev1-session-0", "alice", at(9))

    NotificationService(sender=sender, enabled=False).on_check_in(db, event)
    NotificationService(sender=sender, enabled=True).on_check_in(
        db, CheckInRecorded("ev1", "ev1-session-0", "bob", at(9))
    )

    assert sender.sent == []


def test_notification_failure_never_reaches_pipeline(db, add_event, add_student, classifier):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", events=["ev1"], email="alice@example.com")
    notifier = NotificationService(sender=RecordingSender(fail=True), enabled=True)
    derivation = AttendanceDerivationService(
        bus=build_event_bus(classifier=classifier, notifier=notifier), index=BadgeIndex()
    )

    result = derivation.process_scan(db, "B001", at(9, 1), ActiveSessionService().as_of(db, at(9)))

    assert result.outcome == "checked_in"


def test_notification_uses_executor(db, add_event, add_student):
    add_event("ev1", [(at(9), at(11))])
    add_student("alice", "B001", email="alice@example.com")

    class InlineExecutor:
        def __init__(self):
            self.submitted = 0

        def submit(self, fn, *args):
            self.submitted += 1
            fn(*args)

    executor = InlineExecutor()
    sender = RecordingSender()
    NotificationService(sender=sender, executor=executor, enabled=True).on_check_out(
        db, CheckOutRecorded("ev1", "ev1-session-0", "alice", at(10))
    )

    assert executor.submitted == 1
    assert len(sender.sent) == 1
