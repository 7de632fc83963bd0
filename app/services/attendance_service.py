"""
Attendance Service - Read paths over derived attendance records
"""
from typing import Dict
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session

from app.core.config import settings
from app.repositories.attendance_record_repository import AttendanceRecordRepository
from app.repositories.event_session_repository import EventSessionRepository
from app.repositories.student_repository import StudentRepository
from app.schemas.attendance import AttendanceRecord, RosterEntry, SessionRoster, WeeklyAnalysis
from atams.exceptions import NotFoundException

DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class AttendanceService:
    def __init__(self) -> None:
        self.record_repo = AttendanceRecordRepository()
        self.session_repo = EventSessionRepository()
        self.student_repo = StudentRepository()

    def get_record(self, db: Session, ev_id: str, es_id: str, st_id: str) -> AttendanceRecord:
        record = self.record_repo.get_record(db, ev_id, es_id, st_id)
        if not record:
            raise NotFoundException("Attendance record not found")
        return AttendanceRecord.model_validate(record)

    def get_session_roster(self, db: Session, ev_id: str, es_id: str) -> SessionRoster:
        """Students of a session grouped into onTime, late and absent"""
        if not self.session_repo.get_session(db, ev_id, es_id):
            raise NotFoundException("Session not found")

        records = self.record_repo.get_by_session(db, ev_id, es_id)
        students = {s.st_id: s for s in self.student_repo.get_by_ids(db, [r.ar_student_id for r in records])}

        roster = SessionRoster(ev_id=ev_id, es_id=es_id)
        buckets = {"onTime": roster.on_time, "late": roster.late, "absent": roster.absent}
        for record in records:
            bucket = buckets.get(record.ar_status)
            student = students.get(record.ar_student_id)
            if bucket is None or student is None:
                continue
            name = " ".join(part for part in (student.st_first_name, student.st_last_name) if part)
            bucket.append(RosterEntry(st_id=student.st_id, name=name, st_matric=student.st_matric))
        return roster

    def get_weekly_analysis(self, db: Session) -> WeeklyAnalysis:
        """
        Aggregate attendance per weekday.

        Each event is placed on the weekday (in the configured timezone) of
        its earliest recorded check-in. Per weekday: mean of the per-event
        average percentages, present and absent counts, and event count.
        Events without any check-in are left out.
        """
        tz = ZoneInfo(settings.TIMEZONE)
        by_event: Dict[str, list] = {}
        for record in self.record_repo.get_all(db):
            by_event.setdefault(record.ar_event_id, []).append(record)

        percentage = [0.0] * 7
        present = [0] * 7
        absent = [0] * 7
        event_counts = [0] * 7

        for records in by_event.values():
            check_ins = [r.ar_check_in_time for r in records if r.ar_check_in_time is not None]
            if not check_ins:
                continue
            first = min(check_ins).replace(tzinfo=ZoneInfo("UTC")).astimezone(tz)
            day = (first.weekday() + 1) % 7

            total = sum(r.ar_attendance_percentage or 0 for r in records)
            present_count = sum(1 for r in records if r.ar_actual_status == "present")

            percentage[day] += total / len(records)
            present[day] += present_count
            absent[day] += len(records) - present_count
            event_counts[day] += 1

        percentage = [
            round(total / event_counts[i], 2) if event_counts[i] > 0 else 0.0
            for i, total in enumerate(percentage)
        ]
        return WeeklyAnalysis(
            days=DAYS_OF_WEEK,
            percentage=percentage,
            present=present,
            absent=absent,
            event_counts=event_counts
        )
