"""
Notification Service - emails students when a check-in or check-out is recorded
"""
import smtplib
from concurrent.futures import Executor
from email.mime.text import MIMEText
from typing import Optional
from sqlalchemy.orm import Session

from atams.logging import get_logger
from app.core.config import settings
from app.events import AttendanceEvent, CheckInRecorded, CheckOutRecorded
from app.repositories.student_repository import StudentRepository
from app.repositories.event_repository import EventRepository
from app.utils.timestamps import isoformat_utc

logger = get_logger(__name__)


class EmailSender:
    """Plain SMTP transport"""

    def __init__(
        self,
        host: str = None,
        port: int = None,
        username: str = None,
        password: str = None,
        sender: str = None,
        use_tls: bool = None
    ) -> None:
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME if username is None else username
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.sender = sender or settings.SMTP_SENDER
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls

    def send(self, recipient: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.sender, [recipient], msg.as_string())


class NotificationService:
    """
    Event bus observer for check-in / check-out emails.

    Sending happens on the given executor so a slow or failing mail server
    never holds up scan processing. Without an executor the email is sent
    inline.
    """

    def __init__(
        self,
        sender: Optional[EmailSender] = None,
        executor: Optional[Executor] = None,
        enabled: bool = None
    ) -> None:
        self.sender = sender if sender is not None else EmailSender()
        self.executor = executor
        self.enabled = settings.NOTIFICATIONS_ENABLED if enabled is None else enabled
        self.student_repo = StudentRepository()
        self.event_repo = EventRepository()

    def on_check_in(self, db: Session, event: CheckInRecorded) -> None:
        self._notify(db, event, "Check-in recorded", "checked in to")

    def on_check_out(self, db: Session, event: CheckOutRecorded) -> None:
        self._notify(db, event, "Check-out recorded", "checked out of")

    def _notify(self, db: Session, event: AttendanceEvent, subject: str, action: str) -> None:
        if not self.enabled:
            return

        student = self.student_repo.get_by_id(db, event.student_id)
        if student is None or not student.st_email:
            return
        ev = self.event_repo.get_by_id(db, event.event_id)
        event_name = ev.ev_name if ev else event.event_id

        body = (
            f"Hi {student.st_first_name},\n\n"
            f"You {action} {event_name} ({event.session_id}) at {isoformat_utc(event.occurred_at)}.\n"
        )
        recipient = student.st_email

        if self.executor is None:
            self._send(recipient, subject, body)
        else:
            self.executor.submit(self._send, recipient, subject, body)

    def _send(self, recipient: str, subject: str, body: str) -> None:
        try:
            self.sender.send(recipient, subject, body)
            logger.info("Notification '%s' sent to %s", subject, recipient)
        except Exception:
            logger.exception("Notification '%s' to %s failed", subject, recipient)
