"""
In-process synchronous event bus

Handlers receive (db, event). They run in subscription order; a handler
that raises is logged and the remaining handlers still run.
"""
from typing import Callable, Dict, List, Type
from sqlalchemy.orm import Session

from atams.logging import get_logger
from app.events.types import AttendanceEvent

logger = get_logger(__name__)

Handler = Callable[[Session, AttendanceEvent], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[Type[AttendanceEvent], List[Handler]] = {}

    def subscribe(self, event_type: Type[AttendanceEvent], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: Type[AttendanceEvent]) -> List[Handler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, db: Session, event: AttendanceEvent) -> int:
        """
        Deliver an event to every subscriber of its type.

        Returns:
            int: Number of handlers that completed without raising
        """
        delivered = 0
        for handler in self.handlers_for(type(event)):
            try:
                handler(db, event)
                delivered += 1
            except Exception:
                logger.exception(
                    "Handler %s failed for %s %s",
                    getattr(handler, "__qualname__", repr(handler)),
                    type(event).__name__,
                    event.record_key,
                )
                db.rollback()
        return delivered
