"""
Badge Index - badge number -> student id lookup
"""
import threading
from typing import Dict, Optional
from sqlalchemy.orm import Session

from atams.logging import get_logger
from app.repositories.student_repository import StudentRepository

logger = get_logger(__name__)


class BadgeIndex:
    """
    Hash map over the student roster.

    Built lazily on first lookup and dropped whenever the roster changes.
    A miss triggers a single rebuild before the badge is reported unknown,
    which covers students registered by another process.
    """

    def __init__(self) -> None:
        self.student_repo = StudentRepository()
        self._index: Optional[Dict[str, str]] = None
        self._lock = threading.Lock()

    def invalidate(self) -> None:
        with self._lock:
            self._index = None

    def rebuild(self, db: Session) -> Dict[str, str]:
        index = {badge: student_id for badge, student_id in self.student_repo.get_badge_pairs(db) if badge}
        with self._lock:
            self._index = index
        logger.debug("Badge index rebuilt with %d entries", len(index))
        return index

    def lookup(self, db: Session, badge_id: str) -> Optional[str]:
        with self._lock:
            index = self._index
        rebuilt = False
        if index is None:
            index = self.rebuild(db)
            rebuilt = True

        student_id = index.get(badge_id)
        if student_id is None and not rebuilt:
            student_id = self.rebuild(db).get(badge_id)
        return student_id


badge_index = BadgeIndex()
