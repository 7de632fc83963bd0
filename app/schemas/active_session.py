"""
Active Session Schemas - versioned projection handed to the derivation engine
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field

from app.utils.timestamps import isoformat_utc


class ActiveSessionEntry(BaseModel):
    event_id: str
    session_id: str
    event_name: str
    session_start: datetime
    session_end: datetime

    def contains(self, timestamp: datetime) -> bool:
        """True when the session's own window bounds the timestamp"""
        return self.session_start <= timestamp <= self.session_end


class ActiveSessionProjection(BaseModel):
    """
    Snapshot of sessions that were live at `refreshed_at`.

    Keyed by event id, then session id. Readers treat it as immutable;
    the materializer produces a new one on every refresh.
    """
    version: int = 0
    refreshed_at: Optional[datetime] = None
    sessions: Dict[str, Dict[str, ActiveSessionEntry]] = Field(default_factory=dict)

    @classmethod
    def from_entries(
        cls,
        entries: List[ActiveSessionEntry],
        version: int = 0,
        refreshed_at: Optional[datetime] = None
    ) -> "ActiveSessionProjection":
        sessions: Dict[str, Dict[str, ActiveSessionEntry]] = {}
        for entry in entries:
            sessions.setdefault(entry.event_id, {})[entry.session_id] = entry
        return cls(version=version, refreshed_at=refreshed_at, sessions=sessions)

    def entries(self) -> List[ActiveSessionEntry]:
        """All entries, earliest start first, ties broken by event then session id"""
        flat = [entry for by_session in self.sessions.values() for entry in by_session.values()]
        return sorted(flat, key=lambda e: (e.session_start, e.event_id, e.session_id))

    def sessions_containing(self, timestamp: datetime) -> List[ActiveSessionEntry]:
        return [entry for entry in self.entries() if entry.contains(timestamp)]

    def is_empty(self) -> bool:
        return not self.sessions

    def to_tree(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Nested {eventId: {sessionId: {eventName, sessionDetails}}} view"""
        tree: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for entry in self.entries():
            tree.setdefault(entry.event_id, {})[entry.session_id] = {
                "eventName": entry.event_name,
                "sessionDetails": {
                    "startTime": isoformat_utc(entry.session_start),
                    "endTime": isoformat_utc(entry.session_end),
                },
            }
        return tree
