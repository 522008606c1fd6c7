"""
Array Session Store
Stores sessions in memory (for testing and single-process apps)
"""
from typing import Dict, Optional
from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord
from larasession.session.store import SessionStore


class ArraySessionStore(SessionStore):
    """
    In-memory session storage

    WARNING: Not suitable for multi-process deployments.
    Sessions are lost when the application restarts, and expired
    records are only removed when the SessionManager next loads them.

    Records are kept in their JSON wire form, so the stored copy never
    aliases a request's working copy.
    """

    def __init__(self):
        """Initialize array session store"""
        self._sessions: Dict[str, str] = {}

    def _encode(self, record: SessionRecord) -> str:
        try:
            return record.to_json()
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Session data is not JSON serializable: {exc}") from exc

    async def create_session(self, session_id: str, record: SessionRecord) -> None:
        """Store a new session in memory"""
        self._sessions[session_id] = self._encode(record)

    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        """Read session from memory"""
        payload = self._sessions.get(session_id)
        if payload is None:
            return None
        return SessionRecord.from_json(payload)

    async def persist_session_data(self, session_id: str, record: SessionRecord) -> None:
        """Overwrite session in memory"""
        self._sessions[session_id] = self._encode(record)

    async def delete_session(self, session_id: str) -> None:
        """Delete session from memory"""
        self._sessions.pop(session_id, None)

    async def exists(self, session_id: str) -> bool:
        """Check if session exists in memory"""
        return session_id in self._sessions

    def clear_all(self):
        """Clear all sessions (useful for testing)"""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
