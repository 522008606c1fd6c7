"""
Session Store Interfaces
Contracts for session storage drivers

There are two kinds of store:

- SessionStore keeps records server-side, keyed by session id.
- ContextSessionStore carries the whole record in the client's cookie,
  so it reads and writes through the request context instead of an id.

They are separate capability sets, not a hierarchy. The SessionManager
picks the calling convention once, when it is constructed.
"""
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING
from larasession.session.record import SessionRecord

if TYPE_CHECKING:
    from larasession.session.context import RequestContext


class SessionStore(ABC):
    """
    Id-keyed session store interface

    All methods raise StoreError when the backend fails.
    """

    @abstractmethod
    async def create_session(self, session_id: str, record: SessionRecord) -> None:
        """
        Store a new session record

        If record.metadata.expire is set, the backend should expire the
        entry at that instant so abandoned sessions are reclaimed.

        Args:
            session_id: Session identifier
            record: Initial session record
        """
        pass

    @abstractmethod
    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        """
        Read a session record

        Args:
            session_id: Session identifier

        Returns:
            The stored record, or None if there is none (not an error)
        """
        pass

    @abstractmethod
    async def persist_session_data(self, session_id: str, record: SessionRecord) -> None:
        """
        Overwrite a session record (idempotent)

        Any backend expiry must be refreshed to match record.metadata.expire.

        Args:
            session_id: Session identifier
            record: Full session record
        """
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """
        Delete a session record (idempotent, unknown ids are ignored)

        Args:
            session_id: Session identifier
        """
        pass


class ContextSessionStore(ABC):
    """
    Cookie-carried session store interface

    The record travels inside a cookie, so every operation works on the
    request context. All methods raise StoreError when encoding fails.
    """

    @abstractmethod
    async def create_session(self, ctx: 'RequestContext', record: SessionRecord) -> None:
        """Write a new record into the outgoing cookie"""
        pass

    @abstractmethod
    async def get_session_by_context(self, ctx: 'RequestContext') -> Optional[SessionRecord]:
        """
        Decode the record carried by the incoming cookie

        Returns:
            The record, or None if the cookie is absent or unreadable
        """
        pass

    @abstractmethod
    async def persist_session_data(self, ctx: 'RequestContext', record: SessionRecord) -> None:
        """Rewrite the outgoing cookie with the full record"""
        pass

    @abstractmethod
    async def delete_session(self, ctx: 'RequestContext') -> None:
        """Clear the cookie carrying the record"""
        pass
