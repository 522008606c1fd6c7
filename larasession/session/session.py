"""
Session
Request-scoped handle on one session record
"""
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from larasession.session.record import MISSING, SessionRecord, utcnow


class Session:
    """
    Request-scoped session

    Handlers interact with the data through get(), set(), flash(), has()
    and delete_session(). Sessions are built by the SessionManager at
    the start of a request; it persists or deletes them at the end.

    Example:
        session = request.ctx.session
        session.set('user_id', 42)
        session.flash('notice', 'Profile saved')
        session.get('notice')   # 'Profile saved'
        session.get('notice')   # MISSING
    """

    def __init__(
        self,
        session_id: str,
        record: SessionRecord,
        access_update_interval: int = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize session

        Args:
            session_id: Session identifier
            record: Working copy of the stored record
            access_update_interval: Seconds between access-time writes
            clock: Returns the current UTC instant
        """
        if access_update_interval is None:
            from larasession.defaults import DEFAULT_ACCESS_UPDATE_INTERVAL
            access_update_interval = DEFAULT_ACCESS_UPDATE_INTERVAL

        self.session_id = session_id
        self.record = record
        self.access_update_interval = timedelta(seconds=access_update_interval)
        self._clock = clock
        self._dirty = False
        self._last_access_update: Optional[datetime] = record.metadata.accessed

    # === Data Retrieval ===

    def get(self, key: str) -> Any:
        """
        Get session value

        Attributes win over flash data. A flash value is removed once read.

        Args:
            key: Session key

        Returns:
            Session value, or MISSING if the key is not set
        """
        if key in self.record.attributes:
            return self.record.attributes[key]

        flash = self.record.metadata.flash
        if key in flash:
            self._dirty = True
            return flash.pop(key)

        return MISSING

    def has(self, key: str) -> bool:
        """
        Check if key exists in attributes or flash data (flash is left untouched)

        Args:
            key: Session key

        Returns:
            True if key exists
        """
        return key in self.record.attributes or key in self.record.metadata.flash

    def all(self) -> Dict[str, Any]:
        """Get a copy of all attributes (flash data excluded)"""
        return dict(self.record.attributes)

    # === Data Storage ===

    def set(self, key: str, value: Any) -> None:
        """
        Store value in session

        Passing None or MISSING removes the key.

        Args:
            key: Session key
            value: Value to store
        """
        if value is None or value is MISSING:
            self.record.attributes.pop(key, None)
        else:
            self.record.attributes[key] = value
        self._dirty = True

    def flash(self, key: str, value: Any) -> None:
        """
        Store a value that is removed the first time it is read

        Args:
            key: Flash key
            value: Flash value
        """
        self.record.metadata.flash[key] = value
        self._dirty = True

    def delete_session(self) -> None:
        """Mark the session for deletion at the end of the request"""
        self.record.metadata.delete = True
        self._dirty = True

    @property
    def is_deleted(self) -> bool:
        return self.record.metadata.delete

    # === Persistence Tracking ===

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_clean(self) -> None:
        """Called once the record has been written to the store"""
        self._dirty = False

    def needs_persistence(self) -> bool:
        """Check if there are unsaved changes or the access time is due"""
        return self._dirty or self._needs_access_update()

    def _needs_access_update(self) -> bool:
        if self._last_access_update is None:
            return True
        return self._clock() - self._last_access_update > self.access_update_interval

    def update_access_time(self) -> None:
        """Rewrite the access time, at most once per access_update_interval"""
        if self._needs_access_update():
            now = self._clock()
            self.record.metadata.accessed = now
            self._last_access_update = now
            self._dirty = True

    # === Dictionary Interface ===

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"<Session id={self.session_id[:6]}... data={len(self.record.attributes)} keys>"
