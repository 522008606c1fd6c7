"""
Session Manager
Runs the session lifecycle around each request: load or create,
validate, sliding expiration, access-time throttling, key rotation,
and conditional persistence or deletion.
"""
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from larasession.exceptions import InvalidSessionError, StoreError
from larasession.logging import getLogger
from larasession.session.context import RequestContext
from larasession.session.record import SessionRecord, expiry_from, utcnow
from larasession.session.session import Session
from larasession.session.store import ContextSessionStore, SessionStore
from larasession.support import Crypto

logger = getLogger(__name__)


class SessionManager:
    """
    Session lifecycle engine

    Per request:
        1. Read the session id from the cookie, falling back to the header
        2. No id, unknown id: create a fresh session
        3. Known id: expired records are deleted and replaced, valid
           records get their expiry re-stamped relative to now
        4. Publish the session on ctx.state.session and write the id cookie
        5. After the handler: rotate if ctx.state.rotate_session_key is set,
           then persist if needed, or delete if the session was marked deleted

    Example:
        manager = SessionManager(ArraySessionStore(), expire_after_seconds=3600)
        response = await manager.handle(ctx, handler)
    """

    def __init__(
        self,
        store: Union[SessionStore, ContextSessionStore],
        expire_after_seconds: Optional[int] = None,
        cookie_name: str = None,
        header_name: str = None,
        cookie_get_options: Optional[Dict[str, Any]] = None,
        cookie_set_options: Optional[Dict[str, Any]] = None,
        access_update_interval: int = None,
        excluded_paths: Optional[List[str]] = None,
        excluded_user_agents: Optional[List[str]] = None,
        id_length: int = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize session manager

        Args:
            store: Session store (id-keyed or cookie-carried)
            expire_after_seconds: Sliding session TTL (None = never expires)
            cookie_name: Cookie carrying the session id
            header_name: Fallback request header carrying the session id
            cookie_get_options: Options used when reading the id cookie
            cookie_set_options: Options used when writing the id cookie
            access_update_interval: Seconds between access-time writes
            excluded_paths: Path prefixes that get no session
            excluded_user_agents: User-agent substrings that get no session
            id_length: Length of generated session ids
            clock: Returns the current UTC instant
        """
        from larasession.defaults import (
            DEFAULT_SESSION_COOKIE_NAME,
            DEFAULT_SESSION_HEADER_NAME,
            DEFAULT_ACCESS_UPDATE_INTERVAL,
            DEFAULT_SESSION_ID_LENGTH,
        )
        self.store = store
        self.expire_after_seconds = expire_after_seconds
        self.cookie_name = cookie_name or DEFAULT_SESSION_COOKIE_NAME
        self.header_name = header_name or DEFAULT_SESSION_HEADER_NAME
        self.cookie_get_options = dict(cookie_get_options or {})
        self.cookie_set_options = dict(cookie_set_options or {})
        self.access_update_interval = (
            DEFAULT_ACCESS_UPDATE_INTERVAL if access_update_interval is None else access_update_interval
        )
        self.excluded_paths = list(excluded_paths or [])
        self.excluded_user_agents = list(excluded_user_agents or [])
        self.id_length = id_length or DEFAULT_SESSION_ID_LENGTH
        self.clock = clock

        # Cookie-carried stores are addressed by request context, not by id
        self.context_keyed = isinstance(store, ContextSessionStore)

    # === Request Lifecycle ===

    async def handle(self, ctx: RequestContext, handler: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run a handler inside the session lifecycle

        Rotation, persistence and deletion run even if the handler
        raises or is cancelled.

        Args:
            ctx: Request context
            handler: Coroutine function running the request

        Returns:
            The handler's result
        """
        session = await self.start(ctx)
        if session is None:
            return await handler()

        return await self.run(ctx, session, handler)

    async def run(self, ctx: RequestContext, session: Session, handler: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run a handler for a started session, then finish the session

        finish() runs even if the handler raises or is cancelled.

        Returns:
            The handler's result
        """
        try:
            return await handler()
        finally:
            await self.finish(ctx, session)

    async def start(self, ctx: RequestContext) -> Optional[Session]:
        """
        Load or create the session and publish it on ctx.state.session

        Args:
            ctx: Request context

        Returns:
            The request's session, or None for excluded requests

        Raises:
            StoreError: If the store fails (the request fails closed)
        """
        if not self.should_handle(ctx):
            return None

        session_id = self.extract_session_id(ctx)
        session = await self.load_or_create(ctx, session_id)

        ctx.state.session = session

        session.update_access_time()
        ctx.set_cookie(self.cookie_name, session.session_id, **self.cookie_set_options)

        return session

    async def finish(self, ctx: RequestContext, session: Session) -> Session:
        """
        Rotate, persist or delete the session once the handler is done

        Deletion wins: a session marked deleted is not rotated or
        persisted, its current record is removed.

        Args:
            ctx: Request context
            session: Session returned by start()

        Returns:
            The final session (a new one if the key was rotated)
        """
        if getattr(ctx.state, 'rotate_session_key', False):
            ctx.state.rotate_session_key = False
            if session.is_deleted:
                logger.debug("Session rotation skipped, session is marked deleted",
                             extra={'sid': session.session_id})
            else:
                session = await self.rotate(ctx, session)

        if session.is_deleted:
            await self.destroy(ctx, session)
            return session

        if session.needs_persistence():
            await self.persist(ctx, session)

        return session

    def should_handle(self, ctx: RequestContext) -> bool:
        """Check whether the request gets a session at all"""
        path = ctx.path or ''
        if any(path.startswith(prefix) for prefix in self.excluded_paths):
            return False

        user_agent = ctx.user_agent or ''
        if any(agent in user_agent for agent in self.excluded_user_agents):
            return False

        return True

    def extract_session_id(self, ctx: RequestContext) -> Optional[str]:
        """Read the session id from the cookie, or the fallback header"""
        session_id = ctx.get_cookie(self.cookie_name, **self.cookie_get_options)
        if not session_id:
            session_id = ctx.get_header(self.header_name)
        return session_id or None

    # === Session States ===

    async def load_or_create(self, ctx: RequestContext, session_id: Optional[str]) -> Session:
        """
        Resolve the session for an incoming id

        Args:
            ctx: Request context
            session_id: Id sent by the client, if any

        Returns:
            Loaded (and re-stamped) or freshly created session
        """
        if not session_id:
            return await self.create_session(ctx)

        record = await self._fetch(ctx, session_id)
        if record is None:
            logger.debug("Session not found, creating a new one", extra={'sid': session_id})
            return await self.create_session(ctx)

        try:
            self.validate(record)
        except InvalidSessionError:
            logger.debug("Session expired, replacing it", extra={'sid': session_id})
            await self._delete(ctx, session_id)
            return await self.create_session(ctx)

        session = self._build_session(session_id, record)
        await self.reup_session(ctx, session)
        logger.debug("Session loaded", extra={'sid': session_id})
        return session

    @staticmethod
    def session_valid(record: SessionRecord, now: datetime) -> bool:
        """
        Check if a record is still valid

        Args:
            record: Stored session record
            now: Current instant

        Returns:
            True if the record never expires or expires after `now`
        """
        return not record.is_expired(now)

    def validate(self, record: SessionRecord) -> None:
        """
        Raises:
            InvalidSessionError: If the record has expired
        """
        if not self.session_valid(record, self.clock()):
            raise InvalidSessionError()

    async def create_session(self, ctx: RequestContext, record: Optional[SessionRecord] = None) -> Session:
        """
        Create and store a session under a new id

        Args:
            ctx: Request context
            record: Data to carry into the new session (default: empty record)

        Returns:
            The new session
        """
        if record is None:
            record = SessionRecord.new(self.clock(), self.expire_after_seconds)

        session_id = Crypto.generate_session_id(self.id_length)
        await self._create(ctx, session_id, record)
        logger.debug("Session created", extra={'sid': session_id})

        return self._build_session(session_id, record)

    async def reup_session(self, ctx: RequestContext, session: Session) -> None:
        """Re-stamp the expiry relative to now and store it (sliding expiration)"""
        session.record.metadata.expire = expiry_from(self.clock(), self.expire_after_seconds)
        await self._persist(ctx, session.session_id, session.record)

    async def rotate(self, ctx: RequestContext, session: Session) -> Session:
        """
        Move the session data to a new id

        The old record is deleted, a new record is created with the
        current data and the id cookie is rewritten.

        Returns:
            The session under its new id
        """
        old_id = session.session_id
        await self._delete(ctx, old_id)
        rotated = await self.create_session(ctx, session.record)

        ctx.state.session = rotated
        ctx.set_cookie(self.cookie_name, rotated.session_id, **self.cookie_set_options)

        logger.debug("Session key rotated", extra={'old_sid': old_id, 'new_sid': rotated.session_id})
        return rotated

    async def persist(self, ctx: RequestContext, session: Session) -> None:
        """Write the session record to the store and clear the dirty flag"""
        await self._persist(ctx, session.session_id, session.record)
        session.mark_clean()
        logger.debug("Session persisted", extra={'sid': session.session_id})

    async def destroy(self, ctx: RequestContext, session: Session) -> None:
        """Remove the session record from the store"""
        await self._delete(ctx, session.session_id)
        session.mark_clean()
        logger.debug("Session deleted", extra={'sid': session.session_id})

    def _build_session(self, session_id: str, record: SessionRecord) -> Session:
        return Session(
            session_id,
            record,
            access_update_interval=self.access_update_interval,
            clock=self.clock,
        )

    # === Store Dispatch ===

    async def _fetch(self, ctx: RequestContext, session_id: str) -> Optional[SessionRecord]:
        if self.context_keyed:
            return await self._call_store('fetch', session_id, self.store.get_session_by_context(ctx))
        return await self._call_store('fetch', session_id, self.store.get_session_by_id(session_id))

    async def _create(self, ctx: RequestContext, session_id: str, record: SessionRecord) -> None:
        if self.context_keyed:
            await self._call_store('create', session_id, self.store.create_session(ctx, record))
        else:
            await self._call_store('create', session_id, self.store.create_session(session_id, record))

    async def _persist(self, ctx: RequestContext, session_id: str, record: SessionRecord) -> None:
        if self.context_keyed:
            await self._call_store('persist', session_id, self.store.persist_session_data(ctx, record))
        else:
            await self._call_store('persist', session_id, self.store.persist_session_data(session_id, record))

    async def _delete(self, ctx: RequestContext, session_id: str) -> None:
        if self.context_keyed:
            await self._call_store('delete', session_id, self.store.delete_session(ctx))
        else:
            await self._call_store('delete', session_id, self.store.delete_session(session_id))

    @staticmethod
    async def _call_store(operation: str, session_id: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except StoreError:
            logger.error(f"Session store {operation} failed", exc_info=True, extra={'sid': session_id})
            raise
