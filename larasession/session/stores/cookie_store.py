"""
Cookie Session Store
Carries the whole session record in a signed cookie using itsdangerous
"""
from typing import Any, Dict, Optional
from larasession.exceptions import StoreError
from larasession.logging import getLogger
from larasession.session.context import RequestContext
from larasession.session.record import SessionRecord
from larasession.session.store import ContextSessionStore
from larasession.support import Crypto

logger = getLogger(__name__)

# Browsers drop cookies larger than 4096 bytes (name, value and attributes)
MAX_COOKIE_VALUE_SIZE = 4000


class CookieSessionStore(ContextSessionStore):
    """
    Cookie-based session storage (signed)

    Nothing is kept server-side. The record is signed, not encrypted:
    clients can read it but cannot change it.
    """

    def __init__(
        self,
        secret_key: str,
        cookie_name: str = None,
        cookie_options: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize cookie session store

        Args:
            secret_key: Secret key for signing
            cookie_name: Cookie carrying the record
            cookie_options: Cookie attributes used when writing the record
        """
        from larasession.defaults import DEFAULT_SESSION_DATA_COOKIE_NAME
        self.serializer = Crypto.create_serializer(secret_key)
        self.cookie_name = cookie_name or DEFAULT_SESSION_DATA_COOKIE_NAME
        self.cookie_options = dict(cookie_options or {})

    def serialize(self, record: SessionRecord) -> str:
        """
        Serialize session record for the cookie

        Raises:
            StoreError: If the record cannot be encoded or is too large
        """
        try:
            value = self.serializer.dumps(record.to_dict())
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Session data is not JSON serializable: {exc}") from exc

        if len(value) > MAX_COOKIE_VALUE_SIZE:
            raise StoreError(
                f"Session data too large for a cookie ({len(value)} > {MAX_COOKIE_VALUE_SIZE} bytes)"
            )

        return value

    def unserialize(self, value: str) -> Optional[SessionRecord]:
        """Verify and decode a cookie value (None if tampered or malformed)"""
        data = Crypto.verify_signed_data(value, self.serializer)
        if data is None:
            logger.warning("Session cookie signature mismatch", extra={'cookie': self.cookie_name})
            return None

        try:
            return SessionRecord.from_dict(data)
        except ValueError:
            logger.warning("Session cookie does not hold a session record", extra={'cookie': self.cookie_name})
            return None

    async def create_session(self, ctx: RequestContext, record: SessionRecord) -> None:
        """Write the record into the outgoing cookie"""
        ctx.set_cookie(self.cookie_name, self.serialize(record), **self.cookie_options)

    async def get_session_by_context(self, ctx: RequestContext) -> Optional[SessionRecord]:
        """Read the record from the incoming cookie"""
        value = ctx.get_cookie(self.cookie_name)
        if not value:
            return None
        return self.unserialize(value)

    async def persist_session_data(self, ctx: RequestContext, record: SessionRecord) -> None:
        """Rewrite the outgoing cookie"""
        ctx.set_cookie(self.cookie_name, self.serialize(record), **self.cookie_options)

    async def delete_session(self, ctx: RequestContext) -> None:
        """Clear the cookie"""
        ctx.delete_cookie(self.cookie_name, **self.cookie_options)
