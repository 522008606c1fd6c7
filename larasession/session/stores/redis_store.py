"""
Redis Session Store
Shared session storage for multi-process deployments
"""
import math
from typing import Optional
import redis.asyncio as aioredis
from redis.exceptions import RedisError
from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord, utcnow
from larasession.session.store import SessionStore


class RedisSessionStore(SessionStore):
    """
    Redis-backed session storage

    Each session is a JSON string under `<key_prefix><session_id>`.
    Records with an expiry get a matching Redis TTL, so abandoned
    sessions disappear without an explicit delete.
    """

    def __init__(
        self,
        redis_url: str = None,
        key_prefix: str = None,
        client: Optional[aioredis.Redis] = None
    ):
        """
        Initialize Redis session store

        Args:
            redis_url: Redis connection URL (ignored when client is given)
            key_prefix: Prefix for session keys
            client: Existing redis.asyncio client
        """
        from larasession.defaults import DEFAULT_REDIS_URL, DEFAULT_SESSION_KEY_PREFIX
        self.redis_url = redis_url or DEFAULT_REDIS_URL
        self.key_prefix = DEFAULT_SESSION_KEY_PREFIX if key_prefix is None else key_prefix
        self.redis: Optional[aioredis.Redis] = client

    def _client(self) -> aioredis.Redis:
        """Create the client on first use (connections are opened lazily)"""
        if self.redis is None:
            self.redis = aioredis.from_url(
                self.redis_url,
                encoding='utf-8',
                decode_responses=True
            )
        return self.redis

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    @staticmethod
    def _ttl_seconds(record: SessionRecord) -> Optional[int]:
        """Whole seconds until the record expires (None = no TTL)"""
        expire = record.metadata.expire
        if expire is None:
            return None
        remaining = (expire - utcnow()).total_seconds()
        if remaining <= 0:
            return None
        return math.ceil(remaining)

    async def _write(self, session_id: str, record: SessionRecord) -> None:
        try:
            payload = record.to_json()
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Session data is not JSON serializable: {exc}") from exc

        ttl = self._ttl_seconds(record)
        try:
            if ttl is None and record.metadata.expire is not None:
                # Already expired, a SET would keep it forever
                await self._client().delete(self._key(session_id))
            elif ttl:
                await self._client().set(self._key(session_id), payload, ex=ttl)
            else:
                # Plain SET also clears a TTL left by an earlier write
                await self._client().set(self._key(session_id), payload)
        except RedisError as exc:
            raise StoreError(f"Could not write session to Redis: {exc}") from exc

    async def create_session(self, session_id: str, record: SessionRecord) -> None:
        """Store a new session"""
        await self._write(session_id, record)

    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        """Read session from Redis"""
        try:
            payload = await self._client().get(self._key(session_id))
        except RedisError as exc:
            raise StoreError(f"Could not read session from Redis: {exc}") from exc

        if payload is None:
            return None

        try:
            return SessionRecord.from_json(payload)
        except ValueError as exc:
            raise StoreError(f"Stored session is not a valid record: {exc}") from exc

    async def persist_session_data(self, session_id: str, record: SessionRecord) -> None:
        """Overwrite session and refresh its TTL"""
        await self._write(session_id, record)

    async def delete_session(self, session_id: str) -> None:
        """Delete session from Redis"""
        try:
            await self._client().delete(self._key(session_id))
        except RedisError as exc:
            raise StoreError(f"Could not delete session from Redis: {exc}") from exc

    async def get_ttl(self, session_id: str) -> int:
        """
        Get remaining TTL for a session

        Returns:
            Remaining seconds (-1 if no expiry, -2 if the session doesn't exist)
        """
        try:
            return await self._client().ttl(self._key(session_id))
        except RedisError as exc:
            raise StoreError(f"Could not read session TTL from Redis: {exc}") from exc
