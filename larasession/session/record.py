"""
Session Record
The persisted unit of a session: user attributes plus lifecycle metadata

Wire format (JSON):
    {
        "metadata": {
            "flash": {...},
            "accessed": "2026-10-18T12:00:00+00:00" | null,
            "expire": "2026-10-18T14:00:00+00:00" | null,
            "delete": false
        },
        "attributes": {...}
    }
"""
import copy
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional


class _Missing:
    """No-value signal returned by Session.get() for absent keys"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'MISSING'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING = _Missing()


# === Timestamps ===

def utcnow() -> datetime:
    """Current instant as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp as ISO 8601 (None stays None)"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp

    Naive values are read as UTC. A trailing 'Z' is accepted.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def expiry_from(now: datetime, expire_after_seconds: Optional[int]) -> Optional[datetime]:
    """Absolute expiration for a TTL measured from now (None or 0 = never)"""
    if not expire_after_seconds:
        return None
    return now + timedelta(seconds=expire_after_seconds)


class SessionMetadata:
    """
    Lifecycle fields of a session record

    Attributes:
        flash: One-shot values, removed when read
        accessed: Last materialized access time
        expire: Instant after which the record is invalid (None = never)
        delete: Record is marked for removal at the end of the request
    """

    def __init__(
        self,
        flash: Optional[Dict[str, Any]] = None,
        accessed: Optional[datetime] = None,
        expire: Optional[datetime] = None,
        delete: bool = False
    ):
        self.flash: Dict[str, Any] = flash if flash is not None else {}
        self.accessed = accessed
        self.expire = expire
        self.delete = delete

    def to_dict(self) -> Dict[str, Any]:
        return {
            'flash': copy.deepcopy(self.flash),
            'accessed': format_timestamp(self.accessed),
            'expire': format_timestamp(self.expire),
            'delete': self.delete,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionMetadata':
        if not isinstance(data, dict):
            raise ValueError("Session metadata must be an object")

        flash = data.get('flash') or {}
        if not isinstance(flash, dict):
            raise ValueError("Session flash data must be an object")

        delete = data.get('delete', False)
        if not isinstance(delete, bool):
            raise ValueError("Session delete flag must be a boolean")

        return cls(
            flash=copy.deepcopy(flash),
            accessed=parse_timestamp(data.get('accessed')),
            expire=parse_timestamp(data.get('expire')),
            delete=delete,
        )


class SessionRecord:
    """
    Persisted session data

    User keys live in `attributes`, lifecycle fields in `metadata`, so a
    user key can never overwrite or remove a reserved field.
    """

    def __init__(
        self,
        attributes: Optional[Dict[str, Any]] = None,
        metadata: Optional[SessionMetadata] = None
    ):
        self.attributes: Dict[str, Any] = attributes if attributes is not None else {}
        self.metadata = metadata if metadata is not None else SessionMetadata()

    @classmethod
    def new(cls, now: datetime, expire_after_seconds: Optional[int] = None) -> 'SessionRecord':
        """
        Build the record of a brand-new session

        Args:
            now: Creation instant
            expire_after_seconds: Session TTL (None = never expires)

        Returns:
            Empty record accessed at `now`
        """
        return cls(metadata=SessionMetadata(
            flash={},
            accessed=now,
            expire=expiry_from(now, expire_after_seconds),
            delete=False,
        ))

    def is_expired(self, now: datetime) -> bool:
        """A record expiring exactly at `now` is expired"""
        expire = self.metadata.expire
        return expire is not None and not now < expire

    # === Serialization ===

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata': self.metadata.to_dict(),
            'attributes': copy.deepcopy(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionRecord':
        """
        Build a record from its wire mapping

        Raises:
            ValueError: If the mapping is not a session record
        """
        if not isinstance(data, dict):
            raise ValueError("Session record must be an object")

        attributes = data.get('attributes') or {}
        if not isinstance(attributes, dict):
            raise ValueError("Session attributes must be an object")

        return cls(
            attributes=copy.deepcopy(attributes),
            metadata=SessionMetadata.from_dict(data.get('metadata') or {}),
        )

    def to_json(self) -> str:
        """
        Encode as JSON

        Raises:
            TypeError, ValueError: If a value is not JSON serializable
        """
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload) -> 'SessionRecord':
        """
        Decode from JSON

        Raises:
            ValueError: If the payload is not a JSON session record
        """
        return cls.from_dict(json.loads(payload))

    def copy(self) -> 'SessionRecord':
        return SessionRecord.from_dict(self.to_dict())

    def __eq__(self, other) -> bool:
        if not isinstance(other, SessionRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<SessionRecord keys={len(self.attributes)} expire={format_timestamp(self.metadata.expire)}>"
