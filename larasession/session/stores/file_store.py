"""
File Session Store
Stores sessions as JSON files in the filesystem
"""
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord, utcnow
from larasession.session.store import SessionStore

# Ids are generated from a URL-safe alphabet; anything else is not ours
_SESSION_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,128}$')


class FileSessionStore(SessionStore):
    """File-based session storage"""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file session store

        Args:
            path: Path to session storage directory
        """
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)

    def _get_session_file(self, session_id: str) -> Optional[Path]:
        """Get path to session file (None for ids that cannot be ours)"""
        if not _SESSION_ID_PATTERN.match(session_id):
            return None
        return self.path / f"session_{session_id}.json"

    def _require_session_file(self, session_id: str) -> Path:
        session_file = self._get_session_file(session_id)
        if session_file is None:
            raise StoreError(f"Invalid session id for file store: {session_id[:16]!r}")
        return session_file

    def _write(self, session_id: str, record: SessionRecord) -> None:
        """Write session file atomically (temp file + rename)"""
        session_file = self._require_session_file(session_id)

        try:
            payload = record.to_json()
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Session data is not JSON serializable: {exc}") from exc

        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path, prefix='.session_', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                os.replace(tmp_path, session_file)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise StoreError(f"Could not write session file: {exc}") from exc

    async def create_session(self, session_id: str, record: SessionRecord) -> None:
        """Write a new session file"""
        self._write(session_id, record)

    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        """Read session from file"""
        session_file = self._get_session_file(session_id)
        if session_file is None:
            return None

        try:
            with open(session_file, 'r', encoding='utf-8') as f:
                payload = f.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Could not read session file: {exc}") from exc

        try:
            return SessionRecord.from_json(payload)
        except ValueError as exc:
            raise StoreError(f"Session file is not a valid record: {exc}") from exc

    async def persist_session_data(self, session_id: str, record: SessionRecord) -> None:
        """Overwrite session file"""
        self._write(session_id, record)

    async def delete_session(self, session_id: str) -> None:
        """Delete session file"""
        session_file = self._get_session_file(session_id)
        if session_file is None:
            return

        try:
            session_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StoreError(f"Could not delete session file: {exc}") from exc

    async def gc(self, now: Optional[datetime] = None) -> int:
        """
        Remove expired and unreadable session files

        Args:
            now: Reference instant (default: current time)

        Returns:
            Number of session files deleted
        """
        now = now or utcnow()
        deleted = 0

        for session_file in self.path.glob('session_*.json'):
            try:
                with open(session_file, 'r', encoding='utf-8') as f:
                    record = SessionRecord.from_json(f.read())
                expired = record.is_expired(now)
            except ValueError:
                # Corrupted file, delete it
                expired = True
            except FileNotFoundError:
                continue

            if expired:
                try:
                    session_file.unlink()
                    deleted += 1
                except FileNotFoundError:
                    pass

        return deleted
