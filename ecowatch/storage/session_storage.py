"""
Chat session catalog storage for the EcoWatch sync client
"""

import json
import time
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from .kv_storage import KeyValueStore
from ..schemas.chat import ChatSession

logger = logging.getLogger(__name__)

# Persisted keys
ACTIVE_SESSION_KEY = "chat_session_id"
SESSIONS_KEY = "chat_sessions"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class SessionStore:
    """
    Catalog of chat sessions kept in a durable key-value store.

    The catalog is ordered by creation, most recent first. Entries written by
    older clients are bare id strings; they are normalized on every read.
    Writes are read-modify-write without versioning, so two clients sharing
    one store can overwrite each other's changes.
    """

    def __init__(self, store: KeyValueStore, now_ms: Callable[[], int] = _epoch_millis):
        self.store = store
        self.now_ms = now_ms

    @staticmethod
    def _normalize_entry(entry: Any) -> Optional[ChatSession]:
        """Migrate one stored entry to a structured record"""
        if isinstance(entry, str):
            return ChatSession(id=entry) if entry else None
        if isinstance(entry, dict):
            try:
                return ChatSession.model_validate(entry)
            except PydanticValidationError as e:
                session_id = entry.get("id")
                if isinstance(session_id, str) and session_id:
                    logger.warning(f"Keeping session {session_id} without its unreadable fields: {e.error_count()} errors")
                    preview = entry.get("lastMessage")
                    return ChatSession(id=session_id, lastMessage=preview if isinstance(preview, str) else None)
                logger.warning(f"Dropping malformed session entry {entry!r}: {e}")
                return None
        logger.warning(f"Dropping unsupported session entry {entry!r}")
        return None

    def _read_catalog(self) -> List[ChatSession]:
        raw = self.store.get(SESSIONS_KEY)
        if not raw:
            return []

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Session catalog is not valid JSON, starting empty: {e}")
            return []

        if not isinstance(entries, list):
            logger.error("Session catalog is not a list, starting empty")
            return []

        sessions = []
        seen = set()
        for entry in entries:
            session = self._normalize_entry(entry)
            if session is None or session.id in seen:
                continue
            seen.add(session.id)
            sessions.append(session)
        return sessions

    def _write_catalog(self, sessions: List[ChatSession]) -> None:
        self.store.set(SESSIONS_KEY, json.dumps([s.to_record() for s in sessions]))

    def _generate_id(self, existing: List[ChatSession]) -> str:
        """Time-derived id, bumped past any id already in the catalog"""
        taken = {s.id for s in existing}
        millis = self.now_ms()
        while f"session_{millis}" in taken:
            millis += 1
        return f"session_{millis}"

    def list_sessions(self) -> List[ChatSession]:
        """Return the catalog, most recently created first"""
        return self._read_catalog()

    def get_active_session_id(self) -> Optional[str]:
        return self.store.get(ACTIVE_SESSION_KEY) or None

    def get_or_create_active_session_id(self) -> str:
        """Return the bound session id, creating one if none exists"""
        existing = self.get_active_session_id()
        if existing:
            return existing
        return self.create_session().id

    def create_session(self) -> ChatSession:
        """Prepend a new session to the catalog and make it active"""
        sessions = self._read_catalog()
        session = ChatSession(id=self._generate_id(sessions))

        self._write_catalog([session] + sessions)
        self.store.set(ACTIVE_SESSION_KEY, session.id)
        logger.info(f"Created chat session {session.id}")
        return session

    def activate(self, session_id: str) -> None:
        """Bind an existing session id as the active one"""
        self.store.set(ACTIVE_SESSION_KEY, session_id)

    def update_session_preview(self, session_id: str, last_message: str,
                               at: Optional[datetime] = None) -> Optional[ChatSession]:
        """
        Update the preview of one catalog entry in place.

        The catalog order is left untouched: display order follows creation,
        not last activity.
        """
        sessions = self._read_catalog()
        updated = None
        for i, session in enumerate(sessions):
            if session.id == session_id:
                updated = session.model_copy(update={
                    "last_message_preview": last_message,
                    "last_message_timestamp": at or datetime.now(timezone.utc),
                })
                sessions[i] = updated
                break

        if updated is None:
            logger.warning(f"No catalog entry for session {session_id}, preview not stored")
        self._write_catalog(sessions)
        return updated
