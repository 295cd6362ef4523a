"""SQLite-backed chat session store.

Messages are append-only. ``append_messages`` writes its records in a single
transaction, so a user/assistant pair is stored together or not at all.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

import aiosqlite

from sahayak_common.logging import get_logger

from .errors import PersistenceError
from .models import ChatMessage, ChatSession, MessageRecord

log = get_logger(__name__)

_CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS chat_sessions (
    id TEXT PRIMARY KEY,
    session_name TEXT,
    language TEXT,
    user_id TEXT,
    created_at TEXT NOT NULL,
    last_active TEXT NOT NULL
);
"""

_CREATE_MESSAGES_TABLE = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES chat_sessions(id),
    user_id TEXT,
    role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
    content TEXT NOT NULL,
    tone TEXT,
    response_length TEXT,
    audio_url TEXT,
    created_at TEXT NOT NULL
);
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_chat_messages_session ON chat_messages(session_id);
"""

_MESSAGE_COLUMNS = "id, session_id, role, content, user_id, tone, response_length, audio_url, created_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionStore:
    """Async SQLite store for chat sessions and their messages."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        # One connection is shared by concurrent exchanges; reads wait for pending commits.
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        """Open the database and create tables."""
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")
        await self._db.execute(_CREATE_SESSIONS_TABLE)
        await self._db.execute(_CREATE_MESSAGES_TABLE)
        await self._db.execute(_CREATE_INDEX)
        await self._db.commit()
        log.info("session_store_ready", db_path=self._db_path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise PersistenceError("Session store not initialized")
        return self._db

    async def create_session(
        self, label: str | None, language: str | None, user_id: str | None = None
    ) -> ChatSession:
        """Create a new session and return it."""
        now = _now()
        session = ChatSession(
            id=str(uuid.uuid4()),
            session_name=label,
            language=language,
            user_id=user_id,
            created_at=now,
            last_active=now,
        )
        async with self._lock:
            try:
                await self.db.execute(
                    "INSERT INTO chat_sessions (id, session_name, language, user_id, created_at, last_active) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (session.id, label, language, user_id, now, now),
                )
                await self.db.commit()
            except aiosqlite.Error as e:
                await self.db.rollback()
                raise PersistenceError(f"Creating session failed: {e}") from e
        log.info("session_created", session_id=session.id, language=language)
        return session

    async def get_session(self, session_id: str) -> ChatSession | None:
        async with self._lock:
            cursor = await self.db.execute(
                "SELECT id, session_name, language, user_id, created_at, last_active "
                "FROM chat_sessions WHERE id = ?",
                (session_id,),
            )
            row = await cursor.fetchone()
        return ChatSession(**dict(row)) if row else None

    async def append_messages(
        self, session_id: str, records: Sequence[MessageRecord]
    ) -> list[ChatMessage]:
        """Append records to a session in order, all in one transaction."""
        if not records:
            return []

        now = _now()
        messages = [
            ChatMessage(id=str(uuid.uuid4()), session_id=session_id, created_at=now, **record.model_dump())
            for record in records
        ]

        async with self._lock:
            try:
                cursor = await self.db.execute(
                    "UPDATE chat_sessions SET last_active = ? WHERE id = ?",
                    (now, session_id),
                )
                if cursor.rowcount == 0:
                    await self.db.rollback()
                    raise PersistenceError(f"Unknown session: {session_id}")
                await self.db.executemany(
                    f"INSERT INTO chat_messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            m.id,
                            m.session_id,
                            m.role,
                            m.content,
                            m.user_id,
                            m.tone,
                            m.response_length,
                            m.audio_url,
                            m.created_at,
                        )
                        for m in messages
                    ],
                )
                await self.db.commit()
            except aiosqlite.Error as e:
                await self.db.rollback()
                raise PersistenceError(f"Appending messages failed: {e}") from e

        return messages

    async def recent_messages(self, session_id: str, limit: int = 20) -> list[ChatMessage]:
        """Return the newest ``limit`` messages of a session, oldest first."""
        async with self._lock:
            cursor = await self.db.execute(
                f"SELECT {_MESSAGE_COLUMNS} FROM chat_messages "
                "WHERE session_id = ? ORDER BY rowid DESC LIMIT ?",
                (session_id, limit),
            )
            rows = await cursor.fetchall()
        return [ChatMessage(**dict(row)) for row in reversed(rows)]
