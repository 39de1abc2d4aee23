"""Async Data Access Layer for the CHATS table.

Provides ChatDAL with the conversation CRUD the API exposes. Ownership is
not checked here; controllers compare `ChatRecord.user_id` with the caller.
"""

from __future__ import annotations

import time
from typing import List, Optional, Sequence
from uuid import uuid4

from models.chat_models import ChatRecord
from utils.database_init import AsyncDatabaseInitializer


class ChatDAL:
    """Data access layer for CHATS records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    _COLUMNS = ("id", "user_id", "title", "created_at", "updated_at")
    _COLUMN_LIST = ", ".join(_COLUMNS)
    _COUNT_SQL = "(SELECT COUNT(*) FROM MESSAGES m WHERE m.chat_id = c.id)"

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_chat(self, user_id: str, title: str) -> ChatRecord:
        """Insert a new chat owned by `user_id` and return it."""
        now = time.time()
        record = ChatRecord(id=uuid4().hex, user_id=user_id, title=title, created_at=now, updated_at=now, message_count=0)
        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO CHATS ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?)",
                (record.id, record.user_id, record.title, record.created_at, record.updated_at),
            )
            await conn.commit()
        return record

    async def get_chat(self, chat_id: str) -> Optional[ChatRecord]:
        """Return the chat with its message count, or None if not found."""
        columns = ", ".join(f"c.{col}" for col in self._COLUMNS)
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {columns}, {self._COUNT_SQL} FROM CHATS c WHERE c.id = ?",
                (chat_id,),
            )
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def list_chats(self, user_id: str) -> List[ChatRecord]:
        """List the user's chats, most recently updated first."""
        columns = ", ".join(f"c.{col}" for col in self._COLUMNS)
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {columns}, {self._COUNT_SQL} FROM CHATS c "
                "WHERE c.user_id = ? ORDER BY c.updated_at DESC, c.rowid DESC",
                (user_id,),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def touch_chat(self, chat_id: str) -> bool:
        """Refresh the chat's `updated_at`. Returns True if a row was changed."""
        async with self._db.connection() as conn:
            cur = await conn.execute("UPDATE CHATS SET updated_at = ? WHERE id = ?", (time.time(), chat_id))
            await conn.commit()
            return cur.rowcount > 0

    async def delete_chat(self, chat_id: str) -> bool:
        """Delete the chat and its messages. Returns True if the chat existed."""
        async with self._db.connection() as conn:
            await conn.execute("DELETE FROM MESSAGES WHERE chat_id = ?", (chat_id,))
            cur = await conn.execute("DELETE FROM CHATS WHERE id = ?", (chat_id,))
            await conn.commit()
            return cur.rowcount > 0

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ChatRecord:
        """Convert a DB row tuple into a ChatRecord."""
        return ChatRecord(
            id=row[0],
            user_id=row[1],
            title=row[2],
            created_at=row[3],
            updated_at=row[4],
            message_count=row[5] if len(row) > 5 else None,
        )
