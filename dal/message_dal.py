"""Async Data Access Layer for the MESSAGES table (append-only)."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence
from uuid import uuid4

from models.chat_models import MessageRecord
from utils.database_init import AsyncDatabaseInitializer


class MessageDAL:
    """Data access layer for conversation turns.

    Turns are only ever inserted and read. Ordering uses `created_at` with
    the SQLite rowid as tie-breaker, so turns written within the same clock
    tick keep their insertion order.
    """

    _COLUMNS = ("id", "chat_id", "role", "content", "image_data", "created_at")
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_message(
        self,
        chat_id: str,
        role: str,
        content: str,
        image_data: Optional[str] = None,
    ) -> MessageRecord:
        """Append a turn to `chat_id` and return the stored record."""
        record = MessageRecord(
            id=uuid4().hex,
            chat_id=chat_id,
            role=role,
            content=content,
            image_data=image_data,
            created_at=time.time(),
        )
        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO MESSAGES ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?, ?)",
                (record.id, record.chat_id, record.role, record.content, record.image_data, record.created_at),
            )
            await conn.commit()
        return record

    async def list_messages(self, chat_id: str) -> List[MessageRecord]:
        """Return the full history of `chat_id`, oldest first."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM MESSAGES WHERE chat_id = ? ORDER BY created_at ASC, rowid ASC",
                (chat_id,),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def list_recent(self, chat_id: str, limit: int) -> List[MessageRecord]:
        """Return at most `limit` turns of `chat_id`, newest first."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM MESSAGES WHERE chat_id = ? "
                "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (chat_id, limit),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def count_messages(self, chat_id: str) -> int:
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM MESSAGES WHERE chat_id = ?", (chat_id,))
            row = await cur.fetchone()
            return int(row[0]) if row else 0

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> MessageRecord:
        return MessageRecord(
            id=row[0],
            chat_id=row[1],
            role=row[2],
            content=row[3],
            image_data=row[4],
            created_at=row[5],
        )
