"""Async Data Access Layer for the USERS table."""

from __future__ import annotations

import time
from typing import Optional, Sequence
from uuid import uuid4

from models.chat_models import UserRecord
from utils.database_init import AsyncDatabaseInitializer


class UserDAL:
    """Data access layer for USERS records."""

    _COLUMNS = ("id", "email", "name", "password_hash", "created_at")
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        """Insert a new user and return the stored record.

        Raises:
            aiosqlite.IntegrityError: If the email is already registered.
        """
        record = UserRecord(
            id=uuid4().hex,
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=time.time(),
        )
        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO USERS ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?)",
                (record.id, record.email, record.name, record.password_hash, record.created_at),
            )
            await conn.commit()
        return record

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._db.connection() as conn:
            cur = await conn.execute(f"SELECT {self._COLUMN_LIST} FROM USERS WHERE email = ?", (email,))
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        async with self._db.connection() as conn:
            cur = await conn.execute(f"SELECT {self._COLUMN_LIST} FROM USERS WHERE id = ?", (user_id,))
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> UserRecord:
        return UserRecord(
            id=row[0],
            email=row[1],
            name=row[2],
            password_hash=row[3],
            created_at=row[4],
        )
