"""Async Data Access Layer for the CREDENTIAL table.

Provides CredentialDAL with the small set of operations the credential
store needs, compatible with `utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from typing import Optional

from utils.database_init import AsyncDatabaseInitializer


class CredentialDAL:
    """Data access layer for named secrets.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def get_value(self, name: str) -> Optional[str]:
        """Return the stored value for `name`, or None if not found."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                "SELECT value FROM CREDENTIAL WHERE name = ?",
                (name,),
            )
            row = await cur.fetchone()
            return row[0] if row else None

    async def upsert_value(self, name: str, value: str) -> None:
        """Insert or replace the value stored under `name`."""
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO CREDENTIAL (name, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (name, value, int(time.time())),
            )
            await conn.commit()

    async def delete_value(self, name: str) -> bool:
        """Delete the row for `name`.

        Returns:
            True if a row was deleted, False otherwise.
        """
        async with self._db.connection() as conn:
            cur = await conn.execute("DELETE FROM CREDENTIAL WHERE name = ?", (name,))
            await conn.commit()
            return cur.rowcount > 0
