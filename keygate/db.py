"""Process-wide database handle for keygate.

One long-lived aiosqlite connection is opened in the application lifespan and
passed explicitly to the credential store and the system settings reader.
There is no module-level client.

  - WAL mode: PRAGMA journal_mode=WAL (concurrent readers while writing)
  - Schema version guard: PRAGMA user_version must be 0 (fresh) or 1
  - File permissions: chmod 0600 on every initialize()
  - api_keys.secret is UNIQUE, so at most one credential matches a token

aiosqlite runs every statement on a single worker thread, so concurrent
requests sharing the connection never need a lock.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import aiosqlite

from keygate.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Schema DDL ───────────────────────────────────────────────────────────────

_CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS api_keys (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    secret            TEXT NOT NULL UNIQUE,
    created_by        INTEGER,
    created_at        TEXT NOT NULL,
    last_updated_at   TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS system_settings (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    label             TEXT NOT NULL UNIQUE,
    value             TEXT,
    created_at        TEXT NOT NULL,
    last_updated_at   TEXT NOT NULL
);
"""

_SCHEMA_VERSION = 1


class Database:
    """Owns the single aiosqlite connection for the process.

    Usage::

        database = Database("~/.keygate/keygate.db")
        await database.initialize()
        ...
        await database.close()
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(os.path.expanduser(str(path)))
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def connection(self) -> aiosqlite.Connection:
        """The open connection. Raises RuntimeError before initialize() / after close()."""
        if self._conn is None:
            raise RuntimeError("Database is not initialized")
        return self._conn

    async def initialize(self) -> None:
        """Open the connection and create the schema.

        Raises:
            RuntimeError: If PRAGMA user_version is neither 0 nor 1. The
                          lifespan propagates this so startup is refused.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(self.path))
        conn.row_factory = aiosqlite.Row
        try:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            async with conn.execute("PRAGMA user_version") as cursor:
                row = await cursor.fetchone()
            version = row[0] if row else 0
            if version not in (0, _SCHEMA_VERSION):
                raise RuntimeError(
                    f"Unsupported database schema version {version} in {self.path} "
                    f"(expected 0 or {_SCHEMA_VERSION})"
                )

            await conn.executescript(_CREATE_SCHEMA_SQL)
            await conn.execute(f"PRAGMA user_version = {_SCHEMA_VERSION}")
            await conn.commit()
        except BaseException:
            await conn.close()
            raise

        os.chmod(self.path, 0o600)
        self._conn = conn
        logger.info("Database initialized", path=str(self.path))

    async def health_check(self) -> bool:
        """True if the connection answers ``SELECT 1``. Never raises."""
        if self._conn is None:
            return False
        try:
            async with self._conn.execute("SELECT 1") as cursor:
                await cursor.fetchone()
            return True
        except Exception as exc:
            logger.warning("Database health check failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await conn.close()
        logger.info("Database closed", path=str(self.path))
