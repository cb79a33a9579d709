"""Root test configuration for keygate.

Provides a real, initialized SQLite database under tmp_path plus helpers to
seed credentials and the multi_user_mode setting directly with SQL (key
issuance is not part of keygate, so tests write the rows themselves).
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import pytest

from keygate.constants import MULTI_USER_MODE_LABEL
from keygate.db import Database


async def insert_credential(
    database: Database,
    secret: str,
    created_by: Optional[int] = None,
    stamped: Any = None,
) -> int:
    """Insert an api_keys row and return its id.

    ``stamped`` is stored verbatim in both timestamp columns; by default the
    current time as ISO 8601 text.
    """
    now = stamped if stamped is not None else datetime.now(timezone.utc).isoformat()
    cursor = await database.connection.execute(
        "INSERT INTO api_keys (secret, created_by, created_at, last_updated_at) "
        "VALUES (?, ?, ?, ?)",
        (secret, created_by, now, now),
    )
    await database.connection.commit()
    return cursor.lastrowid


async def set_setting(database: Database, label: str, value: Optional[str]) -> None:
    """Upsert a system_settings row."""
    now = datetime.now(timezone.utc).isoformat()
    await database.connection.execute(
        "INSERT INTO system_settings (label, value, created_at, last_updated_at) "
        "VALUES (?, ?, ?, ?) "
        "ON CONFLICT(label) DO UPDATE SET value = excluded.value, "
        "last_updated_at = excluded.last_updated_at",
        (label, value, now, now),
    )
    await database.connection.commit()


async def set_multi_user_mode(database: Database, enabled: bool) -> None:
    await set_setting(database, MULTI_USER_MODE_LABEL, "true" if enabled else "false")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "keygate.db"


@pytest.fixture
async def database(db_path: Path):
    """An initialized Database, closed after the test."""
    db = Database(db_path)
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's own KEYGATE_* settings out of the test run."""
    for var in ("KEYGATE_CONFIG", "KEYGATE_PORT", "KEYGATE_DB_PATH"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def seed_credential(database: Database):
    """``await seed_credential("secret")`` → id of the new api_keys row."""

    async def _seed(
        secret: str, created_by: Optional[int] = None, stamped: Any = None
    ) -> int:
        return await insert_credential(database, secret, created_by, stamped)

    return _seed


@pytest.fixture
def seed_multi_user_mode(database: Database):
    """``await seed_multi_user_mode(True)`` flips the stored flag."""

    async def _seed(enabled: bool) -> None:
        await set_multi_user_mode(database, enabled)

    return _seed
