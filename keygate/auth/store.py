"""SQLite-backed credential store.

Reads the ``api_keys`` table through the process-wide Database handle.
Lookups are a single parameterized equality match on the UNIQUE ``secret``
column; SQLite compares TEXT with BINARY collation, so the match is exact and
case-sensitive. There is no prefix, LIKE or substring matching.

The store never writes. Key issuance happens out-of-band.
"""

from __future__ import annotations

from typing import Optional

import aiosqlite

from keygate.auth.errors import CredentialStoreError
from keygate.auth.models import Credential
from keygate.db import Database
from keygate.utils.logger import get_logger

logger = get_logger(__name__)

_SELECT_BY_SECRET_SQL = (
    "SELECT id, secret, created_by, created_at, last_updated_at "
    "FROM api_keys WHERE secret = ? LIMIT 1"
)


class SQLiteCredentialStore:
    """CredentialStore over ``api_keys``."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get_by_secret(self, secret: str) -> Optional[Credential]:
        """Look up a credential by its exact secret.

        Returns:
            The matching Credential, or None if no row matches.

        Raises:
            CredentialStoreError: On any database failure (closed handle,
                                  missing table, I/O error). Unreadable
                                  timestamps are not failures.
        """
        if not secret:
            return None

        try:
            conn = self._database.connection
            async with conn.execute(_SELECT_BY_SECRET_SQL, (secret,)) as cursor:
                row = await cursor.fetchone()
            if row is None:
                return None
            credential = Credential.from_row(row)
        except (aiosqlite.Error, RuntimeError, KeyError) as exc:
            logger.error(
                "Credential lookup failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise CredentialStoreError("Credential store lookup failed") from exc

        logger.debug("Credential matched", credential_id=credential.id)
        return credential
