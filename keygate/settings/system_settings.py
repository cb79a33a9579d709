"""System settings reader: the multi-user mode flag.

The flag lives in the ``system_settings`` table as the row labelled
``multi_user_mode``. It is read on every call; nothing is cached, so flipping
the row takes effect on the next request without a restart.
"""

from __future__ import annotations

from typing import Optional

import aiosqlite

from keygate.auth.errors import ModeResolverError
from keygate.constants import MULTI_USER_MODE_LABEL
from keygate.db import Database
from keygate.utils.logger import get_logger

logger = get_logger(__name__)


def parse_flag(value: Optional[str]) -> bool:
    """Stored settings are text. Only ``"true"`` (any case, trimmed) is truthy."""
    if value is None:
        return False
    return value.strip().lower() == "true"


class SystemSettings:
    """ModeResolver over ``system_settings``."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get_value(self, label: str) -> Optional[str]:
        """Raw value for ``label``, or None if the row is missing.

        Raises:
            ModeResolverError: On any database failure.
        """
        try:
            conn = self._database.connection
            async with conn.execute(
                "SELECT value FROM system_settings WHERE label = ? LIMIT 1",
                (label,),
            ) as cursor:
                row = await cursor.fetchone()
        except (aiosqlite.Error, RuntimeError, ValueError) as exc:
            logger.error(
                "System settings read failed",
                label=label,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise ModeResolverError("System settings lookup failed") from exc
        return row[0] if row else None

    async def is_multi_user_mode(self) -> bool:
        return parse_flag(await self.get_value(MULTI_USER_MODE_LABEL))
