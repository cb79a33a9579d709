"""Data carried through the authentication gate.

Credential    : one issued API key, as stored.
RequestContext: per-request output of the gate, attached to request.state.

Secrets are excluded from ``repr()`` on both types so a stray log line or
traceback never prints them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

_EPOCH_MS_RE = re.compile(r"^-?\d+(\.\d+)?$")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Read a stored ``api_keys`` timestamp.

    Accepts ISO 8601 text (with or without a trailing ``Z``, ``T`` or space
    separated) and epoch milliseconds, as an integer or as numeric text.
    Anything else yields None: timestamps are metadata and an unreadable one
    never fails a lookup.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_ms(value)

    text = str(value).strip()
    if not text:
        return None
    if _EPOCH_MS_RE.match(text):
        return _from_epoch_ms(float(text))
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _from_epoch_ms(millis: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


@dataclass(frozen=True)
class Credential:
    """An API key record. Read-only from the gate's perspective."""

    id: int
    secret: str = field(repr=False)
    created_at: Optional[datetime]
    last_updated_at: Optional[datetime]
    created_by: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Credential":
        """Build from an ``api_keys`` row. See parse_timestamp() for accepted formats."""
        return cls(
            id=row["id"],
            secret=row["secret"],
            created_at=parse_timestamp(row["created_at"]),
            last_updated_at=parse_timestamp(row["last_updated_at"]),
            created_by=row["created_by"],
        )


@dataclass(frozen=True)
class RequestContext:
    """What the gate hands to downstream handlers.

    The gate only builds one after a credential matched, so ``credential`` is
    always set on contexts a handler receives.
    """

    multi_user_mode: bool
    credential: Optional[Credential] = None
    bearer_key: Optional[str] = field(default=None, repr=False)
