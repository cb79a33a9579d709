"""Collaborator interfaces for the authentication gate.

CredentialStore: lookup-by-secret; SQLiteCredentialStore (auth/store.py) ships by default.
ModeResolver   : is-multi-user-mode; SystemSettings (settings/system_settings.py).

Both are structural Protocols: any object with the right async methods fits,
which is how tests substitute in-memory doubles.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from keygate.auth.models import Credential


@runtime_checkable
class CredentialStore(Protocol):
    """Read-only credential lookup. Must be safe for concurrent callers."""

    async def get_by_secret(self, secret: str) -> Optional[Credential]:
        """Return the credential whose secret equals ``secret`` exactly, or None.

        Raises CredentialStoreError when the backend cannot answer. Absence is
        None, never an exception.
        """
        ...


@runtime_checkable
class ModeResolver(Protocol):
    """Source of the deployment-wide multi-user flag."""

    async def is_multi_user_mode(self) -> bool:
        """Current value of the flag, read fresh on every call.

        Raises ModeResolverError when the backend cannot answer.
        """
        ...
