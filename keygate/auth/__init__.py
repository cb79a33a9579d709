"""keygate API key authentication package.

Public API:
  - valid_api_key()         : FastAPI Depends() gate for protected routes
  - extract_bearer_key()    : Authorization header → token or None
  - get_credential_store()  : dependency returning app.state.credential_store
  - get_mode_resolver()     : dependency returning app.state.mode_resolver
  - SQLiteCredentialStore   : CredentialStore over the api_keys table
  - Credential, RequestContext
  - CredentialStore, ModeResolver: collaborator Protocols
  - BackendUnavailableError, CredentialStoreError, ModeResolverError
"""

from __future__ import annotations

from keygate.auth.errors import (
    BackendUnavailableError,
    CredentialStoreError,
    ModeResolverError,
)
from keygate.auth.middleware import (
    extract_bearer_key,
    get_credential_store,
    get_mode_resolver,
    valid_api_key,
)
from keygate.auth.models import Credential, RequestContext
from keygate.auth.protocol import CredentialStore, ModeResolver
from keygate.auth.store import SQLiteCredentialStore

__all__ = [
    "BackendUnavailableError",
    "CredentialStoreError",
    "ModeResolverError",
    "extract_bearer_key",
    "get_credential_store",
    "get_mode_resolver",
    "valid_api_key",
    "Credential",
    "RequestContext",
    "CredentialStore",
    "ModeResolver",
    "SQLiteCredentialStore",
]
