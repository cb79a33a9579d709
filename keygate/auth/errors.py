"""Exceptions raised by the authentication backends.

A backend fault is never a rejection: the gate lets these propagate so the
caller sees a server error (HTTP 503) instead of a 403, and operators can
tell an outage apart from bad credentials.

HTTP mapping (registered in keygate/main.py):
  BackendUnavailableError and subclasses → 503 {"error": "Authentication backend unavailable."}
"""

from __future__ import annotations


class BackendUnavailableError(Exception):
    """A collaborator the gate depends on could not answer."""

    backend: str = "unknown"

    def __init__(self, message: str = "Authentication backend unavailable") -> None:
        super().__init__(message)
        self.message = message


class CredentialStoreError(BackendUnavailableError):
    """The credential store failed while looking up a secret."""

    backend = "credential_store"


class ModeResolverError(BackendUnavailableError):
    """The system settings store failed while reading the multi-user flag."""

    backend = "mode_resolver"
