"""API key authentication gate.

Provides ``valid_api_key()``: a FastAPI Depends()-compatible async dependency
that guards protected routes. Routes depending on it never run unless the
request carries a valid bearer key.

Per request, in order:
  1. Resolve the multi-user flag from the ModeResolver and store it on
     ``request.state.multi_user_mode``. This happens before, and regardless
     of, the authentication decision.
  2. Extract the token from ``Authorization: Bearer <token>``. A missing or
     malformed header (no second field, non-Bearer scheme) means no token.
  3. No token → reject without touching the store. Otherwise look up the exact
     secret; no match → reject.
  4. Match → attach a RequestContext to ``request.state.auth`` and return it.

Every rejection is the same HTTP 403 ``{"error": "No valid api key found."}``
so a caller cannot tell a missing key from a wrong one.

Backend faults (CredentialStoreError, ModeResolverError) are NOT caught here.
They propagate to the handler registered in keygate/main.py and become 503.

The bearer token is never logged.
"""

from __future__ import annotations

import re
from typing import Optional

from fastapi import Depends, HTTPException, Request

from keygate.auth.models import RequestContext
from keygate.auth.protocol import CredentialStore, ModeResolver
from keygate.constants import API_KEY_REJECTED_MESSAGE, API_KEY_REJECTED_STATUS, BEARER_SCHEME
from keygate.utils.logger import get_logger

logger = get_logger(__name__)

# "<scheme> <token>": token is the second whitespace-delimited field
_AUTHORIZATION_RE = re.compile(r"^(\S+)\s+(\S+)")


def extract_bearer_key(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization`` header value, or None.

    Args:
        authorization: Raw header value, or None when the header is absent.

    Returns:
        The token for ``Bearer <token>`` (scheme case-insensitive). None for an
        absent header, a header with no second field, or any other scheme.
    """
    if not authorization:
        return None
    m = _AUTHORIZATION_RE.match(authorization.strip())
    if m is None:
        return None
    scheme, token = m.groups()
    if scheme.lower() != BEARER_SCHEME.lower():
        return None
    return token


def get_credential_store(request: Request) -> CredentialStore:
    """Dependency: the process-wide credential store built in the lifespan."""
    return request.app.state.credential_store


def get_mode_resolver(request: Request) -> ModeResolver:
    """Dependency: the process-wide mode resolver built in the lifespan."""
    return request.app.state.mode_resolver


def _reject(request: Request, reason: str) -> HTTPException:
    # reason is logged for operators only; the response body never varies
    logger.warning(
        "API key rejected",
        reason=reason,
        path=str(request.url.path),
        method=request.method,
    )
    return HTTPException(status_code=API_KEY_REJECTED_STATUS, detail=API_KEY_REJECTED_MESSAGE)


async def valid_api_key(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
    mode_resolver: ModeResolver = Depends(get_mode_resolver),
) -> RequestContext:
    """FastAPI dependency: require a valid bearer API key.

    Returns:
        RequestContext with the resolved mode flag, the matched credential and
        the raw bearer key. Also stored on ``request.state.auth``.

    Raises:
        HTTPException(403): No key, malformed header, or no matching credential.
        CredentialStoreError / ModeResolverError: Backend fault (→ 503).
    """
    multi_user_mode = await mode_resolver.is_multi_user_mode()
    request.state.multi_user_mode = multi_user_mode

    authorization = request.headers.get("Authorization")
    bearer_key = extract_bearer_key(authorization)
    if not bearer_key:
        raise _reject(request, "missing_header" if authorization is None else "malformed_header")

    credential = await store.get_by_secret(bearer_key)
    if credential is None:
        raise _reject(request, "unknown_key")

    context = RequestContext(
        multi_user_mode=multi_user_mode,
        credential=credential,
        bearer_key=bearer_key,
    )
    request.state.auth = context
    request.state.api_key = credential
    request.state.bearer_key = bearer_key

    logger.debug(
        "API key accepted",
        credential_id=credential.id,
        multi_user_mode=multi_user_mode,
        path=str(request.url.path),
    )
    return context
