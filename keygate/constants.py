"""Shared constants for keygate.

Response bodies and header names used across modules are defined here so the
rejection body stays byte-identical on every path.
"""

# ─── Authentication gate ─────────────────────────────────────────────────────

# HTTP status for every rejection path (missing, malformed or unmatched key).
API_KEY_REJECTED_STATUS: int = 403

# Generic rejection message. Must not vary by failure reason.
API_KEY_REJECTED_MESSAGE: str = "No valid api key found."

# Only this scheme is accepted in the Authorization header (case-insensitive).
BEARER_SCHEME: str = "Bearer"

# ─── Backend faults ──────────────────────────────────────────────────────────

# Credential store or mode resolver unreachable. Distinct from 403.
BACKEND_UNAVAILABLE_STATUS: int = 503

BACKEND_UNAVAILABLE_MESSAGE: str = "Authentication backend unavailable."

# ─── System settings ─────────────────────────────────────────────────────────

# system_settings.label of the deployment-wide multi-user flag
MULTI_USER_MODE_LABEL: str = "multi_user_mode"

# ─── Request correlation ─────────────────────────────────────────────────────

REQUEST_ID_HEADER: str = "X-Request-ID"

# ─── Logging ─────────────────────────────────────────────────────────────────

# Event keys whose values are masked by the log pipeline (compared lower-cased)
REDACTED_LOG_KEYS: frozenset[str] = frozenset(
    {"secret", "api_key", "bearer_key", "authorization", "token"}
)
