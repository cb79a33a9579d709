"""Request correlation ids.

``generate_request_id()`` returns a 26-character ULID (Crockford Base32,
lexicographically sortable by creation time). It is sent back to the caller
in the ``X-Request-ID`` response header and bound into every log line for the
request, so an operator can match a client-side 403/503 to the server logs
without the bearer token ever being logged.

Uses the ``python-ulid`` library. Do not hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_request_id() -> str:
    """Return a new 26-character ULID string, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``."""
    return str(ULID())
