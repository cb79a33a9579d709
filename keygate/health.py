"""Health endpoint for keygate.

GET /health
  503 before the lifespan sets ``app.state.ready`` (startup in progress)
  200 afterwards, with the reachability of the shared database

A degraded store does not turn /health into an error status: the body says
"degraded" and the process keeps serving, since protected routes already
answer 503 on their own when the store is down.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from keygate import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Readiness + backend health.

    Response body (200)::

        {"status": "ok" | "degraded", "store": "healthy" | "unreachable", "version": "1.0.0"}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(status_code=503, detail="keygate is starting up")

    store_ok = await request.app.state.database.health_check()

    return {
        "status": "ok" if store_ok else "degraded",
        "store": "healthy" if store_ok else "unreachable",
        "version": __version__,
    }
