"""Integration tests for GET /health and GET /."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from keygate import __version__
from keygate.main import attach_backends, create_app

pytestmark = pytest.mark.asyncio


async def _get(app, path: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path)


async def test_health_503_before_ready() -> None:
    response = await _get(create_app(), "/health")
    assert response.status_code == 503
    assert response.json() == {"error": "keygate is starting up"}


async def test_health_ok_when_ready(database) -> None:
    app = create_app()
    attach_backends(app, database)
    app.state.ready = True

    response = await _get(app, "/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "store": "healthy", "version": __version__}


async def test_health_degraded_when_store_down(database) -> None:
    app = create_app()
    attach_backends(app, database)
    app.state.ready = True
    await database.close()

    response = await _get(app, "/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["store"] == "unreachable"


async def test_root_is_unauthenticated() -> None:
    response = await _get(create_app(), "/")
    assert response.status_code == 200
    assert response.json()["service"] == "keygate"


async def test_health_does_not_require_store_health_method(database) -> None:
    """A lookup-only credential store still yields a working /health."""

    class LookupOnlyStore:
        async def get_by_secret(self, secret):
            return None

    app = create_app()
    attach_backends(app, database)
    app.state.credential_store = LookupOnlyStore()
    app.state.ready = True

    response = await _get(app, "/health")

    assert response.status_code == 200
    assert response.json()["store"] == "healthy"
