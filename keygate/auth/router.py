"""Developer API endpoints guarded by the API key gate.

Provides:
  GET /v1/auth: confirm the presented key is valid and report the deployment mode

Every route here depends on ``valid_api_key``; the handler body only runs
after the gate accepted the request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from keygate.auth.middleware import valid_api_key
from keygate.auth.models import RequestContext
from keygate.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["auth"])


@router.get("/auth")
async def verify_auth(context: RequestContext = Depends(valid_api_key)) -> dict:
    """Report that the bearer key authenticated.

    Returns:
        JSON: {"authenticated": true, "multiUserMode": bool}
    """
    logger.info("API key verified", credential_id=context.credential.id)
    return {
        "authenticated": True,
        "multiUserMode": context.multi_user_mode,
    }
