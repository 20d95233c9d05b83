from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Not rate limited: load balancers must always be able to reach it.

    Returns:
        dict: ``status`` set to "ok" and the active environment name.
    """

    return {"status": "ok", "environment": settings.app_env}
