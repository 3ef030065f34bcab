from __future__ import annotations

from fastapi import APIRouter

from form_mailer.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and uptime monitors.

    Returns:
        dict: ``status`` set to "ok" and the active rate limit backend.
    """

    return {"status": "ok", "rate_limit_backend": settings.app.rate_limit_backend}
