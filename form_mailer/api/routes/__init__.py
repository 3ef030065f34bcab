from __future__ import annotations

from form_mailer.api.routes.contact import router as contact_router
from form_mailer.api.routes.health import router as health_router
from form_mailer.api.routes.reminder import router as reminder_router

__all__ = ["contact_router", "health_router", "reminder_router"]
