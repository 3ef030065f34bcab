"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from form_mailer.api.routes import contact_router, health_router, reminder_router
from form_mailer.core.config import settings
from form_mailer.core.exception_handlers import setup_exception_handlers
from form_mailer.core.logging import configure_logging
from form_mailer.core.middleware import request_id_middleware
from form_mailer.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Form Mailer API",
        description=(
            "Receives contact and reminder form submissions, validates them, "
            "throttles abusive callers and sends a transactional email through "
            "Resend."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(contact_router, prefix="/v1")
    app.include_router(reminder_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
