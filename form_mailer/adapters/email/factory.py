"""Factory for creating email client instances."""

import threading

from form_mailer.adapters.email.base import AbstractEmailClient
from form_mailer.adapters.email.resend_client import ResendEmailClient
from form_mailer.core.config import settings

_client: AbstractEmailClient | None = None
_client_lock = threading.Lock()


def create_email_client() -> AbstractEmailClient:
    """Instantiate the email client from settings.

    A missing RESEND_API_KEY does not fail here: the client refuses to send,
    so only submissions that reach the provider fail (preflights, throttled
    and invalid requests are still answered normally).

    Returns:
        AbstractEmailClient: Configured Resend client.
    """
    return ResendEmailClient(
        api_key=settings.resend.api_key,
        timeout_seconds=settings.resend.timeout_seconds,
    )


def get_email_client() -> AbstractEmailClient:
    """FastAPI dependency returning the process-wide email client."""
    global _client
    with _client_lock:
        if _client is None:
            _client = create_email_client()
        return _client
