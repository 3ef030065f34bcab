"""Email adapter layer - abstracts over the transactional email provider."""

from form_mailer.adapters.email.base import AbstractEmailClient, OutboundMessage
from form_mailer.adapters.email.factory import create_email_client, get_email_client
from form_mailer.adapters.email.resend_client import ResendEmailClient

__all__ = [
    "AbstractEmailClient",
    "OutboundMessage",
    "ResendEmailClient",
    "create_email_client",
    "get_email_client",
]
