"""Email notifications for form submissions.

Builds the outbound message for each form and hands it to the email client.
A failed send is reported as EmailAppError and never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from form_mailer.adapters.email.base import AbstractEmailClient, OutboundMessage
from form_mailer.core.config import settings
from form_mailer.core.errors import EmailAppError
from form_mailer.schemas.submission import ContactSubmission, ReminderSubmission, Submission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerMeta:
    """Request metadata quoted in notification emails."""

    client_ip: str
    user_agent: str | None = None


def format_timestamp(moment: datetime, tz_name: str) -> str:
    """Format a moment like ``October 18, 2026 at 03:04:05 PM`` in ``tz_name``."""
    local = moment.astimezone(ZoneInfo(tz_name))
    return f"{local:%B} {local.day}, {local.year} at {local:%I:%M:%S %p}"


def build_contact_message(
    submission: ContactSubmission,
    meta: CallerMeta,
    timestamp: str,
) -> OutboundMessage:
    """Build the operator notification for a contact inquiry.

    Raises:
        EmailAppError: If no operator address is configured.
    """
    recipient = settings.contact.recipient_email
    if not recipient:
        raise EmailAppError(
            code="email_missing_recipient",
            message="Contact form requires CONTACT_RECIPIENT_EMAIL",
        )

    text = "\n".join(
        [
            "New contact form submission from iCodeWith.ai",
            "",
            f"Name: {submission.first_name} {submission.last_name}",
            f"Email: {submission.email}",
            f"Reason: {submission.reason or 'Not specified'}",
            f"Message: {submission.message}",
            "",
            f"Submitted: {timestamp}",
            f"IP Address: {meta.client_ip}",
            f"User Agent: {meta.user_agent or 'Not available'}",
            "",
            "---",
            "This email was sent from the iCodeWith.ai contact form.",
        ]
    )

    return OutboundMessage(
        sender=settings.contact.from_email,
        to=[recipient],
        subject=settings.contact.subject,
        text=text,
    )


def build_reminder_message(
    submission: ReminderSubmission,
    meta: CallerMeta,
    timestamp: str,
) -> OutboundMessage:
    """Build the reminder confirmation sent to the submitter.

    The admin address is blind-copied so reminders can be followed up.

    Raises:
        EmailAppError: If no admin address is configured.
    """
    admin = settings.reminder.admin_email
    if not admin:
        raise EmailAppError(
            code="email_missing_recipient",
            message="Reminder form requires REMINDER_ADMIN_EMAIL",
        )

    text = (
        f"Hi {submission.first_name},\n"
        "\n"
        "Your reminder is set! Here are the details:\n"
        f"Page Name: {submission.page_title or 'Page title not available'}\n"
        f"Page URL: {submission.page_url or 'Page URL not available'}\n"
        "\n"
        "Have a great one!"
    )

    return OutboundMessage(
        sender=settings.reminder.from_email,
        to=[submission.email],
        bcc=[admin],
        subject=settings.reminder.subject,
        text=text,
    )


MessageBuilder = Callable[..., OutboundMessage]


class Notifier:
    """Sends the notification email for a validated submission.

    Attributes:
        client: Email provider adapter.
        clock: Returns the current aware datetime (injectable for tests).
    """

    def __init__(
        self,
        client: AbstractEmailClient,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.client = client
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def send(
        self,
        form: str,
        builder: MessageBuilder,
        submission: Submission,
        meta: CallerMeta,
    ) -> str:
        """Build and deliver the message for ``submission``.

        Args:
            form: Form name, used for log context.
            builder: Function turning the submission into an OutboundMessage.
            submission: Validated submission.
            meta: Caller metadata.

        Returns:
            str: Provider message id.

        Raises:
            EmailAppError: If the message cannot be built or delivered.
        """
        timestamp = format_timestamp(self.clock(), settings.form.timezone)
        message = builder(submission, meta, timestamp)

        try:
            message_id = await self.client.send(message)
        except Exception as exc:
            logger.error(
                "email.send_failed",
                extra={
                    "form": form,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise EmailAppError(
                code="email_send_failed",
                message=str(exc),
                details={"provider": "resend"},
            ) from exc

        logger.info(
            "email.sent",
            extra={"form": form, "message_id": message_id},
        )
        return message_id
