"""Tests for notification message building and delivery."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from form_mailer.adapters.email.base import OutboundMessage
from form_mailer.core.errors import EmailAppError
from form_mailer.schemas.submission import ContactSubmission, ReminderSubmission
from form_mailer.services.notifier import (
    CallerMeta,
    Notifier,
    build_contact_message,
    build_reminder_message,
    format_timestamp,
)

FIXED_NOW = datetime(2026, 10, 18, 22, 4, 5, tzinfo=timezone.utc)


def _contact(**overrides) -> ContactSubmission:
    data = {"firstName": "A", "lastName": "B", "email": "a@b.com", "message": "hi"}
    data.update(overrides)
    return ContactSubmission.model_validate(data)


def _reminder(**overrides) -> ReminderSubmission:
    data = {"firstName": "A", "lastName": "B", "email": "a@b.com"}
    data.update(overrides)
    return ReminderSubmission.model_validate(data)


class TestFormatTimestamp:
    def test_formats_in_los_angeles_time(self) -> None:
        assert format_timestamp(FIXED_NOW, "America/Los_Angeles") == (
            "October 18, 2026 at 03:04:05 PM"
        )

    def test_morning_hours_are_zero_padded(self) -> None:
        moment = datetime(2026, 1, 5, 17, 0, 9, tzinfo=timezone.utc)
        assert format_timestamp(moment, "America/Los_Angeles") == (
            "January 5, 2026 at 09:00:09 AM"
        )


class TestContactMessage:
    def test_builds_operator_notification(self) -> None:
        message = build_contact_message(
            _contact(),
            CallerMeta(client_ip="203.0.113.9", user_agent="pytest-agent"),
            "October 18, 2026 at 03:04:05 PM",
        )

        assert message.sender == "noreply@icodewith.ai"
        assert message.to == ["operator@example.com"]
        assert message.bcc == []
        assert message.subject == "New Contact Form Submission - iCodeWith.ai"
        assert message.text.startswith("New contact form submission from iCodeWith.ai\n\n")
        assert "Name: A B" in message.text
        assert "Email: a@b.com" in message.text
        assert "Reason: Not specified" in message.text
        assert "Message: hi" in message.text
        assert "Submitted: October 18, 2026 at 03:04:05 PM" in message.text
        assert "IP Address: 203.0.113.9" in message.text
        assert "User Agent: pytest-agent" in message.text
        assert message.text.endswith("This email was sent from the iCodeWith.ai contact form.")

    def test_includes_reason_and_defaults_user_agent(self) -> None:
        message = build_contact_message(
            _contact(reason="Workshop"),
            CallerMeta(client_ip="unknown"),
            "ts",
        )

        assert "Reason: Workshop" in message.text
        assert "User Agent: Not available" in message.text
        assert "IP Address: unknown" in message.text

    def test_missing_recipient_raises_email_error(self) -> None:
        with patch("form_mailer.services.notifier.settings") as mock_settings:
            mock_settings.contact.recipient_email = None

            with pytest.raises(EmailAppError) as exc_info:
                build_contact_message(_contact(), CallerMeta(client_ip="x"), "ts")

        assert exc_info.value.code == "email_missing_recipient"


class TestReminderMessage:
    def test_builds_confirmation_with_admin_bcc(self) -> None:
        message = build_reminder_message(_reminder(), CallerMeta(client_ip="x"), "ts")

        assert message.sender == "contact@send.icodewith.ai"
        assert message.to == ["a@b.com"]
        assert message.bcc == ["admin@example.com"]
        assert message.subject == "Your iCodeWith.ai reminder is set!"
        assert message.text.startswith("Hi A,\n\nYour reminder is set!")
        assert "Page Name: Page title not available" in message.text
        assert "Page URL: Page URL not available" in message.text
        assert message.text.endswith("Have a great one!")

    def test_includes_page_details(self) -> None:
        message = build_reminder_message(
            _reminder(pageUrl="https://icodewith.ai/live", pageTitle="Live coding"),
            CallerMeta(client_ip="x"),
            "ts",
        )

        assert "Page Name: Live coding" in message.text
        assert "Page URL: https://icodewith.ai/live" in message.text

    def test_missing_admin_raises_email_error(self) -> None:
        with patch("form_mailer.services.notifier.settings") as mock_settings:
            mock_settings.reminder.admin_email = ""

            with pytest.raises(EmailAppError):
                build_reminder_message(_reminder(), CallerMeta(client_ip="x"), "ts")


class TestNotifier:
    @pytest.mark.asyncio
    async def test_sends_built_message_and_returns_id(self) -> None:
        client = AsyncMock()
        client.send.return_value = "re_123"
        notifier = Notifier(client, clock=lambda: FIXED_NOW)

        message_id = await notifier.send(
            "contact",
            build_contact_message,
            _contact(),
            CallerMeta(client_ip="1.1.1.1"),
        )

        assert message_id == "re_123"
        sent: OutboundMessage = client.send.await_args.args[0]
        assert "Submitted: October 18, 2026 at 03:04:05 PM" in sent.text

    @pytest.mark.asyncio
    async def test_provider_failure_becomes_email_error(self) -> None:
        client = AsyncMock()
        client.send.side_effect = RuntimeError("Resend API error: invalid from address")
        notifier = Notifier(client, clock=lambda: FIXED_NOW)

        with pytest.raises(EmailAppError) as exc_info:
            await notifier.send(
                "reminder",
                build_reminder_message,
                _reminder(),
                CallerMeta(client_ip="1.1.1.1"),
            )

        assert exc_info.value.code == "email_send_failed"
        assert client.send.await_count == 1
