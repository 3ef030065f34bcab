"""Resend email client adapter."""

import asyncio
from typing import Any

import resend

from form_mailer.adapters.email.base import AbstractEmailClient, OutboundMessage


class ResendEmailClient(AbstractEmailClient):
    """Client for sending plain-text emails through Resend.

    The official SDK is synchronous, so each send runs in a worker thread and
    is bounded by ``timeout_seconds``. A send is never retried.
    """

    def __init__(self, api_key: str | None, timeout_seconds: float = 10.0) -> None:
        """Initialize the Resend client.

        Args:
            api_key: Resend API key (sends fail while it is unset).
            timeout_seconds: Upper bound for one send call in seconds.
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def build_params(message: OutboundMessage) -> dict[str, Any]:
        """Translate an OutboundMessage to Resend's send parameters."""
        params: dict[str, Any] = {
            "from": message.sender,
            "to": list(message.to),
            "subject": message.subject,
            "text": message.text,
        }
        if message.bcc:
            params["bcc"] = list(message.bcc)
        return params

    def _send_sync(self, params: dict[str, Any]) -> dict[str, Any]:
        resend.api_key = self.api_key
        return resend.Emails.send(params)

    async def send(self, message: OutboundMessage) -> str:
        """Send a message and return the Resend email id.

        Raises:
            RuntimeError: If Resend returns an error, the call raises, or it
                exceeds the configured timeout.
        """
        if not self.api_key:
            raise RuntimeError("Resend API key is not configured (RESEND_API_KEY)")

        params = self.build_params(message)

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self._send_sync, params),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise RuntimeError(
                f"Resend API timed out after {self.timeout_seconds}s"
            ) from exc
        except Exception as exc:
            raise RuntimeError(f"Resend API error: {str(exc)}") from exc

        email_id = response.get("id") if isinstance(response, dict) else None
        if not email_id:
            raise RuntimeError("Resend returned no email id")

        return str(email_id)
