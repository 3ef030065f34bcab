"""Form submission pipeline shared by every form endpoint.

Each request runs, in order: method gate, rate limit, validation,
notification, response. Every step either passes its result forward or
raises an AppError that the exception handlers turn into a response.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal

from fastapi import Request, Response

from form_mailer.adapters.rate_limit.base import AbstractRateLimiter
from form_mailer.core.errors import MethodNotAllowedAppError
from form_mailer.core.exception_handlers import METHOD_NOT_ALLOWED_MESSAGE
from form_mailer.core.rate_limit import enforce_rate_limit, resolve_caller_identity
from form_mailer.core.responses import preflight_response, success_response
from form_mailer.core.validation import validate_submission
from form_mailer.schemas.submission import Submission
from form_mailer.services.notifier import CallerMeta, MessageBuilder, Notifier

logger = logging.getLogger(__name__)

GateDecision = Literal["preflight", "proceed"]


@dataclass(frozen=True)
class FormDefinition:
    """Everything that differs between two forms."""

    name: str
    schema: type[Submission]
    build_message: MessageBuilder
    success_message: str


def gate_request(method: str) -> GateDecision:
    """Decide what to do with a request before any business logic runs.

    Args:
        method: HTTP method of the request.

    Returns:
        "preflight" for OPTIONS, "proceed" for POST.

    Raises:
        MethodNotAllowedAppError: For any other method.
    """
    method = method.upper()
    if method == "OPTIONS":
        return "preflight"
    if method == "POST":
        return "proceed"
    raise MethodNotAllowedAppError(
        code="method_not_allowed",
        message=METHOD_NOT_ALLOWED_MESSAGE,
        details={"method": method},
    )


class SubmissionService:
    """Runs a form submission through gate, limiter, validator and notifier.

    Attributes:
        limiter: Rate limiter shared by all requests of the process.
        notifier: Builds and sends the notification email.
    """

    def __init__(self, limiter: AbstractRateLimiter, notifier: Notifier) -> None:
        self.limiter = limiter
        self.notifier = notifier

    async def handle(self, request: Request, form: FormDefinition) -> Response:
        """Process one request to a form endpoint.

        Args:
            request: Incoming request.
            form: Definition of the targeted form.

        Returns:
            Response: Preflight or success response.

        Raises:
            MethodNotAllowedAppError: Method is neither OPTIONS nor POST.
            RateLimitedAppError: Caller exceeded its submission budget.
            ValidationAppError: Payload failed validation.
            EmailAppError: The notification could not be sent.
            ValueError: The body is not valid JSON (handled as unexpected).
        """
        if gate_request(request.method) == "preflight":
            return preflight_response()

        identity = resolve_caller_identity(request.headers)
        # Off the event loop: a remote store may block on network I/O
        await asyncio.to_thread(enforce_rate_limit, self.limiter, identity, form=form.name)

        payload = await request.json()
        submission = validate_submission(payload, form.schema)

        meta = CallerMeta(
            client_ip=identity,
            user_agent=request.headers.get("user-agent"),
        )
        await self.notifier.send(form.name, form.build_message, submission, meta)

        logger.info("form.submitted", extra={"form": form.name})
        return success_response(form.success_message)
