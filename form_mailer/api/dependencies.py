"""FastAPI dependencies shared by the form routes."""

from __future__ import annotations

from fastapi import Depends

from form_mailer.adapters.email.base import AbstractEmailClient
from form_mailer.adapters.email.factory import get_email_client
from form_mailer.adapters.rate_limit.base import AbstractRateLimiter
from form_mailer.core.rate_limit import get_rate_limiter
from form_mailer.services.notifier import Notifier
from form_mailer.services.submission_service import SubmissionService


def get_submission_service(
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
    email_client: AbstractEmailClient = Depends(get_email_client),
) -> SubmissionService:
    """Assemble the submission pipeline from the process-wide limiter and client."""

    return SubmissionService(limiter=limiter, notifier=Notifier(email_client))
