"""Submission validation.

Turns a decoded JSON body into a typed submission or raises
ValidationAppError. Checks run in a fixed order so the client always gets the
first defect: body shape, required fields, field types, email format.
"""

from __future__ import annotations

import logging
import re
from typing import Any, TypeVar

from pydantic import ValidationError

from form_mailer.core.errors import ValidationAppError
from form_mailer.schemas.submission import Submission

logger = logging.getLogger(__name__)

# Permissive syntactic check: local@domain.tld, no whitespace, single "@"
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

INVALID_BODY_MESSAGE = "Invalid request body"
INVALID_EMAIL_MESSAGE = "Invalid email format"

SubmissionT = TypeVar("SubmissionT", bound=Submission)


def is_valid_email(value: str) -> bool:
    """Return True when ``value`` looks like ``local@domain.tld``."""
    return EMAIL_PATTERN.fullmatch(value) is not None


def find_missing_fields(payload: dict[str, Any], required: tuple[str, ...]) -> list[str]:
    """Return required fields that are absent, null, or empty.

    Any falsy value counts as missing, e.g. ``""``, ``None``, ``0``.
    """
    return [name for name in required if not payload.get(name)]


def validate_submission(payload: Any, schema: type[SubmissionT]) -> SubmissionT:
    """Validate a decoded JSON body against a submission schema.

    Args:
        payload: Decoded JSON body.
        schema: Submission model declaring ``required_fields``.

    Returns:
        The typed submission.

    Raises:
        ValidationAppError: If the body is not an object, a required field is
            missing, a field has the wrong type, or the email is malformed.
    """
    if not isinstance(payload, dict):
        logger.info(
            "form.validation_failed",
            extra={"reason": "body_not_object", "body_type": type(payload).__name__},
        )
        raise ValidationAppError(code="invalid_body", message=INVALID_BODY_MESSAGE)

    required = schema.required_fields
    missing = find_missing_fields(payload, required)
    if missing:
        logger.info(
            "form.validation_failed",
            extra={"reason": "missing_fields", "missing_fields": missing},
        )
        raise ValidationAppError(
            code="missing_required_fields",
            message=f"Missing required fields: {', '.join(required)}",
            details={"missing_fields": missing, "required_fields": list(required)},
        )

    try:
        submission = schema.model_validate(payload)
    except ValidationError as exc:
        logger.info(
            "form.validation_failed",
            extra={
                "reason": "invalid_field_types",
                "fields": [".".join(str(part) for part in err["loc"]) for err in exc.errors()],
            },
        )
        raise ValidationAppError(code="invalid_body", message=INVALID_BODY_MESSAGE) from exc

    if not is_valid_email(submission.email):
        logger.info("form.validation_failed", extra={"reason": "invalid_email"})
        raise ValidationAppError(code="invalid_email", message=INVALID_EMAIL_MESSAGE)

    return submission
