"""Pydantic schemas for form submissions.

Clients post camelCase JSON (``firstName``, ``pageUrl``); the models expose
snake_case attributes. ``required_fields`` lists the wire names that must be
present and non-empty, in the order they are reported back to the client.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Submission(BaseModel):
    """Fields shared by every form."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="ignore",
        frozen=True,
    )

    required_fields: ClassVar[tuple[str, ...]] = ("firstName", "lastName", "email")

    first_name: str = Field(..., description="Submitter's first name.")
    last_name: str = Field(..., description="Submitter's last name.")
    email: str = Field(..., description="Submitter's email address.")


class ContactSubmission(Submission):
    """Contact inquiry sent to the site operator."""

    required_fields: ClassVar[tuple[str, ...]] = (
        "firstName",
        "lastName",
        "email",
        "message",
    )

    message: str = Field(..., description="Free-text inquiry.")
    reason: str | None = Field(
        default=None,
        description="Optional reason picked from the form's dropdown.",
    )


class ReminderSubmission(Submission):
    """Reminder request; the confirmation goes back to the submitter."""

    page_url: str | None = Field(
        default=None,
        description="URL of the page the reminder refers to.",
    )
    page_title: str | None = Field(
        default=None,
        description="Title of the page the reminder refers to.",
    )


class SuccessResponse(BaseModel):
    """Body returned when the email was handed to the provider."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Body returned for every failure."""

    error: str
