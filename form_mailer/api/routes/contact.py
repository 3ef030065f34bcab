from fastapi import APIRouter, Depends, Request, Response

from form_mailer.api.dependencies import get_submission_service
from form_mailer.schemas.submission import ContactSubmission, ErrorResponse, SuccessResponse
from form_mailer.services.notifier import build_contact_message
from form_mailer.services.submission_service import FormDefinition, SubmissionService

router = APIRouter(tags=["Forms"])

CONTACT_FORM = FormDefinition(
    name="contact",
    schema=ContactSubmission,
    build_message=build_contact_message,
    success_message="Your message has been sent successfully!",
)

_OTHER_METHODS = ["OPTIONS", "GET", "HEAD", "PUT", "PATCH", "DELETE"]


@router.post(
    "/contact-form",
    responses={
        200: {"model": SuccessResponse},
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ContactSubmission.model_json_schema(by_alias=True)}},
        }
    },
)
async def submit_contact_form(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> Response:
    """Contact form endpoint.

    Validates the inquiry and emails it to the site operator. Callers are
    limited to a fixed number of submissions per window.

    Returns:
        Response: ``{"success": true, "message": ...}`` on delivery.
    """
    return await service.handle(request, CONTACT_FORM)


@router.api_route("/contact-form", methods=_OTHER_METHODS, include_in_schema=False)
async def contact_form_other_methods(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> Response:
    """Answer CORS preflights; reject any other method with 405."""
    return await service.handle(request, CONTACT_FORM)
