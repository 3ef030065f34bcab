from fastapi import APIRouter, Depends, Request, Response

from form_mailer.api.dependencies import get_submission_service
from form_mailer.schemas.submission import ErrorResponse, ReminderSubmission, SuccessResponse
from form_mailer.services.notifier import build_reminder_message
from form_mailer.services.submission_service import FormDefinition, SubmissionService

router = APIRouter(tags=["Forms"])

REMINDER_FORM = FormDefinition(
    name="reminder",
    schema=ReminderSubmission,
    build_message=build_reminder_message,
    success_message="Your reminder has been set successfully!",
)

_OTHER_METHODS = ["OPTIONS", "GET", "HEAD", "PUT", "PATCH", "DELETE"]


@router.post(
    "/reminder-form",
    responses={
        200: {"model": SuccessResponse},
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ReminderSubmission.model_json_schema(by_alias=True)}},
        }
    },
)
async def submit_reminder_form(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> Response:
    """Reminder form endpoint.

    Sends the submitter a confirmation for the page they want to be reminded
    about, with the site admin blind-copied.
    """
    return await service.handle(request, REMINDER_FORM)


@router.api_route("/reminder-form", methods=_OTHER_METHODS, include_in_schema=False)
async def reminder_form_other_methods(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> Response:
    return await service.handle(request, REMINDER_FORM)
