"""Correlation id middleware for form traffic.

One form submission produces several log lines (rate limit decision,
validation outcome, provider call, error handler). They are tied together by
a correlation id that lives in a contextvar for the duration of the request
and is echoed back to the browser, so a user reporting a failed submission
can quote it.

Ids supplied by the caller are reused only when they look like an id: form
endpoints are public, and the value ends up verbatim in every log line.
"""

from __future__ import annotations

import re
import time
import uuid

from fastapi import Request, Response

from form_mailer.core.config import settings
from form_mailer.core.logging import clear_request_id, set_request_id

_ACCEPTED_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed caller id, otherwise mint a UUID4."""
    if incoming and _ACCEPTED_REQUEST_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a correlation id around the downstream handler.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response carrying the id under the configured
            header (LOG_REQUEST_ID_HEADER) and ``X-Request-Duration-ms``.
    """

    header_name = settings.log.request_id_header
    request_id = resolve_request_id(request.headers.get(header_name))
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault(
        "X-Request-Duration-ms", f"{(time.perf_counter() - start) * 1000:.2f}"
    )
    return response
