"""Response builders for the form endpoints.

Every form response carries the same fixed CORS header set. JSON bodies are
always either ``{"error": str}`` or ``{"success": true, "message": str}``;
preflight responses have an empty body.
"""

from __future__ import annotations

from typing import Mapping

from fastapi import Response
from fastapi.responses import JSONResponse

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "86400",
}


def _with_cors(extra: Mapping[str, str] | None) -> dict[str, str]:
    headers = dict(CORS_HEADERS)
    if extra:
        headers.update(extra)
    return headers


def preflight_response() -> Response:
    """Build the empty 200 response for an OPTIONS preflight."""

    return Response(status_code=200, content=b"", headers=_with_cors(None))


def success_response(message: str) -> JSONResponse:
    """Build the 200 response for a delivered submission."""

    return JSONResponse(
        status_code=200,
        content={"success": True, "message": message},
        headers=_with_cors(None),
    )


def error_response(
    status_code: int,
    message: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Build an error response with the fixed CORS headers.

    Args:
        status_code: HTTP status code.
        message: Client-safe error message.
        headers: Optional extra headers (e.g., Retry-After).

    Returns:
        JSONResponse with ``{"error": message}`` body.
    """

    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=_with_cors(headers),
    )
