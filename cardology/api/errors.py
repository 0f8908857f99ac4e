"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module fournit une gestion centralisée des erreurs avec des enveloppes standardisées, des codes
d'erreur cohérents et l'identifiant de requête pour le tracing. Une table de référence indisponible
est signalée comme une erreur transitoire (503) que le client peut retenter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from cardology.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNPROCESSABLE_ENTITY,
)
from cardology.infra.table_repository import TableLoadError

log = structlog.get_logger(__name__)

DATA_UNAVAILABLE_MESSAGE = "Reference data unavailable, please retry"


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


class ErrorCodes:
    """Standard error codes for the API."""

    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Tables de référence
    DATA_UNAVAILABLE = "DATA_UNAVAILABLE"
    INVALID_BIRTH_DATE = "INVALID_BIRTH_DATE"


_STATUS_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    404: ErrorCodes.NOT_FOUND,
    405: ErrorCodes.METHOD_NOT_ALLOWED,
    422: ErrorCodes.VALIDATION_ERROR,
    500: ErrorCodes.INTERNAL_ERROR,
    503: ErrorCodes.SERVICE_UNAVAILABLE,
}


class APIError(HTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.details = details


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id, details=details)
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state."""
    trace_id = request.headers.get("X-Request-ID")
    if trace_id:
        return trace_id
    # posé par RequestIDMiddleware
    return getattr(request.state, "request_id", None)


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    trace_id = extract_trace_id(request)
    log.warning(
        "api_error",
        code=exc.code,
        error_message=exc.message,
        status_code=exc.status_code,
        trace_id=trace_id,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        trace_id=trace_id,
        details=exc.details,
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    if isinstance(exc, APIError):
        return handle_api_error(request, exc)
    trace_id = extract_trace_id(request)
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    log.warning(
        "http_exception",
        code=code,
        error_message=str(exc.detail),
        status_code=exc.status_code,
        trace_id=trace_id,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=code,
        message=str(exc.detail),
        trace_id=trace_id,
    )


def handle_table_load_error(request: Request, exc: TableLoadError) -> JSONResponse:
    """Table de référence indisponible: 503 retentable, sans détail interne."""
    trace_id = extract_trace_id(request)
    log.error("reference_data_unavailable", table=exc.table, reason=exc.reason, trace_id=trace_id)
    return create_error_response(
        status_code=HTTP_SERVICE_UNAVAILABLE,
        code=ErrorCodes.DATA_UNAVAILABLE,
        message=DATA_UNAVAILABLE_MESSAGE,
        trace_id=trace_id,
    )


def bad_request(message: str, details: dict[str, Any] | None = None) -> APIError:
    """Create a 400 Bad Request error."""
    return APIError(HTTP_BAD_REQUEST, ErrorCodes.BAD_REQUEST, message, details)


def invalid_birth_date(message: str) -> APIError:
    """Create a 422 error for an impossible birth date."""
    return APIError(HTTP_UNPROCESSABLE_ENTITY, ErrorCodes.INVALID_BIRTH_DATE, message)


def not_found(message: str) -> APIError:
    """Create a 404 Not Found error."""
    return APIError(HTTP_NOT_FOUND, ErrorCodes.NOT_FOUND, message)
