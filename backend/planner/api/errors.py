"""Maps planner failures to HTTP responses with a uniform error envelope."""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.planner.errors import (
    CapacityExceededError,
    CityMismatchError,
    ConcurrentModificationError,
    DuplicateAcrossDaysError,
    DuplicateInRequestError,
    ExternalServiceUnavailableError,
    FlightImmutableError,
    InvalidInputError,
    NotFoundError,
    PlannerError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    InvalidInputError.code: status.HTTP_400_BAD_REQUEST,
    NotFoundError.code: status.HTTP_404_NOT_FOUND,
    CapacityExceededError.code: 422,
    FlightImmutableError.code: 422,
    DuplicateInRequestError.code: 422,
    CityMismatchError.code: 422,
    DuplicateAcrossDaysError.code: status.HTTP_409_CONFLICT,
    ConcurrentModificationError.code: status.HTTP_409_CONFLICT,
    UnauthorizedError.code: status.HTTP_403_FORBIDDEN,
    ExternalServiceUnavailableError.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_content(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=status_code,
        content=error_content(exc.code, exc.message, exc.details),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    code = "UNAUTHENTICATED" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(code, str(exc.detail)),
        headers=exc.headers,
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc", [])
    path = ".".join(str(item) for item in loc if item != "body")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_content(
            InvalidInputError.code,
            "Request is invalid",
            {"field": path, "reason": first_error.get("msg")},
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled server error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("INTERNAL_ERROR", "Internal server error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlannerError, planner_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, request_validation_exception_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
