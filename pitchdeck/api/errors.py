"""
API error handling and exception mapping.

Converts domain errors into HTTP responses with a uniform ``ErrorResponse``
body. Codes not listed in ``STATUS_BY_CODE`` are treated as server errors.
"""

from datetime import datetime, timezone

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pitchdeck.api.schemas import ErrorResponse
from pitchdeck.domain.exceptions import DomainError
from pitchdeck.infra.config.logging_config import get_logger

logger = get_logger(__name__)

STATUS_BY_CODE = {
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "SLIDE_INDEX_OUT_OF_RANGE": status.HTTP_400_BAD_REQUEST,
    "DECK_NOT_READY": status.HTTP_409_CONFLICT,
    "EMPTY_MESSAGE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "CHAT_BUSY": status.HTTP_409_CONFLICT,
    "CONFIGURATION_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
    "GENERATION_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def _error_body(code: str, detail: str) -> dict:
    return ErrorResponse(
        error=code, detail=detail, timestamp=datetime.now(timezone.utc)
    ).model_dump(mode="json")


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning("api.domain_error", code=exc.code, status=status_code, detail=exc.message)
    return JSONResponse(status_code=status_code, content=_error_body(exc.code, exc.message))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    formatted = []
    for error in exc.errors():
        location = " -> ".join(str(loc) for loc in error["loc"])
        formatted.append(f"{location}: {error['msg']}")
    detail = "Validation failed: " + "; ".join(formatted)
    logger.warning("api.validation_error", detail=detail)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("VALIDATION_ERROR", detail),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("api.http_error", status=exc.status_code, detail=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(f"HTTP_{exc.status_code}", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.unexpected_error", error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_error_handlers(app) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
