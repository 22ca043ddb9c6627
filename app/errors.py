import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import is_production
from app.schemas import ErrorResponse

logger = logging.getLogger(__name__)

SMS_SEND_FAILED = "Failed to send SMS"
SMS_NOT_CONFIGURED = "SMS service not properly configured"
UNEXPECTED_ERROR = "An unexpected error occurred"


class ApiError(Exception):
    """Error converted to the `{success: false, error, details?}` envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        error: str,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class SmsValidationError(BadRequestError):
    pass


class SmsConfigurationError(ApiError):
    def __init__(self, details: str | None = None) -> None:
        super().__init__(SMS_NOT_CONFIGURED, details=details)


class SmsGatewayResponseError(ApiError):
    """The gateway answered with a non-2xx status; the status passes through."""


class SmsGatewayUnavailableError(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, details: str | None = None) -> None:
        super().__init__("No response from SMS service", details=details)


class SmsRequestError(ApiError):
    def __init__(self, details: str | None = None) -> None:
        super().__init__("Failed to send SMS request", details=details)


def error_response(
    status_code: int, error: str, details: Any | None = None
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        details=None if is_production() else details,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return error_response(exc.status_code, exc.error, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Invalid request body", details
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            extra={"method": request.method, "path": request.url.path},
            exc_info=exc,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, UNEXPECTED_ERROR, str(exc)
        )
