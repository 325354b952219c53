from collections.abc import Mapping, Sequence
from typing import Any, ClassVar, cast
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from bookstore.core.logging import get_logger


class AppError(StarletteHTTPException):
    """Base for domain errors; rendered by the HTTP exception handler."""

    status: ClassVar[int] = HTTP_400_BAD_REQUEST
    error_type: ClassVar[str] = "http_error"

    def __init__(self, message: str, details: dict[str, object] | None = None):
        super().__init__(status_code=self.status, detail=message)
        self.details: dict[str, object] | None = details


class InvalidInputError(AppError):
    status = HTTP_400_BAD_REQUEST
    error_type = "invalid_input"

    @classmethod
    def from_validation(cls, exc: ValidationError, message: str = "Invalid input format") -> "InvalidInputError":
        return cls(message, details={"errors": _serialize_validation_errors(exc.errors())})


class UnauthorizedError(AppError):
    status = HTTP_401_UNAUTHORIZED
    error_type = "unauthorized"


class ForbiddenError(AppError):
    status = HTTP_403_FORBIDDEN
    error_type = "forbidden"


class NotFoundError(AppError):
    status = HTTP_404_NOT_FOUND
    error_type = "not_found"


class ConflictError(AppError):
    status = HTTP_409_CONFLICT
    error_type = "conflict"


class InsufficientStockError(AppError):
    status = HTTP_400_BAD_REQUEST
    error_type = "insufficient_stock"


class ErrorBody(BaseModel):
    """Structured error body."""
    type: str
    details: dict[str, object] | None = None


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody
    meta: dict[str, object]


def _build_meta(request: Request) -> dict[str, object]:
    """Collect metadata for error responses."""
    return {
        "request_id": getattr(request.state, "correlation_id", "-"),
        "path": request.url.path,
        "method": request.method,
    }

def _serialize_validation_errors(errors: Sequence[Mapping[Any, Any]]) -> list[dict[str, object]]:
    """Serialize validation errors, handling non-serializable objects in context."""

    serialized_errors: list[dict[str, object]] = []

    for error in errors:
        serialized_error: dict[str, object] = dict(error)

        if "ctx" in serialized_error and isinstance(serialized_error["ctx"], dict):
            ctx: dict[str, object] = cast(dict[str, object], serialized_error["ctx"]).copy()

            if "error" in ctx:
                error_value = ctx["error"]

                if hasattr(error_value, "__str__"):
                    ctx["error"] = str(error_value)
            serialized_error["ctx"] = ctx
        # raw input may be bytes (multipart) or a file object
        if "input" in serialized_error and not isinstance(
            serialized_error["input"], (str, int, float, bool, list, dict, type(None))
        ):
            serialized_error["input"] = str(serialized_error["input"])
        serialized_errors.append(serialized_error)
    return serialized_errors


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("HTTP error", extra={"status_code": exc.status_code})

        if isinstance(exc, AppError):
            error_type = exc.error_type
            message = str(exc.detail)
            details = exc.details
        elif isinstance(exc.detail, dict):
            error_type = "http_error"
            message = "Request failed"
            details = cast(dict[str, object], exc.detail)
        else:
            error_type = "http_error"
            message = exc.detail or "HTTP error"
            details = None

        body = ErrorEnvelope(
            message=message,
            error=ErrorBody(type=error_type, details=details),
            meta=_build_meta(request),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.info("Validation error")
        body = ErrorEnvelope(
            message="Invalid input format",
            error=ErrorBody(
                type="validation_error",
                details={"errors": _serialize_validation_errors(exc.errors())},
            ),
            meta=_build_meta(request),
        )
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST, content=body.model_dump()
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("Database integrity error", extra={"error": str(exc)})

        error_message = str(exc.orig) if hasattr(exc, 'orig') and exc.orig else str(exc)
        lowered = error_message.lower()

        status_code = HTTP_400_BAD_REQUEST
        if "foreign key constraint" in lowered:
            message = "Referenced resource not found"
            error_type = "reference_not_found"
        elif "unique constraint" in lowered:
            message = "Resource already exists"
            error_type = "duplicate_resource"
            status_code = HTTP_409_CONFLICT
        elif "check constraint" in lowered:
            message = "Invalid data value"
            error_type = "invalid_value"
        else:
            message = "Data integrity violation"
            error_type = "integrity_error"

        body = ErrorEnvelope(
            message=message,
            error=ErrorBody(type=error_type),
            meta=_build_meta(request),
        )
        return JSONResponse(status_code=status_code, content=body.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.exception("Unhandled server error", exc_info=exc)
        body = ErrorEnvelope(
            message="Internal Server Error",
            error=ErrorBody(type="server_error"),
            meta=_build_meta(request),
        )
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump()
        )
