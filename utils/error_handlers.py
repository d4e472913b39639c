from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from logger import logger
from service.errors import GradeRecordError, StorageError, ValidationFailed
from service.validation import format_errors

ROUTE_NOT_FOUND = "route not found"
INTERNAL_ERROR = "internal server error"


def error_response(
    status_code: int,
    message: str,
    error: Optional[str] = None,
    errors: Optional[List[str]] = None,
) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def add_error_handlers(app: FastAPI, expose_details: bool = True):
    @app.exception_handler(GradeRecordError)
    async def grade_record_error_handler(request: Request, exc: GradeRecordError):
        if isinstance(exc, ValidationFailed):
            return error_response(
                exc.status_code,
                "invalid student data",
                error=exc.message,
                errors=exc.errors,
            )
        if isinstance(exc, StorageError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return error_response(
                exc.status_code,
                "error accessing the student database",
                error=exc.detail if expose_details else None,
            )
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = format_errors(exc.errors())
        return error_response(
            400, "invalid student data", error="; ".join(errors), errors=errors
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # a known path with the wrong method is still an unmatched route
        if exc.status_code in (404, 405):
            return error_response(404, ROUTE_NOT_FOUND)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(
            500, INTERNAL_ERROR, error=str(exc) if expose_details else None
        )
