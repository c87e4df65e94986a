from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizhub.utils.exceptions import CustomException, ValidationError, ConflictError, DatabaseError
from quizhub.core.logging import get_logger
from quizhub.core.config import settings

logger = get_logger(__name__)


def render_error(request: Request, exc: CustomException) -> JSONResponse:
    """Log the error and send its envelope, tagged with the request's correlation id and path"""
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        exc.correlation_id = correlation_id

    log_extra = {
        "correlation_id": exc.correlation_id,
        "endpoint": request.url.path,
        "method": request.method,
        "status_code": exc.status_code,
    }
    if exc.status_code >= 500:
        logger.error(f"[{exc.error_code}] {exc.message}", extra=log_extra, exc_info=True)
    else:
        logger.warning(f"[{exc.error_code}] {exc.message}", extra=log_extra)

    body = exc.to_dict()
    body["error"]["path"] = request.url.path
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body),
        headers=exc.get_response_headers()
    )


def _field_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "field": str(error["loc"][-1]) if error.get("loc") else "unknown",
            "message": error.get("msg", "Validation failed"),
            "type": error.get("type", "validation_error"),
        }
        for error in errors
    ]


async def handle_custom_exception(request: Request, exc: CustomException) -> JSONResponse:
    return render_error(request, exc)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) and any HTTPException a dependency raises"""
    return render_error(request, CustomException(
        str(exc.detail), status_code=exc.status_code, error_code="HTTP_ERROR"
    ))


async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = _field_errors(exc.errors())
    return render_error(request, ValidationError(
        "Request validation failed",
        details={"validation_errors": field_errors, "error_count": len(field_errors)}
    ))


async def handle_database_exception(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Constraint violations the services did not catch are conflicts; anything else is a 500"""
    if isinstance(exc, IntegrityError):
        error = ConflictError("The operation conflicts with existing data")
    else:
        error = DatabaseError("A database error occurred")
    return render_error(request, error)


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    if settings.ENVIRONMENT == "production":
        error = CustomException("An unexpected error occurred")
    else:
        error = CustomException(f"Unexpected error: {exc}", details={"error_type": type(exc).__name__})
    return render_error(request, error)


def setup_exception_handlers(app: FastAPI):
    # fastapi.HTTPException subclasses the Starlette one, so one registration covers both
    app.add_exception_handler(CustomException, handle_custom_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(SQLAlchemyError, handle_database_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
