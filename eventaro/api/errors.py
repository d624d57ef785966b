"""
Exception handlers that turn every failure into the same envelope:

    {"statusCode": 404, "message": "Event not found", "error": "Not Found"}

Persistence errors are translated here so storage-specific shapes never reach
the client: unique/foreign-key violations -> 409, missing row -> 404,
anything else from the data layer -> 500.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventaro.core.logging import get_logger
from eventaro.schemas.error import ErrorResponse

logger = get_logger(__name__)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    try:
        reason = HTTPStatus(status_code).phrase
    except ValueError:
        reason = "Error"
    body = ErrorResponse(status_code=status_code, message=message, error=reason)
    if status_code >= 500:
        logger.error("request_error", status_code=status_code, message=message)
    else:
        logger.warning("request_rejected", status_code=status_code, message=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(exc.status_code, detail, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, _validation_message(exc))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    return error_response(409, "A record with this value already exists.")


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(404, "Record not found.")


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database_error", error=str(exc))
    return error_response(500, "A database error occurred.")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc))
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
