import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from diet_tracker.models.schemas import ErrorResponse
from diet_tracker.services.diet_log_service import DietLogNotFoundError

logger = logging.getLogger(__name__)

GENERIC_DB_ERROR = "Database error"


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # loc is ("body", "userId") / ("path", "entry_id"); the first item is the source.
        loc = [str(p) for p in err.get("loc", ())[1:]]
        field = ".".join(loc) if loc else "body"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI, expose_error_details: bool = False) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = describe_validation_error(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return error_response(message, 400)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(DietLogNotFoundError)
    async def _not_found(request: Request, exc: DietLogNotFoundError) -> JSONResponse:
        return error_response("Diet log not found", 404)

    async def _storage(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Database failure on %s %s", request.method, request.url.path)
        message = str(exc) if expose_error_details else GENERIC_DB_ERROR
        return error_response(message, 500)

    app.add_exception_handler(SQLAlchemyError, _storage)
    # asyncpg raises OSError (refused, reset, DNS) outside SQLAlchemy's wrapping.
    app.add_exception_handler(OSError, _storage)

    # Runs inside ServerErrorMiddleware, which re-raises and logs the traceback itself.
    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        message = str(exc) if expose_error_details else "Internal server error"
        return error_response(message, 500)
