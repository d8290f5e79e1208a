"""Global error handlers: domain errors and failures as consistent JSON."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from streakboard.errors import StreakboardError, ValidationError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StreakboardError)
    async def domain_exception_handler(request: Request, exc: StreakboardError) -> JSONResponse:
        """Map the domain error taxonomy onto status codes."""
        content: dict[str, object] = {"detail": exc.message}
        if isinstance(exc, ValidationError):
            content["field"] = exc.field
        logger.info(
            "request_rejected",
            path=request.url.path,
            status=exc.status_code,
            error=type(exc).__name__,
            detail=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        content: dict[str, object] = {"detail": "Validation error", "errors": errors}
        if errors and errors[0].get("loc"):
            content["field"] = str(errors[0]["loc"][-1])
        return JSONResponse(status_code=422, content=jsonable_encoder(content))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
