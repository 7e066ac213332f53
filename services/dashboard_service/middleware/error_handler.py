from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.logging_config import get_logger
from services.dashboard_service.config import settings

logger = get_logger(__name__)


class DashboardAPIError(Exception):
    """An error rendered to the client as ``{"error": ..., "details": ...}``."""

    def __init__(self, status_code: int, error: str, details: str | None = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_content(self) -> dict:
        content = {"error": self.error}
        if self.details is not None:
            content["details"] = self.details
        return content


def setup_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(DashboardAPIError)
    async def dashboard_error_handler(request: Request, exc: DashboardAPIError):
        request_id = getattr(request.state, "request_id", "unknown")

        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Dashboard API error",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
                "error": exc.error,
                "details": exc.details,
                "path": request.url.path,
                "method": request.method,
                "service": settings.service_name
            }
        )

        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", "unknown")

        logger.warning(
            "HTTP exception",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
                "detail": exc.detail,
                "path": request.url.path,
                "method": request.method,
                "service": settings.service_name
            }
        )

        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            "Validation error",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "errors": errors,
                "path": request.url.path,
                "method": request.method,
                "service": settings.service_name
            }
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": errors}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "error": str(exc),
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
                "service": settings.service_name
            },
            exc_info=True
        )

        content = {"error": "Internal server error"}
        if not settings.is_production():
            content["details"] = f"{type(exc).__name__}: {str(exc)}"

        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
