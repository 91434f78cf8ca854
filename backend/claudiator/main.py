"""FastAPI application factory."""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from claudiator.api.v1 import router as v1_router
from claudiator.domain.common.errors import (
    AuthError,
    DomainError,
    StoreBusyError,
    StoreFatalError,
    ValidationError,
)
from claudiator.infra.db.store import DurableStore
from claudiator.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (StoreBusyError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StoreFatalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_body(kind: str, message: str, field: Optional[str] = None) -> dict:
    body = {"error": kind, "message": message}
    if field is not None:
        body["field"] = field
    return body


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and response. The Authorization header is never logged."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"📥 [SERVER REQUEST] {request.method} {request.url.path}")
        logger.debug(f"   Query params: {dict(request.query_params)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"📤 [SERVER RESPONSE] {request.method} {request.url.path} - "
            f"{response.status_code} ({process_time:.3f}s)"
        )
        return response


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. The store is created and its schema ensured before serving."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = DurableStore.from_settings(settings)
        # StoreFatalError here aborts startup: no traffic without a schema.
        await store.init_schema()
        app.state.store = store
        logger.info(f"{settings.app_name} {settings.app_version} ready")
        try:
            yield
        finally:
            await store.dispose()
            logger.info("Store closed")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Render request validation failures as validation_error with the failing field."""
        errors = exc.errors()
        logger.warning(f"❌ [VALIDATION ERROR] {request.method} {request.url.path}: {len(errors)} error(s)")
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or None
        message = first.get("msg", "Invalid request")
        if field:
            message = f"{field}: {message}"
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(ValidationError.kind, message, field),
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Map domain errors to their HTTP status and the stable error body."""
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_cls, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_cls):
                status_code = code
                break
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        if status_code >= 500:
            logger.error(f"[{exc.kind}] {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.kind, exc.message, getattr(exc, "field", None)),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(StoreFatalError.kind, "Internal server error"),
        )

    app.include_router(v1_router, prefix=settings.api_v1_prefix)
    return app
