"""
StarShield: Warranty & Claims Service.

Main FastAPI application for device registration, warranty validation
and claims processing.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.warranty.dependencies import get_notifier
from services.warranty.exceptions import (
    ClaimNotFoundError,
    DeviceNotFoundError,
    IdentifierCollisionError,
    RegistrationFailedError,
    WarrantyServiceError,
)
from services.warranty.notifications import ResendNotifier
from services.warranty.routes import claims_router, warranties_router
from shared.config import StoreBackend, settings
from shared.database import MongoDBClient
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models import ErrorResponse, HealthResponse


setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="starshield-warranty",
)

logger = get_logger(__name__)

SERVICE_VERSION = "0.1.0"

# Everything else in the hierarchy is a client-side business violation (400).
ERROR_STATUS: dict[type[WarrantyServiceError], int] = {
    DeviceNotFoundError: status.HTTP_404_NOT_FOUND,
    ClaimNotFoundError: status.HTTP_404_NOT_FOUND,
    IdentifierCollisionError: status.HTTP_409_CONFLICT,
    RegistrationFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: WarrantyServiceError) -> int:
    """HTTP status for a lifecycle error."""
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def _error(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, error_code=code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "warranty_service_starting",
        environment=settings.environment.value,
        store_backend=settings.store_backend.value,
        email_mode=settings.email.mode.value,
        port=settings.port,
    )

    if settings.store_backend == StoreBackend.MONGODB:
        try:
            await MongoDBClient.create_indexes()
        except Exception as e:
            logger.error("startup_failed", error=str(e))
            raise

    yield

    logger.info("warranty_service_shutting_down")
    notifier = get_notifier()
    if isinstance(notifier, ResendNotifier):
        await notifier.close()
    if settings.store_backend == StoreBackend.MONGODB:
        await MongoDBClient.close()


app = FastAPI(
    title="StarShield Garantias",
    description="Device warranty registration, validation and claims",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_tags=[
        {"name": "warranty", "description": "Device registration and warranty validation"},
        {"name": "claims", "description": "Warranty claims"},
        {"name": "health", "description": "Service health checks"},
    ],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Any) -> Any:
    """Bind a request id and client address to every log line of the request."""
    clear_context()
    request_id = request.headers.get("x-request-id") or uuid4().hex
    bind_context(
        request_id=request_id,
        client_ip=request.client.host if request.client else "unknown",
        path=request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(warranties_router, prefix="/api/v1")
app.include_router(claims_router, prefix="/api/v1")


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Service health check endpoint."""
    components: dict[str, dict[str, Any]] = {}

    if settings.store_backend == StoreBackend.MONGODB:
        components["mongodb"] = await MongoDBClient.health_check()
    else:
        components["memory_store"] = {"status": "healthy"}

    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service="starshield-warranty",
        version=SERVICE_VERSION,
        components=components,
    )


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "StarShield Garantias",
        "version": SERVICE_VERSION,
        "docs": "/docs",
    }


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(WarrantyServiceError)
async def warranty_error_handler(request: Request, exc: WarrantyServiceError) -> JSONResponse:
    """Translate lifecycle errors into structured HTTP errors."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "request_rejected",
        error_code=exc.code,
        status_code=status_code,
        path=request.url.path,
    )
    return _error(status_code, exc.message, exc.code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with field-level messages."""
    messages = [
        f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=messages)
    body = ErrorResponse(
        error="; ".join(messages) or "Invalid request",
        error_code="VALIDATION_ERROR",
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.warranty.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
