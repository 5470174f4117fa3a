from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
from pymongo.errors import ConnectionFailure
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import DatabaseManager
from app.core.exceptions import AppError, DatabaseUnavailableError, ValidationError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import build_api_router
from app.models.user import DeploymentProfile, get_role_policy

PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "changeme", "secret", "your-secret-key"}


async def validate_critical_config(profile: Optional[str] = None):
    """Validate critical configuration at startup - fail fast if missing"""
    profile = profile or settings.DEPLOYMENT_PROFILE
    errors = []
    warnings = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is not set")

    if settings.JWT_SECRET_KEY in PLACEHOLDER_SECRETS:
        errors.append("JWT_SECRET_KEY is not set or using default value")

    try:
        DeploymentProfile(profile)
    except ValueError:
        errors.append(f"DEPLOYMENT_PROFILE '{profile}' is not one of tasks, grading")

    if not settings.ADMIN_REGISTRATION_CODE:
        warnings.append("ADMIN_REGISTRATION_CODE not set - elevated roles cannot be registered")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] ✓ Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Deployment profile: {app.state.profile}")
    logger.info("=" * 60)

    # Step 1: Validate critical configuration (fail fast!)
    await validate_critical_config(app.state.profile)

    # Step 2: Connect to MongoDB; exhausting the retries aborts startup
    db_manager = DatabaseManager()
    await db_manager.connect()
    await db_manager.ensure_indexes()
    app.state.db_manager = db_manager

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await db_manager.disconnect()
    app.state.db_manager = None


# Exception handlers
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    else:
        logger.info(f"[{exc.code}] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details[".".join(loc) or "body"] = err.get("msg", "Invalid value")
    error = ValidationError("Validation failed", details)
    return JSONResponse(status_code=error.status_code, content=error_response(error))


async def database_connection_handler(request: Request, exc: ConnectionFailure):
    # Covers ServerSelectionTimeoutError, NetworkTimeout and AutoReconnect
    logger.error(f"[Database] Connection failure during {request.method} {request.url.path}: {exc}")
    error = DatabaseUnavailableError("Database unavailable")
    return JSONResponse(status_code=error.status_code, content=error_response(error))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        error = AppError("Route not found", status_code=404, code="NOT_FOUND")
    else:
        error = AppError(str(exc.detail), status_code=exc.status_code, code="HTTP_ERROR")
    return JSONResponse(status_code=exc.status_code, content=error_response(error))


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    error = AppError("Internal server error")
    return JSONResponse(status_code=500, content=error_response(error))


def create_app(profile: Optional[str] = None) -> FastAPI:
    """Build the API for a deployment profile (default: DEPLOYMENT_PROFILE)"""
    profile = profile or settings.DEPLOYMENT_PROFILE

    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-role record management API: tasks or student grading",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False  # Prevent 307 redirects that break CORS
    )

    app.state.profile = profile
    app.state.role_policy = get_role_policy(profile)
    app.state.db_manager = None

    # Add rate limiter state and exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Add middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ConnectionFailure, database_connection_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": "1.0.0",
            "profile": profile,
            "docs": "/docs",
            "health": f"/api/{settings.API_VERSION}/health"
        }

    # Include API router
    app.include_router(build_api_router(profile), prefix=f"/api/{settings.API_VERSION}")

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
