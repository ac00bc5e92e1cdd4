"""
NACOS Complaint System - FastAPI application

Serves the JSON API under API_PREFIX and the dashboard section fragments
from the site root as /<section>.html.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from slowapi.errors import RateLimitExceeded

from complaint_api.core.config import settings
from complaint_api.core.database import init_db, close_db
from complaint_api.core.exceptions import ComplaintSystemError, error_response
from complaint_api.core.logging_config import logger
from complaint_api.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from complaint_api.core.rate_limiter import limiter, rate_limit_exceeded_handler
from complaint_api.api.router import api_router, API_ENDPOINTS
from complaint_api.api.endpoints import sections
import complaint_api.models  # noqa: F401  registers tables on Base.metadata


PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def check_settings() -> None:
    """Refuse to start without a database URL and real signing secrets"""
    problems = [
        name for name, value in (
            ("DATABASE_URL", settings.DATABASE_URL),
            ("SECRET_KEY", settings.SECRET_KEY),
            ("JWT_SECRET_KEY", settings.JWT_SECRET_KEY),
        )
        if not value or value in PLACEHOLDER_SECRETS
    ]
    if problems:
        logger.critical(f"Unset or placeholder settings: {', '.join(problems)}")
        raise RuntimeError(f"Configure {', '.join(problems)} before starting the API")

    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("Rate limiting is disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    check_settings()
    await init_db()
    logger.info("Database tables ready")

    yield

    logger.info(f"Stopping {settings.APP_NAME}")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Student complaint submission and administration API",
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# slowapi reads the limiter from app.state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs outermost
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


@app.exception_handler(ComplaintSystemError)
async def complaint_system_error_handler(request: Request, exc: ComplaintSystemError):
    logger.warning(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={"event_type": "domain_error", "error_code": exc.code}
    )
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred"
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get(settings.API_PREFIX, tags=["Health"])
async def api_info():
    """API status and endpoint listing"""
    return {
        "message": f"{settings.APP_NAME} API is running",
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "version": settings.API_VERSION,
        "endpoints": API_ENDPOINTS,
    }


app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(sections.router)


def run():
    """Serve the API with uvicorn"""
    import uvicorn
    uvicorn.run(
        "complaint_api.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
