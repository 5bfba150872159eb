"""Industry Hub - multi-industry accounts, sessions and dashboards API."""

import logging
import time
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.database import check_db_connected, get_db
from app.errors import (
    AppError,
    app_error_handler,
    error_body,
    http_exception_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from app.rate_limit import limiter
from app.routers import auth_router, dashboard_router

APP_NAME = "industry-hub"
APP_VERSION = "1.0.0"

settings = get_settings()

# Logging
logger = logging.getLogger("industry_hub")
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

problems = settings.validate()
if problems and settings.is_production:
    raise RuntimeError("Invalid configuration: " + "; ".join(problems))
for problem in problems:
    logger.warning("Configuration: %s", problem)

app = FastAPI(title="Industry Hub", version=APP_VERSION)
app.state.limiter = limiter
started_at = time.time()


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'; img-src 'self' data: https:"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = ("/api/auth/", "/api/dashboard/profile")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log state-changing calls on sensitive paths
        path = request.url.path
        method = request.method
        if method in ("POST", "PUT", "DELETE") and path.startswith(self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(auth_router)
app.include_router(dashboard_router)

# Error handlers
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# --- Rate limit error handler ---
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content=error_body("Too many requests, please try again later."))


# --- Health check ---
@app.get("/health")
@app.get("/api/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    """Health check endpoint with database connectivity."""
    return {
        "status": "ok",
        "app": APP_NAME,
        "version": APP_VERSION,
        "environment": settings.APP_ENV,
        "database": "connected" if check_db_connected(db) else "disconnected",
        "uptime": round(time.time() - started_at, 3),
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


@app.get("/")
def root() -> dict:
    """Welcome document."""
    return {
        "message": "Welcome to Industry Hub API",
        "version": APP_VERSION,
        "documentation": "/docs",
        "health": "/health",
    }
