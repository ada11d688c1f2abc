"""FastAPI Application Entry Point"""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.config import settings
from app.api.errors import validation_failed
from app.api.routes import bookings, contact
from app.services.validation import FieldError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()

API_VERSION = "1.0.0"
START_TIME = datetime.now(timezone.utc)
_START_MONOTONIC = time.monotonic()

# Initialize FastAPI app
app = FastAPI(
    title=settings.service_name,
    description="Car hire bookings and customer contact inquiries",
    version=API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def format_uptime(seconds: float) -> str:
    minutes, seconds = divmod(int(seconds), 60)
    return f"{minutes}m {seconds}s"


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring and the keep-alive pinger"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": format_uptime(time.monotonic() - _START_MONOTONIC),
        "service": settings.service_name,
        "version": API_VERSION,
        "serverStartTime": START_TIME.isoformat(),
        "environment": settings.environment,
    }


@app.get("/api/warmup")
async def warmup():
    """Cheap endpoint hit after a cold start"""
    logger.info("warmup_requested")
    return {
        "status": "warm",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.service_name,
        "version": API_VERSION,
        "docs": "/docs" if settings.is_development else None
    }


# Include routers
app.include_router(bookings.router, prefix="/api", tags=["bookings"])
app.include_router(contact.router, prefix="/api", tags=["contact"])


# Startup event
@app.on_event("startup")
async def startup_event():
    """Run on application startup"""
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(
        "application_starting",
        environment=settings.environment,
        upload_dir=str(settings.upload_dir),
        email_configured=bool(settings.resend_api_key)
    )


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown"""
    logger.info("application_shutting_down")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    """Render HTTP errors in the same envelope as successful responses"""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, status_code=exc.status_code, error=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc):
    """Malformed bodies and query parameters get the form error envelope instead of a 422"""
    errors = [
        FieldError(
            field=".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path")) or "body",
            message=error["msg"]
        )
        for error in exc.errors()
    ]
    logger.info("request_rejected", path=request.url.path, fields=[error.field for error in errors])
    return validation_failed(errors)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle uncaught exceptions"""
    logger.error(
        "uncaught_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": "An unexpected error occurred" if settings.is_production else str(exc)
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
