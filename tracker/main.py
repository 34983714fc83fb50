"""
Main FastAPI application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference  # type: ignore[import-untyped]
from starlette.exceptions import HTTPException as StarletteHTTPException

from tracker.api.router import api_router
from tracker.core.config import settings
from tracker.core.database import check_db_health, init_db
from tracker.core.exceptions import (
    TrackerError,
    http_exception_handler,
    tracker_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME}...")
    if not settings.SKIP_DB_INIT:
        await init_db()
        logger.info("Database initialized")
    else:
        logger.info("Skipping database initialization (SKIP_DB_INIT is set)")
    if settings.admin_api_keys:
        logger.info(f"Admin routes guarded by {len(settings.admin_api_keys)} API key(s)")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.PROJECT_NAME}...")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan,
)

app.add_exception_handler(TrackerError, tracker_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint ("health" is a reserved segment, so it never reaches /{user})
@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check endpoint"""
    database_ok = await check_db_health()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "degraded",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "database": "connected" if database_ok else "unavailable",
        },
    )


@app.get("/api/latest/docs", include_in_schema=False)
async def scalar_html():
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title,
    )


# Include API router
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    #
    # Use '$ python -m tracker.main' on the root directory of the project for development
    # Use '$ uvicorn tracker.main:app --host 0.0.0.0 --port 8080' for production deployment
    #
    uvicorn.run(
        "tracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level="debug" if settings.ENVIRONMENT == "development" else "info",
    )
