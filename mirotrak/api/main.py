"""FastAPI application setup and configuration."""

import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mirotrak.api.middleware.error_handler import (
    database_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from mirotrak.api.middleware.logging import LoggingMiddleware, setup_logging
from mirotrak.api.middleware.rate_limiter import check_rate_limit
from mirotrak.api.routes import (
    ai_photos,
    clients,
    database,
    documents,
    events,
    health,
    prompts,
    settings,
    subscriptions,
    templates,
)
from mirotrak.services.database import initialize_database, shutdown_database

SERVICE_VERSION = "1.0.0"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    setup_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "json"),
    )

    db_manager = initialize_database(os.getenv("DATABASE_URL"))
    await db_manager.initialize_async()
    if _env_flag("DATABASE_CREATE_TABLES"):
        await db_manager.create_tables()

    yield

    # Shutdown
    await shutdown_database()


# Create FastAPI application
app = FastAPI(
    title="MiroTrak",
    description="Client, subscription and document management backend for the MiroTrak dashboard",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ========== CORS Configuration ==========

allowed_origins = [
    origin.strip() for origin in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials="*" not in allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["Content-Disposition", "X-Request-ID", "Retry-After"],
)

# ========== Custom Middleware ==========

# Added last so it wraps every other middleware
app.add_middleware(LoggingMiddleware)

# ========== Exception Handlers ==========

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# ========== Route Registration ==========

# Health check routes
app.include_router(health.router)

# Dashboard API routes
for api_router in (
    clients.router,
    subscriptions.router,
    events.router,
    prompts.router,
    ai_photos.router,
    settings.router,
    templates.router,
    documents.router,
    database.router,
):
    app.include_router(api_router, dependencies=[Depends(check_rate_limit)])

# ========== Root Endpoint ==========


@app.get(
    "/",
    tags=["root"],
    summary="API root",
    description="Returns API information and available endpoints",
)
async def root() -> dict:
    """API root endpoint.

    Returns:
        API information and version
    """
    return {
        "service": "MiroTrak",
        "version": SERVICE_VERSION,
        "message": "API Gestion Clients",
        "documentation": {
            "openapi": "/openapi.json",
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": {
            "liveness": "/v1/liveness",
            "readiness": "/v1/readiness",
            "health": "/v1/health",
        },
    }


# ========== Development Server ==========

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mirotrak.api.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info",
    )
