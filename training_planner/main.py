"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn training_planner.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import health, periods, workload
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs on startup and shutdown. Missing configuration is logged but does
    not stop the process, so /health/ready can report it.
    """
    settings = get_settings()

    logger.info(
        "Training Planner API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": settings.snowflake_mock_mode,
            "enforce_parent_containment": settings.enforce_parent_containment,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Training Planner API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Training periodization and load monitoring.

        ## Features

        - Plan seasons as macrocycles, mesocycles and microcycles
        - Break a cycle into Monday-aligned weeks and commit the drafts
        - Track acute/chronic workload ratio and injury-risk zone

        ## Authentication

        All `/api/v1` endpoints require an API key provided in the `X-API-Key` header.

        ## Workflow

        1. **Create a season**: `POST /api/v1/periods` with `level=macrocycle`
        2. **Draft the weeks**: `POST /api/v1/periods/{id}/generate-weeks`
        3. **Keep them**: `POST /api/v1/periods/commit`
        4. **Watch the load**: `GET /api/v1/workload`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Allowed origins come from the CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        periods.router,
        prefix="/api/v1/periods",
        tags=["Periods"],
    )

    app.include_router(
        workload.router,
        prefix="/api/v1/workload",
        tags=["Workload"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - points at the docs."""
        return {
            "message": "Training Planner API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side and returns a generic message so
        stack traces never reach clients.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": {
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error. Please contact support if this persists.",
                }
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "training_planner.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
