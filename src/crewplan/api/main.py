"""
CrewPlan API Main Application

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from crewplan.api.errors import domain_error_handler
from crewplan.api.routers import absences, allocations, availability, conflicts
from crewplan.domain.errors import DomainError
from crewplan.platform.config import settings
from crewplan.platform.logging import bind_request_context, configure_logging, get_logger
from crewplan.storage.database import DatabaseAdapter, DatabaseConfig

# Configure logging on import
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting CrewPlan API...")
    config = DatabaseConfig()
    database = DatabaseAdapter(config)
    try:
        await database.connect()
        if config.is_sqlite:
            await database.create_all()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise
    app.state.database = database
    logger.info("Database initialized.")

    yield

    logger.info("Shutting down CrewPlan API...")
    await database.close()
    app.state.database = None
    logger.info("Resources closed.")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Allocation scheduling and absence conflict engine",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, domain_error_handler)

    @app.middleware("http")
    async def request_log_context(request: Request, call_next):
        bind_request_context(
            method=request.method,
            path=request.url.path,
            tenant_id=request.query_params.get("tenant_id"),
        )
        return await call_next(request)

    # =========================================================================
    # OBSERVABILITY
    # =========================================================================

    app.mount("/metrics", make_asgi_app())

    # =========================================================================
    # HEALTH ENDPOINTS
    # =========================================================================

    @app.get("/health/live", tags=["Health"])
    async def liveness() -> dict:
        """Liveness probe - is the service running?"""
        return {"status": "alive"}

    @app.get("/health/ready", tags=["Health"])
    async def readiness() -> dict:
        """Readiness probe - can the service reach its database?"""
        database = getattr(app.state, "database", None)
        healthy = bool(database) and await database.health_check()
        return {
            "status": "ready" if healthy else "not_ready",
            "version": settings.VERSION,
            "checks": {"database": "healthy" if healthy else "unhealthy"},
        }

    # =========================================================================
    # API ROUTERS
    # =========================================================================

    app.include_router(allocations.router, prefix="/api/v1/allocations", tags=["Allocations"])
    app.include_router(conflicts.router, prefix="/api/v1/conflicts", tags=["Conflicts"])
    app.include_router(availability.router, prefix="/api/v1/availability", tags=["Availability"])
    app.include_router(absences.router, prefix="/api/v1/absences", tags=["Absences"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crewplan.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
