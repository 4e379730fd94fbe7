"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invoiceflow.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from invoiceflow.api.middleware.error_handler import setup_exception_handlers
from invoiceflow.api.routes import (
    health_router,
    invoices_router,
    owners_router,
    settlements_router,
)
from invoiceflow.config import configure_logging, get_logger, get_settings
from invoiceflow.core.exceptions import DatabaseError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Initializes resources on startup and cleans up on shutdown.
    """
    settings = get_settings()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
    )

    # Initialize database
    try:
        from invoiceflow.infrastructure.storage.sqlite import get_pool
        from invoiceflow.infrastructure.storage.sqlite.migrations import initialize_database

        failed = [r for r in await initialize_database() if not r.success]
        if failed:
            raise DatabaseError(f"migration v{failed[0].version}", failed[0].error or "failed")
        logger.info("database_initialized")

        await get_pool()
        logger.info("connection_pool_ready")

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    if not settings.settlement.is_configured:
        logger.warning(
            "settlement_policy_not_configured",
            processor_fee_percent=settings.settlement.processor_fee_percent,
            gst_on_fee_percent=settings.settlement.gst_on_fee_percent,
        )

    logger.info("application_started")

    yield

    # Shutdown
    logger.info("application_stopping")

    try:
        from invoiceflow.infrastructure.storage.sqlite import close_pool

        await close_pool()
        logger.info("connection_pool_closed")

    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title="InvoiceFlow GST Engine",
        description="GST invoice tax computation, numbering and settlement",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(owners_router)
    app.include_router(invoices_router)
    app.include_router(settlements_router)

    # Root health endpoint (for k8s/docker health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        """Simple health check at root level."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "invoiceflow.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
