"""
FastAPI application for the stock ledger.

The lifespan migrates the database and opens the connection pool before
the first request; all inventory state lives in SQLite, so nothing else
needs warming up.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockledger.api.middleware.error_handler import setup_exception_handlers
from stockledger.api.routes import health_router, inventory_router, reorder_requests_router
from stockledger.config import configure_logging, get_logger, get_settings
from stockledger.infrastructure.storage.sqlite import close_pool, get_pool
from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

logger = get_logger(__name__)


async def _open_storage() -> None:
    results = await run_migrations()
    failed = [r.version for r in results if not r.success]
    if failed:
        raise RuntimeError(f"Database migration failed: {', '.join(failed)}")

    pool = await get_pool()
    logger.info(
        "ledger_storage_ready",
        db_path=str(pool.db_path),
        migrations_applied=len(results),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "application_starting",
        environment=settings.environment,
        host=settings.api.host,
        port=settings.api.port,
    )

    try:
        await _open_storage()
    except Exception as e:
        logger.error("ledger_storage_failed", error=str(e))
        raise

    yield

    await close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the app: middleware, error handlers and the inventory routers."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title="Stock Ledger API",
        description="Material inventory ledger, reorder workflow and stock alerts",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Added last = outermost: errors escaping the logger still become JSON
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(inventory_router)
    app.include_router(reorder_requests_router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Load balancer health check; does not touch the database."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


def run() -> None:
    """``stockledger-api`` entry point."""
    settings = get_settings()
    uvicorn.run(
        "stockledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    run()
