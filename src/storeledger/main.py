"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from storeledger.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    start_time = datetime.now()
    logger.info("app.startup", message="StoreLedger starting up", timestamp=start_time.isoformat())

    from storeledger.api.health import set_app_start_time
    from storeledger.core.sentry import init_sentry

    set_app_start_time(start_time)
    init_sentry()

    yield

    from storeledger.core.db import dispose_engine

    await dispose_engine()
    logger.info("app.shutdown", message="StoreLedger shutting down gracefully")


def _setup_middleware(app: FastAPI) -> None:
    """Configure all middleware in correct order."""
    # Last added runs outermost, so the request ID is bound before Sentry tags it
    from storeledger.middleware.logging import RequestLogMiddleware
    from storeledger.middleware.sentry import SentryContextMiddleware

    app.add_middleware(SentryContextMiddleware)
    app.add_middleware(RequestLogMiddleware)


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from storeledger.api.export_ledger import router as export_router
    from storeledger.api.health import router as health_router
    from storeledger.api.ledger import router as ledger_router
    from storeledger.api.ledger_entries import router as ledger_entries_router
    from storeledger.api.products import router as products_router
    from storeledger.api.reports import router as reports_router
    from storeledger.api.rates import router as rates_router
    from storeledger.api.returns import router as returns_router
    from storeledger.api.sales import router as sales_router

    app.include_router(health_router)
    app.include_router(products_router)
    app.include_router(rates_router)
    app.include_router(sales_router)
    app.include_router(returns_router)
    app.include_router(ledger_entries_router)
    app.include_router(ledger_router)
    app.include_router(export_router)
    app.include_router(reports_router)


def create_app() -> FastAPI:
    """Application factory for StoreLedger."""
    app = FastAPI(
        title="StoreLedger API",
        description="Multi-channel sales and daily settlement ledger",
        version="0.1.0",
        lifespan=lifespan,
    )

    from storeledger.core.exception_handlers import register_exception_handlers

    register_exception_handlers(app)
    _setup_middleware(app)
    _register_routers(app)

    logger.info(
        "app.configured",
        message="FastAPI application created successfully",
        environment=os.getenv("ENVIRONMENT", "development"),
    )

    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "storeledger.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
