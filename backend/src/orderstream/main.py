"""OrderStream - Main FastAPI Application

Order ingestion and lookup service.

This module creates and configures the FastAPI application:
- Lifespan wiring of the store, cache, query service and ingestion worker
- Middleware (request ID correlation)
- Exception handlers
- Order lookup and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, get_settings
from .database import create_session_factory, engine_from_settings, init_db
from .errors import StoreError
from .infrastructure.cache import LRUCache
from .infrastructure.feed import create_redis_client
from .infrastructure.repositories import OrderRepository
from .observability.logging_config import configure_logging
from .observability.metrics import cache_evictions_total
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router
from .orders.cache_coordinator import CachedOrderRepository
from .orders.router import router as orders_router
from .orders.service import OrderQueryService
from .workers.ingestion_worker import IngestionWorker

logger = logging.getLogger(__name__)


def _on_evict(order_uid: str, _order) -> None:
    cache_evictions_total.inc()
    logger.debug(f"cache evicted {order_uid}", extra={"order_uid": order_uid})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: create tables, build the cache-fronted repository and, when
      enabled, start the ingestion worker thread
    - Shutdown: stop the worker within the shutdown timeout, dispose the engine
    """
    settings: Settings = app.state.settings
    logger.info("OrderStream starting up...")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials

    engine = engine_from_settings(settings)
    init_db(engine)
    session_factory = create_session_factory(engine)

    cache = LRUCache(settings.CACHE_SIZE, on_evict=_on_evict)
    repository = CachedOrderRepository(OrderRepository(session_factory), cache)

    app.state.session_factory = session_factory
    app.state.order_repository = repository
    app.state.order_service = OrderQueryService(repository)

    worker: Optional[IngestionWorker] = None
    if settings.INGESTION_ENABLED:
        redis_client = create_redis_client(settings)
        app.state.redis = redis_client
        worker = IngestionWorker.from_settings(settings, repository, redis_client)
        worker.start()
        logger.info(
            f"Ingestion worker consuming '{settings.ORDER_STREAM}' "
            f"as {settings.ORDER_CONSUMER_GROUP}/{settings.ORDER_CONSUMER_NAME}"
        )
    else:
        logger.info("Ingestion disabled; serving lookups only")

    yield

    logger.info("OrderStream shutting down...")
    if worker is not None:
        worker.stop(timeout=settings.SHUTDOWN_TIMEOUT_SECONDS)
    engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment-derived settings)

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title="OrderStream API",
        description="Order ingestion and lookup service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Request ID Middleware (must be first for proper correlation)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Handle order store failures that escaped a route.

        Logs the full error but returns a generic message.
        """
        logger.error(f"Store error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "store unavailable"},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle database errors raised outside the repository."""
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "database error"},
        )

    app.include_router(orders_router)
    app.include_router(observability_router)

    return app


app = create_app()


def serve() -> None:
    """Run the API (and the in-process ingestion worker) under uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.HTTP_HOST, port=settings.HTTP_PORT, log_config=None)


if __name__ == "__main__":
    serve()
