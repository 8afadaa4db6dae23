#!/usr/bin/env python3
"""Ingestion Worker Startup Script for OrderStream.

Runs the ingestion worker on its own, without the HTTP API: consumes the
order stream, stores valid orders and forwards rejected payloads to the
dead-letter stream. Stops on SIGINT/SIGTERM after the current message.

Usage:
    python scripts/start_ingestion_worker.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    REDIS_URL: Redis connection string
    ORDER_STREAM: Stream to consume (default: orders)
    ORDER_CONSUMER_GROUP: Consumer group (default: order-consumer-group)
    ORDER_CONSUMER_NAME: Consumer name (default: order-consumer-1)
    DEAD_LETTER_STREAM: Dead-letter stream (default: orders.dlq)
    CACHE_SIZE: Order cache capacity (default: 1000)
    SHUTDOWN_TIMEOUT_SECONDS: Grace period on shutdown (default: 5)
    LOG_LEVEL / LOG_JSON: Logging options
"""

import logging
import os
import signal
import sys
import threading

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from orderstream.config import get_settings
from orderstream.database import create_session_factory, engine_from_settings, init_db
from orderstream.infrastructure.cache import LRUCache
from orderstream.infrastructure.feed import create_redis_client
from orderstream.infrastructure.repositories import OrderRepository
from orderstream.observability.logging_config import configure_logging
from orderstream.orders.cache_coordinator import CachedOrderRepository
from orderstream.workers import IngestionWorker

logger = logging.getLogger("orderstream.scripts.start_ingestion_worker")


def main() -> int:
    """Start the ingestion worker and block until a stop signal arrives."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    logger.info("=== OrderStream Ingestion Worker Starting ===")
    logger.info(f"Stream: {settings.ORDER_STREAM}")
    logger.info(f"Consumer: {settings.ORDER_CONSUMER_GROUP}/{settings.ORDER_CONSUMER_NAME}")
    logger.info(f"Dead letters: {settings.DEAD_LETTER_STREAM}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials

    engine = engine_from_settings(settings)
    init_db(engine)
    repository = CachedOrderRepository(
        OrderRepository(create_session_factory(engine)),
        LRUCache(settings.CACHE_SIZE),
    )
    worker = IngestionWorker.from_settings(settings, repository, create_redis_client(settings))

    stop_event = threading.Event()

    def request_stop(signum, _frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, stopping...")
        stop_event.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)

    logger.info("Press Ctrl+C to stop")
    try:
        worker.run(stop_event)
    finally:
        engine.dispose()
    logger.info("Ingestion worker exited")
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        logger.error(f"Ingestion worker failed: {e}", exc_info=True)
        sys.exit(1)
