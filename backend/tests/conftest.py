"""Pytest fixtures for OrderStream tests.

Provides reusable test fixtures for:
- In-memory SQLite store with the order tables created
- Order repository, LRU cache and cache-coordinated repository
- A valid sample order factory
- In-memory feed and dead-letter channel

Usage:
    def test_lookup(cached_repository, make_order):
        cached_repository.upsert(make_order())
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.engine import Engine

# Make backend/src importable without installing the package
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from orderstream.database import create_db_engine, create_session_factory, init_db
from orderstream.infrastructure.cache import LRUCache
from orderstream.infrastructure.repositories import OrderRepository
from orderstream.orders.cache_coordinator import CachedOrderRepository
from orderstream.schemas.order import Delivery, Item, Order, Payment
from orderstream.workers.dead_letter import DeadLetterRouter

from fakes import InMemoryDeadLetterChannel, InMemoryFeed


def build_order(order_uid: str = "b563feb7b2b84b6test", **overrides) -> Order:
    """Build a valid order; keyword overrides replace top-level fields."""
    data = dict(
        order_uid=order_uid,
        track_number="WBILMTESTTRACK",
        entry="WBIL",
        delivery=Delivery(
            name="Test Testov",
            phone="+9720000000",
            zip="2639809",
            city="Kiryat Mozkin",
            address="Ploshad Mira 15",
            region="Kraiot",
            email="test@gmail.com",
        ),
        payment=Payment(
            transaction=order_uid,
            request_id="",
            currency="USD",
            provider="wbpay",
            amount=1817,
            payment_dt=1637907727,
            bank="alpha",
            delivery_cost=1500,
            goods_total=317,
            custom_fee=0,
        ),
        items=[
            Item(
                chrt_id=9934930,
                track_number="WBILMTESTTRACK",
                price=453,
                rid="ab4219087a764ae0btest",
                name="Mascaras",
                sale=30,
                size="0",
                total_price=317,
                nm_id=2389212,
                brand="Vivienne Sabo",
                status=202,
            )
        ],
        locale="en",
        internal_signature="",
        customer_id="test",
        delivery_service="meest",
        shardkey="9",
        sm_id=99,
        date_created=datetime(2021, 11, 26, 6, 22, 19, tzinfo=timezone.utc),
        oof_shard="1",
    )
    data.update(overrides)
    return Order(**data)


@pytest.fixture
def make_order():
    """Factory fixture returning fresh valid orders."""
    return build_order


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the order tables created."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def repository(session_factory) -> OrderRepository:
    return OrderRepository(session_factory)


@pytest.fixture
def cache() -> LRUCache:
    return LRUCache(capacity=100)


@pytest.fixture
def cached_repository(repository, cache) -> CachedOrderRepository:
    return CachedOrderRepository(repository, cache)


@pytest.fixture
def feed() -> InMemoryFeed:
    return InMemoryFeed()


@pytest.fixture
def dead_letter_channel() -> InMemoryDeadLetterChannel:
    return InMemoryDeadLetterChannel()


@pytest.fixture
def dead_letter_router(dead_letter_channel) -> DeadLetterRouter:
    return DeadLetterRouter(dead_letter_channel)
