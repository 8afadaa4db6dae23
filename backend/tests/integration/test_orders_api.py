"""Integration tests for the order lookup and observability endpoints"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from orderstream.config import Settings
from orderstream.dependencies import get_db, get_order_service, get_redis_client
from orderstream.errors import StoreError
from orderstream.main import create_app
from orderstream.orders.service import OrderQueryService

pytestmark = pytest.mark.integration


@pytest.fixture
def app(cached_repository, session_factory):
    app = create_app(Settings(DATABASE_URL="sqlite://", INGESTION_ENABLED=False, LOG_JSON=False))

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_order_service] = lambda: OrderQueryService(cached_repository)
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_redis_client] = lambda: None
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


class TestGetOrder:
    """GET /api/orders/{order_uid}"""

    def test_returns_stored_order(self, client, cached_repository, make_order):
        order = make_order()
        cached_repository.upsert(order)

        response = client.get(f"/api/orders/{order.order_uid}")

        assert response.status_code == 200
        data = response.json()
        assert data["order_uid"] == order.order_uid
        assert data["delivery"]["phone"] == "+9720000000"
        assert data["payment"]["amount"] == 1817
        assert data["items"][0]["rid"] == "ab4219087a764ae0btest"
        assert data["date_created"].startswith("2021-11-26T06:22:19")

    def test_response_has_request_id(self, client, cached_repository, make_order):
        cached_repository.upsert(make_order())
        response = client.get("/api/orders/b563feb7b2b84b6test", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_unknown_order_is_404(self, client):
        response = client.get("/api/orders/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "order not found"}

    def test_store_failure_is_500(self, app, client):
        service = MagicMock()
        service.get_order.side_effect = StoreError("db down")
        app.dependency_overrides[get_order_service] = lambda: service

        response = client.get("/api/orders/any")

        assert response.status_code == 500
        assert response.json() == {"error": "failed to get order"}

    def test_service_not_ready_is_503(self, app):
        del app.dependency_overrides[get_order_service]
        response = TestClient(app).get("/api/orders/any")
        assert response.status_code == 503


class TestObservabilityEndpoints:
    """/health, /ready, /metrics"""

    def test_health_degraded_without_redis(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["redis"]["status"] == "degraded"

    def test_health_with_redis(self, app, client):
        redis_client = MagicMock()
        redis_client.ping.return_value = True
        app.dependency_overrides[get_redis_client] = lambda: redis_client

        response = client.get("/health")

        assert response.json()["status"] == "healthy"

    def test_health_unhealthy_redis_is_503(self, app, client):
        redis_client = MagicMock()
        redis_client.ping.side_effect = ConnectionError("refused")
        app.dependency_overrides[get_redis_client] = lambda: redis_client

        response = client.get("/health")

        assert response.status_code == 503

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}

    def test_metrics(self, client, cached_repository):
        cached_repository.get_with_cache("nothing-here")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "orderstream_cache_requests_total" in response.text


class TestLifespan:
    """Startup wiring without ingestion"""

    def test_app_serves_lookups_after_startup(self):
        app = create_app(Settings(DATABASE_URL="sqlite://", INGESTION_ENABLED=False, LOG_JSON=False))
        with TestClient(app) as client:
            assert client.get("/api/orders/unknown").status_code == 404
            assert client.get("/ready").status_code == 200
            assert app.state.order_service is not None
