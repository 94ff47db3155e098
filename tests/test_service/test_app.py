"""Tests for the FastAPI service (health, metrics, auth, CORS)."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from system_pulse.aggregator import DOMAINS, Aggregator
from system_pulse.config import AppConfig, Environment
from system_pulse.service.app import create_app


class _ExplodingAggregator:
    async def collect(self) -> Any:
        raise RuntimeError("process table unavailable")


@pytest.fixture
def aggregator(stub_probe: Any) -> Aggregator:
    return Aggregator({domain: stub_probe(domain, lambda: {"ok": True}) for domain in DOMAINS})


def _client(aggregator: Any, **overrides: Any) -> TestClient:
    settings = AppConfig(environment=Environment.PRODUCTION, **overrides)
    return TestClient(create_app(settings=settings, aggregator=aggregator))


class TestHealth:
    def test_health(self, aggregator: Aggregator) -> None:
        with _client(aggregator, version="9.9.9") as client:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["version"] == "9.9.9"
        assert body["uptime"] >= 0
        assert body["timestamp"].endswith("Z")

    def test_health_is_not_protected(self, aggregator: Aggregator) -> None:
        with _client(aggregator, auth_token="secret") as client:
            assert client.get("/health").status_code == 200


class TestMetrics:
    def test_metrics_without_auth_configured(self, aggregator: Aggregator) -> None:
        with _client(aggregator) as client:
            response = client.get("/api/metrics")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["status"] == "ok"
        assert body["host"] == {"ok": True}
        assert "collectionTimeMs" in body

    def test_missing_token_rejected(self, aggregator: Aggregator) -> None:
        with _client(aggregator, auth_token="secret") as client:
            response = client.get("/api/metrics")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_wrong_token_rejected(self, aggregator: Aggregator) -> None:
        with _client(aggregator, auth_token="secret") as client:
            response = client.get("/api/metrics", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_valid_token_accepted(self, aggregator: Aggregator) -> None:
        with _client(aggregator, auth_token="secret") as client:
            response = client.get("/api/metrics", headers={"Authorization": "Bearer secret"})

        assert response.status_code == 200
        assert response.json()["meta"]["status"] == "ok"

    def test_fatal_collection_error_is_500(self) -> None:
        with _client(_ExplodingAggregator()) as client:
            response = client.get("/api/metrics")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to fetch metrics"
        assert body["message"] == "process table unavailable"
        assert body["timestamp"].endswith("Z")

    def test_unknown_route(self, aggregator: Aggregator) -> None:
        with _client(aggregator) as client:
            response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Not found",
            "message": "Route GET /api/nope not found",
        }


class TestCors:
    def test_cors_disabled_in_production(self, aggregator: Aggregator) -> None:
        with _client(aggregator) as client:
            response = client.get("/health", headers={"Origin": "http://dashboard.local"})

        assert "access-control-allow-origin" not in response.headers

    def test_cors_enabled_explicitly(self, aggregator: Aggregator) -> None:
        with _client(aggregator, enable_cors=True) as client:
            response = client.get("/health", headers={"Origin": "http://dashboard.local"})

        assert response.headers["access-control-allow-origin"] == "http://dashboard.local"
