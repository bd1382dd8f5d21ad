"""
Integration tests for the recommendation API.

Tests coverage:
- POST /v1/recommend request validation, k defaulting and capping
- Store failures mapped to HTTP 500
- End-to-end slate building against an in-memory store
- GET /health and GET /v1/version, including the startup lifespan
- Request ids and error bodies
"""

import json
from unittest.mock import Mock

import httpx
import pytest
from fastapi.testclient import TestClient

from slate_recommender.api.app import app
from slate_recommender.api.dependencies import get_pipeline, get_store, get_weights
from slate_recommender.config import settings
from slate_recommender.errors import FatalStoreError, TransientStoreError
from slate_recommender.models.recommendation import Device, TimeOfDay
from slate_recommender.models.slate import SlateItemResult, SlateResult
from slate_recommender.pipeline import SlatePipeline
from slate_recommender.scoring.scorer import Scorer
from slate_recommender.store.database import SlateStore
from slate_recommender.scoring.weights import ScoringWeights, WeightsLoadResult
from slate_recommender.version import get_component_versions


USER = "user-1"


@pytest.fixture
def pipeline():
    mock = Mock(spec=SlatePipeline)
    mock.build_slate.return_value = SlateResult(
        slate_id="slate-1",
        items=[SlateItemResult(content_id="c1", score=5, reasons=["never opened"])],
    )
    return mock


@pytest.fixture
def client(pipeline, store):
    """Test client with the pipeline, store and weights replaced; no lifespan."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_weights] = lambda: WeightsLoadResult(
        weights=ScoringWeights(version=4), source="test.json"
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Test Class: RecommendAPI
# ============================================================================


@pytest.mark.integration
class TestRecommendAPI:
    """POST /v1/recommend with a mocked pipeline."""

    def test_returns_camel_case_slate(self, client):
        response = client.post("/v1/recommend", json={"userId": USER, "k": 3})

        assert response.status_code == 200
        assert response.json() == {
            "slateId": "slate-1",
            "items": [{"contentId": "c1", "score": 5, "reasons": ["never opened"]}],
        }

    def test_default_k(self, client, pipeline):
        client.post("/v1/recommend", json={"userId": USER})

        user_id, k, _ = pipeline.build_slate.call_args.args
        assert user_id == USER
        assert k == settings.default_k

    def test_k_capped(self, client, pipeline):
        client.post("/v1/recommend", json={"userId": USER, "k": 500})

        assert pipeline.build_slate.call_args.args[1] == settings.max_k

    def test_context_normalized(self, client, pipeline):
        client.post(
            "/v1/recommend",
            json={
                "userId": USER,
                "context": {
                    "device": "mobile",
                    "localTimeOfDay": "evening",
                    "allowSameDomain": True,
                    "tz": "Europe/Rome",
                },
            },
        )

        context = pipeline.build_slate.call_args.args[2]
        assert context.device == Device.MOBILE
        assert context.local_time_of_day == TimeOfDay.EVENING
        assert context.allow_same_domain is True

    def test_context_defaults(self, client, pipeline):
        client.post("/v1/recommend", json={"userId": USER})

        context = pipeline.build_slate.call_args.args[2]
        assert context.device == Device.UNKNOWN
        assert context.local_time_of_day is not None

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"userId": ""},
            {"userId": USER, "k": 0},
            {"userId": USER, "k": -3},
            {"userId": USER, "k": "many"},
            {"userId": USER, "context": {"device": "toaster"}},
            {"userId": USER, "context": {"localTimeOfDay": "noon"}},
        ],
    )
    def test_invalid_requests_rejected(self, client, pipeline, payload):
        response = client.post("/v1/recommend", json=payload)

        assert response.status_code == 422
        pipeline.build_slate.assert_not_called()

    @pytest.mark.parametrize("error", [TransientStoreError("down"), FatalStoreError("broken")])
    def test_store_failure_maps_to_500(self, client, pipeline, error):
        pipeline.build_slate.side_effect = error

        response = client.post(
            "/v1/recommend", json={"userId": USER}, headers={"X-Request-ID": "req-42"}
        )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": type(error).__name__,
            "detail": f"Slate could not be built: {type(error).__name__}",
            "request_id": "req-42",
        }

    def test_request_id_echoed(self, client):
        supplied = client.post(
            "/v1/recommend", json={"userId": USER}, headers={"X-Request-ID": "abc"}
        )
        generated = client.post("/v1/recommend", json={"userId": USER})

        assert supplied.headers["X-Request-ID"] == "abc"
        assert generated.headers["X-Request-ID"]


@pytest.mark.integration
class TestRecommendEndToEnd:
    """POST /v1/recommend against a real in-memory store."""

    def test_builds_and_persists(self, store, seed, weights, days_ago):
        seed.content(USER, "c1", domain="a.com", saved_at=days_ago(5), reading_bucket="SHORT", themes=["t1"])
        seed.content(USER, "c2", domain="b.com", saved_at=days_ago(1), themes=["t2"], opens=1)
        real_pipeline = SlatePipeline(store, Scorer(weights))
        app.dependency_overrides[get_pipeline] = lambda: real_pipeline
        try:
            response = TestClient(app).post(
                "/v1/recommend",
                json={"userId": USER, "k": 5, "context": {"localTimeOfDay": "late"}},
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        data = response.json()
        assert [i["contentId"] for i in data["items"]] == ["c1", "c2"]
        assert data["items"][0]["reasons"][0] == "never opened"
        assert "fits late-short" in data["items"][0]["reasons"]
        assert data["items"][1] == {"contentId": "c2", "score": 0, "reasons": []}

    def test_unknown_user_gets_empty_slate(self, store, weights):
        real_pipeline = SlatePipeline(store, Scorer(weights))
        app.dependency_overrides[get_pipeline] = lambda: real_pipeline
        try:
            response = TestClient(app).post("/v1/recommend", json={"userId": "nobody"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["slateId"]


@pytest.mark.integration
class TestServiceEndpoints:
    """Health and version endpoints."""

    def test_version(self, client):
        response = client.get("/v1/version")

        assert response.status_code == 200
        assert response.json() == {
            "api_version": "1.0.0",
            "components": get_component_versions(),
            "weights_version": 4,
            "weights_degraded": False,
        }

    async def test_health(self, store):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_weights] = lambda: WeightsLoadResult(
            weights=ScoringWeights.zero(), source="missing.json", degraded=True
        )
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
                response = await async_client.get("/health")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store_reachable"] is True
        assert data["weights_degraded"] is True
        assert data["weights_version"] == 0
        assert data["uptime_seconds"] >= 0

    def test_health_unreachable_store(self, client, tmp_path):
        unreachable = SlateStore.from_url(f"sqlite:///{tmp_path / 'missing' / 'slates.db'}")
        app.dependency_overrides[get_store] = lambda: unreachable

        response = client.get("/health")
        unreachable.dispose()

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["store_reachable"] is False

    def test_lifespan_builds_pipeline(self, tmp_path, monkeypatch):
        weights_path = tmp_path / "weights.json"
        weights_path.write_text(json.dumps({"version": 12, "neverOpened": 1}), encoding="utf-8")
        monkeypatch.setattr(settings, "database_url", "sqlite://")
        monkeypatch.setattr(settings, "database_create_tables", True)
        monkeypatch.setattr(settings, "weights_file", str(weights_path))

        with TestClient(app) as lifespan_client:
            version = lifespan_client.get("/v1/version").json()
            response = lifespan_client.post("/v1/recommend", json={"userId": USER})

        assert version["weights_version"] == 12
        assert version["weights_degraded"] is False
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_lifespan_degrades_on_missing_weights(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "database_url", "sqlite://")
        monkeypatch.setattr(settings, "database_create_tables", True)
        monkeypatch.setattr(settings, "weights_file", str(tmp_path / "missing.json"))

        with TestClient(app) as lifespan_client:
            version = lifespan_client.get("/v1/version").json()

        assert version["weights_version"] == 0
        assert version["weights_degraded"] is True
