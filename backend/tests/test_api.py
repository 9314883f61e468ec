"""
Tests for the HTTP API.

The app is built with an in-memory store, a static fetcher and an offline
enrichment client; the scheduler is disabled.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeBackend, StaticFetcher, make_article, make_raw
from sillygeeks.config import Settings
from sillygeeks.main import create_app
from sillygeeks.models.store import ContentStore
from sillygeeks.services.enrichment import TextEnrichmentClient


def make_settings(**overrides) -> Settings:
    values = {"scheduler_enabled": False, "log_format": "console", "environment": "development"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def seeded_store(store):
    ai = store.get_category_by_slug("ai")
    article = store.create_article(
        make_article(
            "https://example.com/gpt5",
            title="GPT-5 Prototype Shows Remarkable Reasoning",
            category_id=ai.id,
            hours_ago=1,
        )
    )
    store.create_article(make_article("https://example.com/older", title="Older news", hours_ago=5))
    tag = store.create_tag("AI", "ai")
    store.create_article_tag(article.id, tag.id)
    return store


@pytest.fixture
def app(seeded_store, offline_enrichment):
    return create_app(
        make_settings(),
        store=seeded_store,
        fetcher=StaticFetcher([make_raw("https://example.com/new")]),
        enrichment=offline_enrichment,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


class TestArticleEndpoints:
    """Tests for /api/articles."""

    def test_list(self, client):
        response = client.get("/api/articles")

        assert response.status_code == 200
        data = response.json()
        assert [a["original_url"] for a in data] == [
            "https://example.com/gpt5",
            "https://example.com/older",
        ]
        assert data[0]["category"]["slug"] == "ai"
        assert data[0]["tags"] == [{"id": 1, "name": "AI", "slug": "ai"}]

    def test_pagination(self, client):
        response = client.get("/api/articles", params={"limit": 1, "offset": 1})
        assert [a["original_url"] for a in response.json()] == ["https://example.com/older"]

    def test_limit_out_of_range(self, client):
        assert client.get("/api/articles", params={"limit": 0}).status_code == 422
        assert client.get("/api/articles", params={"limit": 1000}).status_code == 400

    def test_featured(self, client):
        response = client.get("/api/articles/featured")
        assert response.status_code == 200
        assert response.json()["original_url"] == "https://example.com/gpt5"

    def test_featured_empty_store(self, offline_enrichment):
        app = create_app(make_settings(), store=ContentStore(), enrichment=offline_enrichment)
        with TestClient(app) as empty_client:
            assert empty_client.get("/api/articles/featured").status_code == 404

    def test_get_counts_view(self, client):
        client.get("/api/articles/1")
        response = client.get("/api/articles/1")

        assert response.status_code == 200
        assert response.json()["view_count"] == 2

    def test_trending(self, client):
        client.get("/api/articles/2")

        response = client.get("/api/articles/trending")

        assert response.status_code == 200
        assert [a["original_url"] for a in response.json()] == [
            "https://example.com/older",
            "https://example.com/gpt5",
        ]
        assert client.get("/api/articles/trending", params={"limit": 1}).json()[0]["id"] == 2
        assert client.get("/api/articles/trending", params={"limit": 0}).status_code == 422

    def test_get_missing(self, client):
        response = client.get("/api/articles/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Article not found: 999"}


class TestSearchEndpoint:
    """Tests for /api/search."""

    def test_match(self, client):
        response = client.get("/api/search", params={"query": "gpt"})

        assert response.status_code == 200
        assert [a["title"] for a in response.json()] == ["GPT-5 Prototype Shows Remarkable Reasoning"]

    def test_no_match(self, client):
        response = client.get("/api/search", params={"query": "blockchain"})
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize("params", [{}, {"query": ""}, {"query": "  "}, {"query": "x" * 101}])
    def test_bad_query(self, client, params):
        response = client.get("/api/search", params=params)
        assert response.status_code == 400


class TestCategoryAndTagEndpoints:
    """Tests for categories and tags."""

    def test_categories_with_counts(self, client):
        response = client.get("/api/categories")

        data = response.json()
        assert len(data) == 6
        assert data[0]["name"] == "AI"
        assert data[0]["article_count"] == 1

    def test_category_by_slug(self, client):
        assert client.get("/api/categories/quantum-computing").json()["name"] == "Quantum Computing"
        assert client.get("/api/categories/robots").status_code == 404

    def test_category_articles(self, client):
        response = client.get("/api/categories/ai/articles")
        assert [a["original_url"] for a in response.json()] == ["https://example.com/gpt5"]
        assert client.get("/api/categories/robots/articles").status_code == 404

    def test_tags(self, client):
        assert client.get("/api/tags").json() == [{"id": 1, "name": "AI", "slug": "ai"}]

    def test_tag_articles(self, client):
        response = client.get("/api/tags/ai/articles")
        assert [a["original_url"] for a in response.json()] == ["https://example.com/gpt5"]
        assert client.get("/api/tags/robots/articles").status_code == 404


class TestStatusEndpoints:
    """Tests for health, AI status and ingestion admin routes."""

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["articles"] == 2

    def test_ai_status_without_key(self, client):
        data = client.get("/api/ai-status").json()

        assert data["success"] is False
        assert data["apiKey"] == "missing"
        assert "demo mode" in data["message"]

    def test_ai_status_with_backend(self, seeded_store):
        enrichment = TextEnrichmentClient(FakeBackend(default="ok"), timeout=1.0)
        app = create_app(make_settings(), store=seeded_store, enrichment=enrichment)

        with TestClient(app) as test_client:
            data = test_client.get("/api/ai-status").json()

        assert data["success"] is True
        assert data["apiKey"] == "configured"
        assert data["provider"] == "fake"

    def test_ingestion_status(self, client):
        data = client.get("/api/ingestion/status").json()

        assert data["scheduler_running"] is False
        assert data["ingestion_in_progress"] is False
        assert data["last_run"] is None

    def test_manual_trigger(self, client, app):
        response = client.post("/api/admin/run-ingestion")
        assert response.status_code == 202

    def test_manual_trigger_conflict(self, client, app):
        app.state.pipeline._running = True
        try:
            response = client.post("/api/admin/run-ingestion")
        finally:
            app.state.pipeline._running = False

        assert response.status_code == 409

    def test_manual_trigger_forbidden_outside_development(self, seeded_store, offline_enrichment):
        app = create_app(
            make_settings(environment="production"),
            store=seeded_store,
            enrichment=offline_enrichment,
        )
        with TestClient(app) as test_client:
            assert test_client.post("/api/admin/run-ingestion").status_code == 403
