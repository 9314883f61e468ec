"""Shared fixtures for the SillyGeeks test suite."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from sillygeeks.core.taxonomy import CategorySeed
from sillygeeks.models.domain import ArticleCreate, RawArticle
from sillygeeks.models.store import ContentStore
from sillygeeks.services.enrichment import (
    BackendAvailability,
    GenerativeBackend,
    TextEnrichmentClient,
)
from sillygeeks.sources.base import ArticleFetcher

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeBackend(GenerativeBackend):
    """
    Scripted generative backend.

    ``replies`` maps a marker found in the prompt to the reply (or exception)
    to return; ``default`` is used when no marker matches.
    """

    name = "fake"

    def __init__(self, replies: Optional[dict] = None, default="ok"):
        self.replies = replies or {}
        self.default = default
        self.calls: list[dict] = []

    async def complete(self, prompt: str, *, max_tokens: int, json_output: bool = False) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "json_output": json_output})
        reply = self.default
        for marker, value in self.replies.items():
            if marker in prompt:
                reply = value
                break
        if isinstance(reply, BaseException):
            raise reply
        return reply


class StaticFetcher(ArticleFetcher):
    """Fetcher returning a fixed batch."""

    def __init__(self, items: list[RawArticle]):
        self.items = items
        self.calls = 0

    @property
    def name(self) -> str:
        return "Static"

    async def fetch_batch(self) -> list[RawArticle]:
        self.calls += 1
        return list(self.items)


def make_raw(
    url: str = "https://example.com/a",
    title: str = "GPT-5 ships with better reasoning",
    content: str = "OpenAI released a new AI model. It reasons better than before.",
    hours_ago: int = 1,
) -> RawArticle:
    return RawArticle(
        title=title,
        content=content,
        url=url,
        published_at=BASE_TIME - timedelta(hours=hours_ago),
        source_name="Example News",
        source_id="example-news",
        image_url=None,
    )


def make_article(
    url: str,
    *,
    title: str = "Article",
    summary: str = "Summary.",
    content: str = "Body.",
    hours_ago: int = 0,
    category_id: Optional[int] = None,
) -> ArticleCreate:
    return ArticleCreate(
        title=title,
        content=content,
        summary=summary,
        original_url=url,
        published_at=BASE_TIME - timedelta(hours=hours_ago),
        source_id="example-news",
        source_name="Example News",
        category_id=category_id,
    )


@pytest.fixture
def store() -> ContentStore:
    return ContentStore()


@pytest.fixture
def ai_hardware_store() -> ContentStore:
    return ContentStore(
        seed_categories=[
            CategorySeed(name="AI", slug="ai", description="", image_url=""),
            CategorySeed(name="Hardware", slug="hardware", description="", image_url=""),
        ]
    )


@pytest.fixture
def offline_enrichment() -> TextEnrichmentClient:
    """Enrichment client with no backend configured (demo mode)."""
    return TextEnrichmentClient(None)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def online_enrichment(fake_backend: FakeBackend) -> TextEnrichmentClient:
    return TextEnrichmentClient(
        fake_backend,
        timeout=1.0,
        availability=BackendAvailability(probe_interval=60.0),
    )
