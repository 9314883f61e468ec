"""
NewsAPI fetcher for current tech news.
API docs: https://newsapi.org/docs
"""
import random
from datetime import datetime
from typing import Optional

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from sillygeeks.config import Settings, get_settings
from sillygeeks.core.taxonomy import TECH_SOURCES, TECH_TOPICS, slugify
from sillygeeks.models.domain import RawArticle, ensure_aware
from sillygeeks.sources.base import ArticleFetcher
from sillygeeks.sources.fixtures import fixture_articles

logger = structlog.get_logger(__name__)

REMOVED_PLACEHOLDER = "[Removed]"
NO_CONTENT = "No content available"


class NewsAPIError(ValueError):
    """NewsAPI answered with a non-ok payload."""


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return False


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """Parse NewsAPI's ISO-8601 timestamps ("2024-05-01T10:00:00Z")."""
    if not value:
        return None
    try:
        return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def _text(article: dict, key: str) -> Optional[str]:
    """String field value, or None when missing or of another type."""
    value = article.get(key)
    return value if isinstance(value, str) else None


def parse_article(article: dict) -> Optional[RawArticle]:
    """
    Parse a NewsAPI article into a RawArticle.

    Returns None for items without a title, url or publication time.
    Fields of an unexpected type are treated as missing.
    """
    if not isinstance(article, dict):
        return None

    title = (_text(article, "title") or "").strip()
    if not title or title == REMOVED_PLACEHOLDER:
        return None

    url = (_text(article, "url") or "").strip()
    if not url:
        return None

    published_at = parse_published_at(_text(article, "publishedAt"))
    if published_at is None:
        return None

    description = _text(article, "description")
    if description == REMOVED_PLACEHOLDER:
        description = None
    content = _text(article, "content")
    if content == REMOVED_PLACEHOLDER:
        content = None

    source = article.get("source")
    if not isinstance(source, dict):
        source = {}
    source_name = _text(source, "name") or "Unknown"
    source_id = _text(source, "id") or slugify(source_name) or "unknown"

    return RawArticle(
        title=title,
        content=content or description or NO_CONTENT,
        url=url,
        published_at=published_at,
        source_name=source_name,
        source_id=source_id,
        image_url=_text(article, "urlToImage") or None,
        description=description,
    )


class NewsAPIFetcher(ArticleFetcher):
    """
    Fetches one batch of tech news per call from NewsAPI.

    Each call queries a randomly chosen topic from ``TECH_TOPICS`` so that
    repeated runs spread coverage across subjects. Without an API key, or
    when the request fails, the fixture stories are returned instead.
    """

    BASE_URL = "https://newsapi.org/v2"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._transport = transport

    @property
    def name(self) -> str:
        return "NewsAPI"

    def _has_api_key(self) -> bool:
        return bool(self.settings.newsapi_key)

    def choose_topic(self) -> str:
        return self._rng.choice(TECH_TOPICS)

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    async def _fetch(self, endpoint: str, params: dict) -> dict:
        """GET a NewsAPI endpoint, bounded by the configured timeout."""
        async with httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=self.settings.news_fetch_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.get(
                f"/{endpoint}",
                params=params,
                headers={"X-Api-Key": self.settings.newsapi_key or ""},
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise NewsAPIError(f"NewsAPI error: unexpected payload type {type(data).__name__}")
        if data.get("status") != "ok":
            raise NewsAPIError(f"NewsAPI error: {data.get('code')}: {data.get('message')}")
        return data

    async def fetch_batch(self) -> list[RawArticle]:
        if not self._has_api_key():
            logger.info("No NewsAPI key configured, using fixture data")
            return fixture_articles()

        topic = self.choose_topic()
        params = {
            "q": topic,
            "sources": ",".join(TECH_SOURCES),
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": self.settings.newsapi_page_size,
        }

        try:
            data = await self._fetch("everything", params)
        except (httpx.HTTPError, NewsAPIError, ValueError) as e:
            logger.error("NewsAPI fetch failed, using fixture data", topic=topic, error=str(e))
            return fixture_articles()

        raw_items = data.get("articles")
        if not isinstance(raw_items, list):
            raw_items = []
        articles = [a for a in (parse_article(item) for item in raw_items) if a is not None]
        logger.info(
            "Fetched NewsAPI batch",
            topic=topic,
            received=len(raw_items),
            kept=len(articles),
        )
        return articles

    async def health_check(self) -> bool:
        """Check if NewsAPI is reachable with the configured key."""
        if not self._has_api_key():
            return False

        try:
            await self._fetch("everything", {"q": "technology", "pageSize": 1})
            return True
        except (httpx.HTTPError, ValueError):
            return False
