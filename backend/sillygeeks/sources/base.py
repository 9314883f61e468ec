"""
Base interface for news sources.
Every fetcher (NewsAPI, fixtures, ...) implements this interface.
"""
from abc import ABC, abstractmethod

from sillygeeks.models.domain import RawArticle


class ArticleFetcher(ABC):
    """Abstract base class for raw article fetchers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the source."""
        pass

    @abstractmethod
    async def fetch_batch(self) -> list[RawArticle]:
        """
        Fetch one batch of candidate articles.

        Implementations must not raise for network or upstream failures;
        they degrade (e.g. to fixture data) and log instead.

        Returns:
            Raw articles, each with a title, url and published_at
        """
        pass

    async def health_check(self) -> bool:
        """Check if the source is available."""
        return True
