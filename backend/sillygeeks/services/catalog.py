"""
Read-side catalog service.

Translates API requests into content store queries and returns articles with
their category and tags resolved. Unknown ids/slugs raise ``NotFoundError``;
malformed input raises ``InvalidQueryError``.
"""
from typing import Optional

from sillygeeks.core.errors import InvalidQueryError, NotFoundError
from sillygeeks.models.domain import (
    Article,
    Category,
    CategoryWithCount,
    EnrichedArticle,
    Tag,
)
from sillygeeks.models.store import ContentStore


class CatalogService:
    """Query operations used by the HTTP layer."""

    def __init__(
        self,
        store: ContentStore,
        default_page_size: int = 20,
        max_page_size: int = 100,
        search_max_length: int = 100,
    ):
        self.store = store
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.search_max_length = search_max_length

    def _page(self, limit: Optional[int], offset: int) -> tuple[int, int]:
        if limit is None:
            limit = self.default_page_size
        if limit < 1 or limit > self.max_page_size:
            raise InvalidQueryError(f"limit must be between 1 and {self.max_page_size}")
        if offset < 0:
            raise InvalidQueryError("offset must be >= 0")
        return limit, offset

    def enrich(self, article: Article) -> EnrichedArticle:
        category = (
            self.store.get_category_by_id(article.category_id)
            if article.category_id is not None
            else None
        )
        return EnrichedArticle(
            **article.model_dump(),
            category=category,
            tags=self.store.list_tags_for_article(article.id),
        )

    def _enrich_all(self, articles: list[Article]) -> list[EnrichedArticle]:
        return [self.enrich(article) for article in articles]

    # ---------------------------------------------------------------------
    # Articles
    # ---------------------------------------------------------------------

    def articles(self, limit: Optional[int] = None, offset: int = 0) -> list[EnrichedArticle]:
        limit, offset = self._page(limit, offset)
        return self._enrich_all(self.store.list_articles(limit, offset))

    def article_by_id(self, article_id: int) -> EnrichedArticle:
        """Fetch an article and count the view."""
        article = self.store.increment_view_count(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return self.enrich(article)

    def featured_article(self) -> EnrichedArticle:
        article = self.store.get_featured_article()
        if article is None:
            raise NotFoundError("Featured article", None)
        return self.enrich(article)

    def trending(self, limit: Optional[int] = None, offset: int = 0) -> list[EnrichedArticle]:
        """Most viewed articles first."""
        limit, offset = self._page(limit, offset)
        return self._enrich_all(self.store.list_trending_articles(limit, offset))

    def articles_by_category_slug(
        self,
        slug: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[EnrichedArticle]:
        category = self.category_by_slug(slug)
        limit, offset = self._page(limit, offset)
        return self._enrich_all(self.store.list_articles_by_category(category.id, limit, offset))

    def articles_by_tag_slug(
        self,
        slug: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[EnrichedArticle]:
        tag = self.store.get_tag_by_slug(slug)
        if tag is None:
            raise NotFoundError("Tag", slug)
        limit, offset = self._page(limit, offset)
        return self._enrich_all(self.store.list_articles_by_tag(tag.id, limit, offset))

    def search(
        self,
        query: Optional[str],
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[EnrichedArticle]:
        """Case-insensitive substring search; an empty or overlong query is rejected."""
        needle = (query or "").strip()
        if not needle:
            raise InvalidQueryError("Search query is required")
        if len(needle) > self.search_max_length:
            raise InvalidQueryError(
                f"Search query must be at most {self.search_max_length} characters"
            )
        limit, offset = self._page(limit, offset)
        return self._enrich_all(self.store.search_articles(needle, limit, offset))

    # ---------------------------------------------------------------------
    # Categories / tags
    # ---------------------------------------------------------------------

    def categories(self) -> list[CategoryWithCount]:
        counts = self.store.count_articles_by_category()
        return [
            CategoryWithCount(**c.model_dump(), article_count=counts.get(c.id, 0))
            for c in self.store.list_categories()
        ]

    def category_by_slug(self, slug: str) -> Category:
        category = self.store.get_category_by_slug(slug)
        if category is None:
            raise NotFoundError("Category", slug)
        return category

    def tags(self) -> list[Tag]:
        return self.store.list_tags()
