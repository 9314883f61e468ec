"""
In-memory content store for SillyGeeks.

The store is the only holder of mutable catalog state (articles, categories,
tags and article-tag links). One instance is built at process start and
handed to the ingestion pipeline and the API layer.

Every method is synchronous and never awaits, so under the asyncio event
loop each call is atomic with respect to other coroutines.
"""
from collections import Counter
from typing import Iterable, Optional

import structlog

from sillygeeks.core.errors import DuplicateEntityError, NotFoundError
from sillygeeks.core.taxonomy import STARTER_CATEGORIES, CategorySeed
from sillygeeks.models.domain import (
    Article,
    ArticleCreate,
    ArticleTag,
    ArticleUpdate,
    Category,
    CategoryCreate,
    Tag,
    ensure_aware,
    utcnow,
)

logger = structlog.get_logger(__name__)

_NULLABLE_ARTICLE_FIELDS = frozenset({"image_url", "category_id"})


def _newest_first_key(article: Article) -> tuple[float, int]:
    # published_at descending, id ascending on ties
    return (-article.published_at.timestamp(), article.id)


def _paginate(items: list, limit: Optional[int], offset: int) -> list:
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if limit is None:
        return items[offset:]
    if limit < 0:
        raise ValueError("limit must be >= 0")
    return items[offset:offset + limit]


class ContentStore:
    """
    Repository of articles, categories, tags and their relations.

    Ids are assigned from per-entity counters and never reused. Entities are
    handed out as copies so callers cannot change stored state except through
    the store's methods.
    """

    def __init__(self, seed_categories: Optional[Iterable[CategorySeed]] = None):
        self._articles: dict[int, Article] = {}
        self._categories: dict[int, Category] = {}
        self._tags: dict[int, Tag] = {}
        self._article_tags: dict[int, ArticleTag] = {}

        # Secondary indexes
        self._article_ids_by_url: dict[str, int] = {}
        self._tag_ids_by_slug: dict[str, int] = {}
        self._links_by_pair: dict[tuple[int, int], int] = {}

        self._next_article_id = 1
        self._next_category_id = 1
        self._next_tag_id = 1
        self._next_article_tag_id = 1

        seeds = STARTER_CATEGORIES if seed_categories is None else seed_categories
        for seed in seeds:
            self.create_category(
                CategoryCreate(
                    name=seed.name,
                    slug=seed.slug,
                    description=seed.description,
                    image_url=seed.image_url,
                )
            )

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories(self) -> list[Category]:
        """All categories in creation (id) order."""
        return [c.model_copy() for c in self._categories.values()]

    def get_category_by_id(self, category_id: int) -> Optional[Category]:
        category = self._categories.get(category_id)
        return category.model_copy() if category else None

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        for category in self._categories.values():
            if category.slug == slug:
                return category.model_copy()
        return None

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive exact name lookup."""
        wanted = name.strip().lower()
        for category in self._categories.values():
            if category.name.lower() == wanted:
                return category.model_copy()
        return None

    def create_category(self, data: CategoryCreate) -> Category:
        for existing in self._categories.values():
            if existing.name.lower() == data.name.lower() or existing.slug == data.slug:
                raise DuplicateEntityError(f"Category already exists: {data.name}")

        category = Category(id=self._next_category_id, **data.model_dump())
        self._next_category_id += 1
        self._categories[category.id] = category
        return category.model_copy()

    def count_articles_by_category(self) -> dict[int, int]:
        """Number of stored articles per category id (zero for empty ones)."""
        counts = Counter(
            a.category_id for a in self._articles.values() if a.category_id is not None
        )
        return {cid: counts.get(cid, 0) for cid in self._categories}

    # =========================================================================
    # Articles
    # =========================================================================

    def count_articles(self) -> int:
        return len(self._articles)

    def _sorted_articles(self, articles: Iterable[Article]) -> list[Article]:
        return [a.model_copy() for a in sorted(articles, key=_newest_first_key)]

    def list_articles(self, limit: Optional[int] = None, offset: int = 0) -> list[Article]:
        """Articles newest-first by published_at, paginated."""
        return _paginate(self._sorted_articles(self._articles.values()), limit, offset)

    def get_article_by_id(self, article_id: int) -> Optional[Article]:
        article = self._articles.get(article_id)
        return article.model_copy() if article else None

    def get_article_by_url(self, url: str) -> Optional[Article]:
        article_id = self._article_ids_by_url.get(url)
        if article_id is None:
            return None
        return self._articles[article_id].model_copy()

    def list_articles_by_category(
        self,
        category_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Article]:
        matching = (a for a in self._articles.values() if a.category_id == category_id)
        return _paginate(self._sorted_articles(matching), limit, offset)

    def list_articles_by_tag(
        self,
        tag_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Article]:
        article_ids = {
            link.article_id for link in self._article_tags.values() if link.tag_id == tag_id
        }
        matching = (self._articles[aid] for aid in article_ids if aid in self._articles)
        return _paginate(self._sorted_articles(matching), limit, offset)

    def get_featured_article(self) -> Optional[Article]:
        """The most recently published article, or None when the store is empty."""
        if not self._articles:
            return None
        return min(self._articles.values(), key=_newest_first_key).model_copy()

    def list_trending_articles(self, limit: Optional[int] = None, offset: int = 0) -> list[Article]:
        """Most viewed first; equal view counts fall back to newest-first."""
        ranked = sorted(
            self._articles.values(),
            key=lambda a: (-a.view_count, *_newest_first_key(a)),
        )
        return _paginate([a.model_copy() for a in ranked], limit, offset)

    def search_articles(
        self,
        query: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Article]:
        """
        Case-insensitive substring search over title, summary and content.

        Linear scan; fine for an in-memory catalog. An empty query matches
        nothing, input validation is the caller's job.
        """
        needle = query.strip().lower()
        if not needle:
            return []

        matching = (
            a
            for a in self._articles.values()
            if needle in a.title.lower()
            or needle in a.summary.lower()
            or needle in a.content.lower()
        )
        return _paginate(self._sorted_articles(matching), limit, offset)

    def create_article(self, data: ArticleCreate) -> Article:
        if data.original_url in self._article_ids_by_url:
            raise DuplicateEntityError(f"Article already exists for url: {data.original_url}")
        if data.category_id is not None and data.category_id not in self._categories:
            raise NotFoundError("Category", data.category_id)

        fields = data.model_dump()
        fields["published_at"] = ensure_aware(data.published_at)
        article = Article(
            id=self._next_article_id,
            created_at=utcnow(),
            view_count=0,
            **fields,
        )
        self._next_article_id += 1
        self._articles[article.id] = article
        self._article_ids_by_url[article.original_url] = article.id

        logger.debug("Article created", article_id=article.id, url=article.original_url)
        return article.model_copy()

    def update_article(self, article_id: int, patch: ArticleUpdate) -> Article:
        """Merge the fields explicitly set on ``patch`` and return the result."""
        article = self._articles.get(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)

        changes = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key in _NULLABLE_ARTICLE_FIELDS
        }
        category_id = changes.get("category_id")
        if category_id is not None and category_id not in self._categories:
            raise NotFoundError("Category", category_id)

        updated = article.model_copy(update=changes)
        self._articles[article_id] = updated
        return updated.model_copy()

    def delete_article(self, article_id: int) -> None:
        """Remove an article together with its tag links; tags themselves stay."""
        article = self._articles.pop(article_id, None)
        if article is None:
            raise NotFoundError("Article", article_id)

        del self._article_ids_by_url[article.original_url]
        link_ids = [lid for lid, link in self._article_tags.items() if link.article_id == article_id]
        for link_id in link_ids:
            link = self._article_tags.pop(link_id)
            del self._links_by_pair[(link.article_id, link.tag_id)]

    def increment_view_count(self, article_id: int) -> Optional[Article]:
        """Bump the view counter; None if the article does not exist."""
        article = self._articles.get(article_id)
        if article is None:
            return None

        updated = article.model_copy(update={"view_count": article.view_count + 1})
        self._articles[article_id] = updated
        return updated.model_copy()

    # =========================================================================
    # Tags
    # =========================================================================

    def list_tags(self) -> list[Tag]:
        return [t.model_copy() for t in self._tags.values()]

    def get_tag_by_id(self, tag_id: int) -> Optional[Tag]:
        tag = self._tags.get(tag_id)
        return tag.model_copy() if tag else None

    def get_tag_by_slug(self, slug: str) -> Optional[Tag]:
        tag_id = self._tag_ids_by_slug.get(slug)
        return self._tags[tag_id].model_copy() if tag_id is not None else None

    def create_tag(self, name: str, slug: str) -> Tag:
        if slug in self._tag_ids_by_slug:
            raise DuplicateEntityError(f"Tag already exists: {slug}")
        if any(t.name.lower() == name.lower() for t in self._tags.values()):
            raise DuplicateEntityError(f"Tag already exists: {name}")

        tag = Tag(id=self._next_tag_id, name=name, slug=slug)
        self._next_tag_id += 1
        self._tags[tag.id] = tag
        self._tag_ids_by_slug[slug] = tag.id
        return tag.model_copy()

    def get_or_create_tag_by_slug(self, slug: str, name: Optional[str] = None) -> Tag:
        """Return the tag with ``slug``, creating it (named ``name``) if absent."""
        existing = self.get_tag_by_slug(slug)
        if existing:
            return existing

        return self.create_tag(self._free_tag_name(name or slug, slug), slug)

    def _free_tag_name(self, preferred: str, slug: str) -> str:
        """``preferred`` unless another tag owns it, then ``slug``, ``slug-2``, ..."""
        taken = {t.name.lower() for t in self._tags.values()}
        if preferred.lower() not in taken:
            return preferred
        candidate, suffix = slug, 2
        while candidate.lower() in taken:
            candidate = f"{slug}-{suffix}"
            suffix += 1
        return candidate

    # =========================================================================
    # Article <-> Tag links
    # =========================================================================

    def create_article_tag(self, article_id: int, tag_id: int) -> ArticleTag:
        """Link an article to a tag; linking an existing pair returns the old link."""
        if article_id not in self._articles:
            raise NotFoundError("Article", article_id)
        if tag_id not in self._tags:
            raise NotFoundError("Tag", tag_id)

        existing_id = self._links_by_pair.get((article_id, tag_id))
        if existing_id is not None:
            return self._article_tags[existing_id].model_copy()

        link = ArticleTag(id=self._next_article_tag_id, article_id=article_id, tag_id=tag_id)
        self._next_article_tag_id += 1
        self._article_tags[link.id] = link
        self._links_by_pair[(article_id, tag_id)] = link.id
        return link.model_copy()

    def list_tags_for_article(self, article_id: int) -> list[Tag]:
        """Tags linked to an article, in link order."""
        return [
            self._tags[link.tag_id].model_copy()
            for link in self._article_tags.values()
            if link.article_id == article_id
        ]

    def list_article_tags(self) -> list[ArticleTag]:
        return [link.model_copy() for link in self._article_tags.values()]
