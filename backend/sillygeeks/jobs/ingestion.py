"""
Ingestion job: fetch, dedupe, enrich and persist tech news.

Each run:
1. Fetches one batch of raw articles from the configured source
2. Skips articles whose URL is already in the store
3. Summarizes, categorizes and tags each new article
4. Resolves the category name to a stored category
5. Resolves or creates its tags
6. Persists the article (ai_processed=False) and links the tags
7. Marks the article ai_processed=True

Articles are handled one at a time in fetch order. A failure on one article
is logged and counted, any partly stored article is removed, and the run
carries on with the next.
"""
from typing import Optional

import structlog

from sillygeeks.core.taxonomy import slugify
from sillygeeks.models.domain import (
    Article,
    ArticleCreate,
    ArticleUpdate,
    Category,
    IngestionStats,
    RawArticle,
    Tag,
    utcnow,
)
from sillygeeks.models.store import ContentStore
from sillygeeks.services.enrichment import TextEnrichmentClient
from sillygeeks.sources.base import ArticleFetcher

logger = structlog.get_logger(__name__)


class IngestionPipeline:
    """
    Orchestrates ingestion runs against one content store.

    Single-flight: while a run is in progress, further calls to ``run`` return
    immediately with ``skipped_run=True`` instead of queueing.
    """

    def __init__(
        self,
        store: ContentStore,
        fetcher: ArticleFetcher,
        enrichment: TextEnrichmentClient,
    ):
        self.store = store
        self.fetcher = fetcher
        self.enrichment = enrichment

        self._running = False
        self.last_stats: Optional[IngestionStats] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> IngestionStats:
        """Execute one ingestion run and return its statistics."""
        if self._running:
            logger.warning("Ingestion already in progress, skipping overlapping run")
            stats = IngestionStats(skipped_run=True)
            stats.finished_at = stats.started_at
            return stats

        self._running = True
        stats = IngestionStats()
        logger.info("Starting ingestion run", source=self.fetcher.name)

        try:
            items = await self.fetcher.fetch_batch()
            stats.fetched = len(items)
            logger.info("Articles fetched", count=len(items))

            for item in items:
                await self._process_item(item, stats)
        except Exception as e:
            logger.exception("Ingestion run failed", error=str(e))
            stats.errors.append(f"run: {e}")
        finally:
            stats.finished_at = utcnow()
            self.last_stats = stats
            self._running = False

        logger.info(
            "Ingestion run completed",
            elapsed_seconds=round(stats.duration_seconds, 3),
            stats=stats.to_dict(),
        )
        return stats

    async def _process_item(self, item: RawArticle, stats: IngestionStats) -> None:
        """Dedupe, enrich and persist one raw article; never raises."""
        if self.store.get_article_by_url(item.url) is not None:
            stats.skipped += 1
            logger.debug("Article already ingested", url=item.url)
            return

        try:
            article, linked = await self._ingest(item)
        except Exception as e:
            stats.failed += 1
            stats.errors.append(f"{item.url}: {e}")
            logger.exception("Failed to ingest article", url=item.url, error=str(e))
            return

        stats.new += 1
        stats.tags_linked += linked
        logger.info(
            "Article ingested",
            article_id=article.id,
            category_id=article.category_id,
            tags=linked,
            url=item.url,
        )

    async def _ingest(self, item: RawArticle) -> tuple[Article, int]:
        # Enrichment is the only part that suspends.
        summary = await self.enrichment.summarize(item.content)
        categories = self.store.list_categories()
        category_name = await self.enrichment.categorize(
            item.title,
            item.content,
            [c.name for c in categories],
        )
        tag_names = await self.enrichment.generate_tags(item.title, item.content)

        # No awaits below: create, link and finalize happen in one step.
        category = self._resolve_category(category_name, categories)
        tags = self._resolve_tags(tag_names)
        article = self.store.create_article(
            ArticleCreate(
                title=item.title,
                content=item.content,
                summary=summary,
                original_url=item.url,
                image_url=item.image_url,
                published_at=item.published_at,
                source_id=item.source_id,
                source_name=item.source_name,
                category_id=category.id if category else None,
                ai_processed=False,
            )
        )

        try:
            for tag in tags:
                self.store.create_article_tag(article.id, tag.id)
            article = self.store.update_article(article.id, ArticleUpdate(ai_processed=True))
        except Exception:
            # Never leave a half-ingested article behind.
            self.store.delete_article(article.id)
            raise
        return article, len(tags)

    def _resolve_category(
        self,
        name: str,
        categories: list[Category],
    ) -> Optional[Category]:
        """Exact (case-insensitive) match, otherwise the first category."""
        category = self.store.get_category_by_name(name)
        if category is not None:
            return category

        fallback = categories[0] if categories else None
        logger.warning(
            "Enrichment returned unknown category, using fallback",
            category=name,
            fallback=fallback.name if fallback else None,
        )
        return fallback

    def _resolve_tags(self, tag_names: list[str]) -> list[Tag]:
        """Find or create one tag per distinct slug, in reply order."""
        tags: list[Tag] = []
        seen_slugs: set[str] = set()

        for tag_name in tag_names:
            slug = slugify(tag_name)
            if not slug or slug in seen_slugs:
                continue
            seen_slugs.add(slug)
            tags.append(self.store.get_or_create_tag_by_slug(slug, name=tag_name.strip()))

        return tags
