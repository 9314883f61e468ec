"""
FastAPI routes for the SillyGeeks API.
"""

from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from sillygeeks.config import Settings
from sillygeeks.jobs.scheduler import IngestionScheduler
from sillygeeks.models.domain import Category, CategoryWithCount, EnrichedArticle, Tag
from sillygeeks.services.catalog import CatalogService
from sillygeeks.services.enrichment import TextEnrichmentClient

logger = structlog.get_logger(__name__)
router = APIRouter()


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_enrichment(request: Request) -> TextEnrichmentClient:
    return request.app.state.enrichment


def get_scheduler(request: Request) -> IngestionScheduler:
    return request.app.state.scheduler


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


CatalogDep = Annotated[CatalogService, Depends(get_catalog)]
EnrichmentDep = Annotated[TextEnrichmentClient, Depends(get_enrichment)]
SchedulerDep = Annotated[IngestionScheduler, Depends(get_scheduler)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]

LimitQuery = Annotated[int | None, Query(ge=1)]
OffsetQuery = Annotated[int, Query(ge=0)]


# ============================================================================
# Article Routes
# ============================================================================


@router.get("/articles", response_model=list[EnrichedArticle])
async def list_articles(
    catalog: CatalogDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
):
    """Latest articles, newest first."""
    return catalog.articles(limit, offset)


@router.get("/articles/featured", response_model=EnrichedArticle)
async def get_featured_article(catalog: CatalogDep):
    """The most recently published article."""
    return catalog.featured_article()


@router.get("/articles/trending", response_model=list[EnrichedArticle])
async def list_trending_articles(
    catalog: CatalogDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
):
    """Most viewed articles; ties go to the newer article."""
    return catalog.trending(limit, offset)


@router.get("/articles/{article_id}", response_model=EnrichedArticle)
async def get_article(article_id: int, catalog: CatalogDep):
    """
    Get a single article.

    Counts as a view: the article's view_count is incremented.
    """
    return catalog.article_by_id(article_id)


@router.get("/search", response_model=list[EnrichedArticle])
async def search_articles(
    catalog: CatalogDep,
    query: Annotated[str | None, Query()] = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
):
    """
    Search titles, summaries and bodies.

    Returns 400 for an empty query or one longer than the configured maximum.
    """
    results = catalog.search(query, limit, offset)
    logger.debug("Search executed", query=query, results=len(results))
    return results


# ============================================================================
# Category & Tag Routes
# ============================================================================


@router.get("/categories", response_model=list[CategoryWithCount])
async def list_categories(catalog: CatalogDep):
    return catalog.categories()


@router.get("/categories/{slug}", response_model=Category)
async def get_category(slug: str, catalog: CatalogDep):
    return catalog.category_by_slug(slug)


@router.get("/categories/{slug}/articles", response_model=list[EnrichedArticle])
async def list_category_articles(
    slug: str,
    catalog: CatalogDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
):
    return catalog.articles_by_category_slug(slug, limit, offset)


@router.get("/tags", response_model=list[Tag])
async def list_tags(catalog: CatalogDep):
    return catalog.tags()


@router.get("/tags/{slug}/articles", response_model=list[EnrichedArticle])
async def list_tag_articles(
    slug: str,
    catalog: CatalogDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
):
    return catalog.articles_by_tag_slug(slug, limit, offset)


# ============================================================================
# Status & Admin Routes
# ============================================================================


@router.get("/ai-status")
async def ai_status(enrichment: EnrichmentDep):
    """Report whether the generative-text backend is configured and reachable."""
    result = await enrichment.test_connection()
    return {
        "success": result.ok,
        "message": result.message,
        "apiKey": "configured" if result.api_key_configured else "missing",
        "provider": result.provider,
    }


@router.get("/ingestion/status")
async def ingestion_status(scheduler: SchedulerDep):
    return scheduler.get_status()


@router.post("/admin/run-ingestion", status_code=status.HTTP_202_ACCEPTED)
async def trigger_ingestion(scheduler: SchedulerDep, settings: SettingsDep):
    """Manually trigger an ingestion run (development only)."""
    if settings.environment != "development":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only available in development mode",
        )

    started = scheduler.trigger_now()
    if not started:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An ingestion run is already in progress",
        )
    return {
        "message": "Ingestion job started",
        "requested_at": datetime.now(timezone.utc).isoformat(),
    }
