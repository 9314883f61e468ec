"""
Main FastAPI application for SillyGeeks.
"""
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sillygeeks.api.routes import router
from sillygeeks.config import Settings, get_settings
from sillygeeks.core.errors import InvalidQueryError, NotFoundError
from sillygeeks.core.logging import configure_logging
from sillygeeks.jobs.ingestion import IngestionPipeline
from sillygeeks.jobs.scheduler import IngestionScheduler
from sillygeeks.models.store import ContentStore
from sillygeeks.services.catalog import CatalogService
from sillygeeks.services.enrichment import TextEnrichmentClient
from sillygeeks.sources.base import ArticleFetcher
from sillygeeks.sources.newsapi import NewsAPIFetcher

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - starts and stops the ingestion scheduler."""
    settings: Settings = app.state.settings
    scheduler: IngestionScheduler = app.state.scheduler

    if settings.scheduler_enabled:
        scheduler.start()
    else:
        logger.info("Ingestion scheduler disabled")

    yield

    logger.info("Shutting down")
    scheduler.shutdown()


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def invalid_query_handler(request: Request, exc: InvalidQueryError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ContentStore] = None,
    fetcher: Optional[ArticleFetcher] = None,
    enrichment: Optional[TextEnrichmentClient] = None,
) -> FastAPI:
    """
    Build the application and its components.

    The content store is created here, once, and shared by the ingestion
    pipeline and the API through ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    store = store or ContentStore()
    enrichment = enrichment or TextEnrichmentClient.from_settings(settings)
    fetcher = fetcher or NewsAPIFetcher(settings)
    pipeline = IngestionPipeline(store, fetcher, enrichment)
    scheduler = IngestionScheduler(
        pipeline,
        interval_minutes=settings.ingestion_interval_minutes,
        run_on_start=settings.run_ingestion_on_startup,
    )

    app = FastAPI(
        title=settings.app_name,
        description="AI-powered tech news.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.enrichment = enrichment
    app.state.pipeline = pipeline
    app.state.scheduler = scheduler
    app.state.catalog = CatalogService(
        store,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        search_max_length=settings.search_max_length,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InvalidQueryError, invalid_query_handler)
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "sillygeeks",
            "version": settings.app_version,
            "articles": store.count_articles(),
        }

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "SillyGeeks API",
            "tagline": "AI-Powered Tech News",
            "version": settings.app_version,
            "docs": "/docs",
            "endpoints": {
                "articles": "/api/articles",
                "featured": "/api/articles/featured",
                "categories": "/api/categories",
                "tags": "/api/tags",
                "search": "/api/search?query=",
                "ai_status": "/api/ai-status",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "sillygeeks.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
