#!/usr/bin/env python3
"""
CLI tool for news ingestion.

Usage:
    # One ingestion pass into a fresh in-memory store
    sillygeeks-ingest run --verbose

    # Check enrichment backend and news feed health
    sillygeeks-ingest health

    # Run the scheduler (continuous)
    sillygeeks-ingest serve --interval 60
"""

import argparse
import asyncio
import json
import sys

import structlog

from sillygeeks.config import get_settings
from sillygeeks.core.logging import configure_logging
from sillygeeks.jobs.ingestion import IngestionPipeline
from sillygeeks.jobs.scheduler import IngestionScheduler
from sillygeeks.models.store import ContentStore
from sillygeeks.services.catalog import CatalogService
from sillygeeks.services.enrichment import TextEnrichmentClient
from sillygeeks.sources.base import ArticleFetcher
from sillygeeks.sources.fixtures import FixtureFetcher
from sillygeeks.sources.newsapi import NewsAPIFetcher

logger = structlog.get_logger(__name__)


def create_pipeline(use_fixtures: bool = False) -> IngestionPipeline:
    """Build a pipeline over a fresh store from environment config."""
    settings = get_settings()
    fetcher: ArticleFetcher = FixtureFetcher() if use_fixtures else NewsAPIFetcher(settings)
    return IngestionPipeline(
        ContentStore(),
        fetcher,
        TextEnrichmentClient.from_settings(settings),
    )


async def cmd_run(args) -> int:
    """Run one ingestion pass and report what was stored."""
    pipeline = create_pipeline(use_fixtures=args.fixtures)
    stats = await pipeline.run()

    print("\n" + "=" * 60)
    print("INGESTION RESULTS")
    print("=" * 60)
    print(stats)

    catalog = CatalogService(pipeline.store)
    articles = catalog.articles(limit=catalog.max_page_size)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(
                {
                    "stats": stats.to_dict(),
                    "articles": [a.model_dump(mode="json") for a in articles],
                },
                f,
                indent=2,
            )
        print(f"\nArticles saved to: {args.output}")

    if args.verbose:
        print("\n" + "=" * 60)
        print("ARTICLES")
        print("=" * 60)
        for article in articles:
            category = article.category.name if article.category else "-"
            print(f"\n[{article.source_name}] {article.title}")
            print(f"  URL: {article.original_url}")
            print(f"  Date: {article.published_at.isoformat()}")
            print(f"  Category: {category}")
            print(f"  Tags: {', '.join(t.name for t in article.tags)}")
            print(f"  Summary: {article.summary}")

    return 0 if stats.success else 1


async def cmd_health(args) -> int:
    """Check the enrichment backend and the news feed."""
    settings = get_settings()
    enrichment = TextEnrichmentClient.from_settings(settings)
    fetcher = NewsAPIFetcher(settings)

    ai = await enrichment.test_connection()
    feed_ok = await fetcher.health_check()

    print("\n" + "=" * 40)
    print("SOURCE HEALTH")
    print("=" * 40)
    print(f"  Enrichment: {'✓ OK' if ai.ok else '✗ FAILED'} - {ai.message}")
    feed_message = "✓ OK" if feed_ok else (
        "✗ FAILED" if settings.newsapi_key else "- no key, fixture mode"
    )
    print(f"  NewsAPI: {feed_message}")

    return 0 if ai.ok and feed_ok else 1


async def cmd_serve(args) -> int:
    """Run the ingestion scheduler until interrupted."""
    pipeline = create_pipeline(use_fixtures=args.fixtures)
    scheduler = IngestionScheduler(pipeline, interval_minutes=args.interval)

    print(f"Starting scheduler (ingest every {args.interval} minutes)")
    print("Press Ctrl+C to stop")

    scheduler.start()
    try:
        while True:
            await asyncio.sleep(60)
            logger.debug("Scheduler status", **scheduler.get_status())
    finally:
        scheduler.shutdown()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="SillyGeeks - News Ingestion CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run one ingestion pass")
    run_parser.add_argument(
        "--fixtures", "-f",
        action="store_true",
        help="Use fixture articles instead of NewsAPI",
    )
    run_parser.add_argument(
        "--output", "-o",
        help="Output file for stored articles (JSON)",
    )
    run_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show stored articles",
    )

    subparsers.add_parser("health", help="Check enrichment backend and feed health")

    serve_parser = subparsers.add_parser("serve", help="Run continuous scheduler")
    serve_parser.add_argument(
        "--interval", "-i",
        type=int,
        default=get_settings().ingestion_interval_minutes,
        help="Ingestion interval in minutes (default: INGESTION_INTERVAL_MINUTES or 60)",
    )
    serve_parser.add_argument("--fixtures", "-f", action="store_true")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = get_settings()
    configure_logging(settings.log_level, "console")

    if args.command == "run":
        return asyncio.run(cmd_run(args))
    elif args.command == "health":
        return asyncio.run(cmd_health(args))
    elif args.command == "serve":
        try:
            return asyncio.run(cmd_serve(args))
        except KeyboardInterrupt:
            print("\nShutting down...")
            return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
