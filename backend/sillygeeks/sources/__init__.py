"""
News sources for SillyGeeks.
"""
from sillygeeks.sources.base import ArticleFetcher
from sillygeeks.sources.fixtures import FixtureFetcher, fixture_articles
from sillygeeks.sources.newsapi import NewsAPIFetcher

__all__ = [
    "ArticleFetcher",
    "FixtureFetcher",
    "NewsAPIFetcher",
    "fixture_articles",
]
