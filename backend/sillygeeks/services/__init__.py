"""
Services layer - core business logic for SillyGeeks.

1. Enrichment (enrichment.py):
   - LLM-powered summaries, categories and tags
   - Backend availability tracking with local fallbacks (fallback.py)

2. Catalog (catalog.py):
   - Read-side queries with categories and tags resolved
   - Search input validation
"""

from sillygeeks.services.catalog import CatalogService
from sillygeeks.services.enrichment import (
    BackendAvailability,
    TextEnrichmentClient,
)

__all__ = [
    "BackendAvailability",
    "CatalogService",
    "TextEnrichmentClient",
]
