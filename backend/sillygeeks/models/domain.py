"""
Domain models for SillyGeeks.
These are the core business entities, independent of storage/API representation.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so publishedAt values stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Catalog entities
# =============================================================================

class Category(BaseModel):
    """A top-level section of the catalog (e.g. "AI", "Gadgets")."""
    id: int
    name: str
    slug: str
    description: str = ""
    image_url: Optional[str] = None


class CategoryCreate(BaseModel):
    name: str
    slug: str
    description: str = ""
    image_url: Optional[str] = None


class Tag(BaseModel):
    id: int
    name: str
    slug: str


class ArticleTag(BaseModel):
    """Association row between an article and a tag."""
    id: int
    article_id: int
    tag_id: int


class ArticleCreate(BaseModel):
    """Fields supplied by the ingestion pipeline when persisting an article."""
    title: str
    content: str
    summary: str
    original_url: str  # Dedup key
    image_url: Optional[str] = None
    published_at: datetime
    source_id: str
    source_name: str
    category_id: Optional[int] = None
    ai_processed: bool = False


class Article(ArticleCreate):
    """Stored article."""
    id: int
    created_at: datetime = Field(default_factory=utcnow)
    view_count: int = 0


class ArticleUpdate(BaseModel):
    """
    Partial patch for an article.

    Only fields explicitly set on the instance are merged into the stored
    record, so ``ArticleUpdate(ai_processed=True)`` leaves everything else as is.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    ai_processed: Optional[bool] = None


# =============================================================================
# Read models
# =============================================================================

class EnrichedArticle(Article):
    """An article with its category and tags resolved, as served by the API."""
    category: Optional[Category] = None
    tags: list[Tag] = Field(default_factory=list)


class CategoryWithCount(Category):
    article_count: int = 0


class ConnectionStatus(BaseModel):
    """Result of probing the generative-text backend."""
    ok: bool
    message: str
    api_key_configured: bool
    provider: Optional[str] = None


# =============================================================================
# Ingestion
# =============================================================================

@dataclass
class RawArticle:
    """
    Candidate article as returned by a source fetcher, before enrichment.
    """
    title: str
    content: str
    url: str
    published_at: datetime
    source_name: str
    source_id: str
    image_url: Optional[str] = None
    description: Optional[str] = None


@dataclass
class IngestionStats:
    """Outcome of one ingestion run."""
    fetched: int = 0
    new: int = 0
    skipped: int = 0
    failed: int = 0
    tags_linked: int = 0
    errors: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
    skipped_run: bool = False

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.errors

    def to_dict(self) -> dict:
        return {
            "fetched": self.fetched,
            "new": self.new,
            "skipped": self.skipped,
            "failed": self.failed,
            "tags_linked": self.tags_linked,
            "errors": list(self.errors),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": round(self.duration_seconds, 3),
            "skipped_run": self.skipped_run,
        }

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return (
            f"{status} ingestion: fetched={self.fetched}, new={self.new}, "
            f"skipped={self.skipped}, failed={self.failed}, "
            f"tags_linked={self.tags_linked}, time={self.duration_seconds:.1f}s"
        )
