"""
Fixed tech taxonomy: starter categories, keyword groups and feed topics.

Structure:
- Categories: the starter set seeded into every content store, each with the
  keywords used by the local (no-LLM) classifier
- Tag topic groups: keyword groups whose names become tags when no
  generative backend is available
- Feed topics/sources: the rotating NewsAPI queries
"""

import re
from dataclasses import dataclass
from functools import lru_cache


@lru_cache(maxsize=None)
def _compile_keyword(keyword: str) -> re.Pattern[str]:
    # Short keywords ("ai", "ar", "app") must be whole words (plural allowed);
    # longer ones only need a word start so "hack" still hits "hackers".
    escaped = re.escape(keyword.lower())
    if len(keyword) <= 3:
        return re.compile(r"\b" + escaped + r"s?\b")
    return re.compile(r"\b" + escaped)


@dataclass(frozen=True)
class KeywordGroup:
    """A named group of lower-case keywords."""

    name: str
    keywords: tuple[str, ...]

    def score(self, text: str) -> int:
        """Count how many of the group's keywords appear in ``text``."""
        text_lower = text.lower()
        return sum(1 for kw in self.keywords if _compile_keyword(kw).search(text_lower))

    def matches(self, text: str) -> bool:
        return self.score(text) > 0


@dataclass(frozen=True)
class CategorySeed:
    """A category created when the content store is initialized."""

    name: str
    slug: str
    description: str
    image_url: str


# ============================================================================
# STARTER CATEGORIES
# ============================================================================

STARTER_CATEGORIES: tuple[CategorySeed, ...] = (
    CategorySeed(
        name="AI",
        slug="ai",
        description="Artificial intelligence, machine learning and the models behind them",
        image_url="https://images.unsplash.com/photo-1620712943543-bcc4688e7485",
    ),
    CategorySeed(
        name="Gadgets",
        slug="gadgets",
        description="Phones, laptops, wearables and the hardware we carry around",
        image_url="https://images.unsplash.com/photo-1600267175161-cfaa711b4a81",
    ),
    CategorySeed(
        name="Software",
        slug="software",
        description="Developer tools, applications and the craft of programming",
        image_url="https://images.unsplash.com/photo-1515879218367-8466d910aaa4",
    ),
    CategorySeed(
        name="Cybersecurity",
        slug="cybersecurity",
        description="Vulnerabilities, breaches, privacy and defence",
        image_url="https://images.unsplash.com/photo-1526666923127-b2970f64b422",
    ),
    CategorySeed(
        name="Blockchain",
        slug="blockchain",
        description="Cryptocurrencies, web3 and distributed ledgers",
        image_url="https://images.unsplash.com/photo-1620288627223-53302f4e8c74",
    ),
    CategorySeed(
        name="Quantum Computing",
        slug="quantum-computing",
        description="Qubits, quantum algorithms and the race for quantum advantage",
        image_url="https://images.unsplash.com/photo-1551739440-5dd934d3a94a",
    ),
)


# Keywords for the local classifier, keyed by lower-cased category name.
CATEGORY_KEYWORDS: dict[str, KeywordGroup] = {
    group.name.lower(): group
    for group in (
        KeywordGroup("AI", ("ai", "artificial intelligence", "machine learning", "neural network", "gpt", "llm")),
        KeywordGroup("Gadgets", ("gadget", "device", "hardware", "phone", "laptop", "wearable")),
        KeywordGroup("Hardware", ("hardware", "chip", "processor", "gpu", "semiconductor", "device")),
        KeywordGroup("Software", ("software", "app", "application", "program", "code", "developer")),
        KeywordGroup("Cybersecurity", ("security", "hack", "breach", "vulnerability", "encrypt", "protect")),
        KeywordGroup("Blockchain", ("blockchain", "crypto", "bitcoin", "ethereum", "nft", "web3")),
        KeywordGroup("Quantum Computing", ("quantum", "qubit", "superposition", "entanglement")),
    )
}


# ============================================================================
# TAG TOPIC GROUPS (order matters: tags are emitted in this order)
# ============================================================================

TAG_TOPIC_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup("ai", ("ai", "artificial intelligence", "machine learning", "neural", "gpt", "llm")),
    KeywordGroup("blockchain", ("blockchain", "crypto", "bitcoin", "ethereum", "web3", "nft")),
    KeywordGroup("cybersecurity", ("security", "hack", "vulnerability", "password", "encryption", "privacy")),
    KeywordGroup("cloud", ("cloud", "aws", "azure", "google cloud", "serverless")),
    KeywordGroup("hardware", ("hardware", "chip", "processor", "gpu", "device")),
    KeywordGroup("mobile", ("mobile", "iphone", "android", "smartphone", "app")),
    KeywordGroup("software", ("software", "programming", "code", "developer", "app")),
    KeywordGroup("gaming", ("game", "gaming", "playstation", "xbox", "nintendo")),
    KeywordGroup("vr", ("vr", "virtual reality", "ar", "augmented reality", "metaverse")),
)

DEFAULT_TAG = "technology"
MIN_TAGS = 3
MAX_TAGS = 5


# ============================================================================
# NEWS FEED QUERIES
# ============================================================================

TECH_TOPICS: tuple[str, ...] = (
    "technology",
    "ai",
    "artificial intelligence",
    "machine learning",
    "blockchain",
    "quantum computing",
    "gadgets",
    "smartphones",
    "cybersecurity",
    "software",
    "hardware",
    "robotics",
)

TECH_SOURCES: tuple[str, ...] = (
    "wired",
    "the-verge",
    "techcrunch",
    "ars-technica",
    "hacker-news",
    "engadget",
    "recode",
    "techradar",
)


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]+")
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    """
    Turn a display name into a URL-safe slug.

    "Quantum Computing" -> "quantum-computing", "AI & ML" -> "ai-ml".
    """
    slug = _NON_SLUG_CHARS.sub("", text.strip().lower())
    slug = _SLUG_SEPARATORS.sub("-", slug)
    return slug.strip("-")


def get_category_keywords(category_name: str) -> KeywordGroup | None:
    """Look up the classifier keywords for a category name (case-insensitive)."""
    return CATEGORY_KEYWORDS.get(category_name.strip().lower())
