"""
Tests for the in-memory content store.
"""

from datetime import datetime

import pytest

from conftest import make_article
from sillygeeks.core.errors import DuplicateEntityError, NotFoundError
from sillygeeks.models.domain import ArticleUpdate, CategoryCreate
from sillygeeks.models.store import ContentStore


class TestCategories:
    """Tests for starter categories and category lookups."""

    def test_starter_categories_seeded(self, store):
        names = [c.name for c in store.list_categories()]
        assert names == ["AI", "Gadgets", "Software", "Cybersecurity", "Blockchain", "Quantum Computing"]
        assert [c.id for c in store.list_categories()] == [1, 2, 3, 4, 5, 6]

    def test_empty_seed_list(self):
        assert ContentStore(seed_categories=[]).list_categories() == []

    def test_lookup_by_slug_and_name(self, store):
        assert store.get_category_by_slug("quantum-computing").name == "Quantum Computing"
        assert store.get_category_by_name("cybersecurity").slug == "cybersecurity"
        assert store.get_category_by_slug("nope") is None
        assert store.get_category_by_name("Robots") is None

    def test_duplicate_category_rejected(self, store):
        with pytest.raises(DuplicateEntityError):
            store.create_category(CategoryCreate(name="ai", slug="artificial"))

    def test_count_articles_by_category(self, store):
        ai = store.get_category_by_slug("ai")
        store.create_article(make_article("https://example.com/1", category_id=ai.id))
        store.create_article(make_article("https://example.com/2", category_id=ai.id))

        counts = store.count_articles_by_category()
        assert counts[ai.id] == 2
        assert counts[store.get_category_by_slug("gadgets").id] == 0


class TestArticles:
    """Tests for article persistence and queries."""

    def test_create_assigns_ids_and_defaults(self, store):
        first = store.create_article(make_article("https://example.com/1"))
        second = store.create_article(make_article("https://example.com/2"))

        assert (first.id, second.id) == (1, 2)
        assert first.view_count == 0
        assert first.ai_processed is False
        assert first.created_at.tzinfo is not None

    def test_duplicate_url_rejected(self, store):
        store.create_article(make_article("https://example.com/1"))
        with pytest.raises(DuplicateEntityError):
            store.create_article(make_article("https://example.com/1", title="Other"))
        assert store.count_articles() == 1

    def test_unknown_category_rejected(self, store):
        with pytest.raises(NotFoundError):
            store.create_article(make_article("https://example.com/1", category_id=99))

    def test_naive_published_at_treated_as_utc(self, store):
        data = make_article("https://example.com/1")
        data.published_at = datetime(2025, 1, 1, 8, 0)
        article = store.create_article(data)
        assert article.published_at.tzinfo is not None

    def test_list_newest_first_with_id_tiebreak(self, store):
        store.create_article(make_article("https://example.com/old", hours_ago=5))
        store.create_article(make_article("https://example.com/tie-a", hours_ago=1))
        store.create_article(make_article("https://example.com/tie-b", hours_ago=1))
        store.create_article(make_article("https://example.com/new", hours_ago=0))

        urls = [a.original_url for a in store.list_articles()]
        assert urls == [
            "https://example.com/new",
            "https://example.com/tie-a",
            "https://example.com/tie-b",
            "https://example.com/old",
        ]

    def test_pagination_is_deterministic(self, store):
        for i in range(5):
            store.create_article(make_article(f"https://example.com/{i}", hours_ago=i))

        everything = store.list_articles()
        page_one = store.list_articles(limit=2, offset=0)
        page_two = store.list_articles(limit=2, offset=2)
        page_three = store.list_articles(limit=2, offset=4)

        assert [a.id for a in page_one + page_two + page_three] == [a.id for a in everything]
        assert store.list_articles(limit=2, offset=10) == []

    def test_negative_pagination_rejected(self, store):
        with pytest.raises(ValueError):
            store.list_articles(limit=-1)
        with pytest.raises(ValueError):
            store.list_articles(offset=-1)

    def test_featured_is_newest(self, store):
        assert store.get_featured_article() is None

        store.create_article(make_article("https://example.com/old", hours_ago=3))
        store.create_article(make_article("https://example.com/new", hours_ago=0))
        store.create_article(make_article("https://example.com/mid", hours_ago=1))

        assert store.get_featured_article().original_url == "https://example.com/new"

    def test_search_is_case_insensitive_over_all_text(self, store):
        store.create_article(make_article("https://example.com/1", title="GPT-5 arrives"))
        store.create_article(make_article("https://example.com/2", summary="A new gpt model."))
        store.create_article(make_article("https://example.com/3", content="Nothing relevant."))

        results = store.search_articles("GPT")
        assert {a.original_url for a in results} == {
            "https://example.com/1",
            "https://example.com/2",
        }
        assert store.search_articles("   ") == []

    def test_by_category(self, store):
        ai = store.get_category_by_slug("ai")
        store.create_article(make_article("https://example.com/1", category_id=ai.id))
        store.create_article(make_article("https://example.com/2"))

        assert [a.original_url for a in store.list_articles_by_category(ai.id)] == [
            "https://example.com/1"
        ]

    def test_view_count_increments(self, store):
        article = store.create_article(make_article("https://example.com/1"))

        store.increment_view_count(article.id)
        updated = store.increment_view_count(article.id)

        assert updated.view_count == 2
        assert store.get_article_by_id(article.id).view_count == 2
        assert store.increment_view_count(999) is None

    def test_trending_orders_by_views_then_recency(self, store):
        old = store.create_article(make_article("https://example.com/old", hours_ago=3))
        new = store.create_article(make_article("https://example.com/new", hours_ago=0))
        mid = store.create_article(make_article("https://example.com/mid", hours_ago=1))
        store.increment_view_count(old.id)
        store.increment_view_count(old.id)
        store.increment_view_count(mid.id)

        assert [a.id for a in store.list_trending_articles()] == [old.id, mid.id, new.id]
        assert [a.id for a in store.list_trending_articles(limit=1, offset=1)] == [mid.id]

    def test_delete_article_removes_links(self, store):
        article = store.create_article(make_article("https://example.com/1"))
        tag = store.create_tag("AI", "ai")
        store.create_article_tag(article.id, tag.id)

        store.delete_article(article.id)

        assert store.get_article_by_id(article.id) is None
        assert store.get_article_by_url("https://example.com/1") is None
        assert store.list_article_tags() == []
        assert store.list_articles_by_tag(tag.id) == []
        assert store.get_tag_by_slug("ai") is not None
        with pytest.raises(NotFoundError):
            store.delete_article(article.id)

    def test_deleted_url_can_be_stored_again(self, store):
        first = store.create_article(make_article("https://example.com/1"))
        store.delete_article(first.id)

        second = store.create_article(make_article("https://example.com/1"))

        assert second.id == first.id + 1

    def test_returned_articles_are_copies(self, store):
        article = store.create_article(make_article("https://example.com/1"))
        article.title = "Mutated"
        assert store.get_article_by_id(article.id).title == "Article"


class TestUpdateArticle:
    """Tests for partial article updates."""

    def test_only_set_fields_change(self, store):
        ai = store.get_category_by_slug("ai")
        article = store.create_article(
            make_article("https://example.com/1", summary="Original.", category_id=ai.id)
        )

        updated = store.update_article(article.id, ArticleUpdate(ai_processed=True))

        assert updated.ai_processed is True
        assert updated.summary == "Original."
        assert updated.category_id == ai.id
        assert updated.published_at == article.published_at

    def test_category_can_be_cleared(self, store):
        ai = store.get_category_by_slug("ai")
        article = store.create_article(make_article("https://example.com/1", category_id=ai.id))

        updated = store.update_article(article.id, ArticleUpdate(category_id=None))
        assert updated.category_id is None

    def test_unknown_article(self, store):
        with pytest.raises(NotFoundError):
            store.update_article(42, ArticleUpdate(summary="x"))

    def test_unknown_category(self, store):
        article = store.create_article(make_article("https://example.com/1"))
        with pytest.raises(NotFoundError):
            store.update_article(article.id, ArticleUpdate(category_id=99))


class TestTags:
    """Tests for tags and article-tag links."""

    def test_tag_slug_unique(self, store):
        store.create_tag("AI", "ai")
        with pytest.raises(DuplicateEntityError):
            store.create_tag("Artificial Intelligence", "ai")

    def test_get_or_create_is_idempotent(self, store):
        first = store.get_or_create_tag_by_slug("chips", name="Chips")
        second = store.get_or_create_tag_by_slug("chips", name="CHIPS")

        assert first.id == second.id
        assert second.name == "Chips"
        assert len(store.list_tags()) == 1

    def test_get_or_create_uses_slug_when_name_taken(self, store):
        store.create_tag("Chips", "semiconductors")

        tag = store.get_or_create_tag_by_slug("chips-news", name="chips")

        assert tag.name == "chips-news"

    def test_get_or_create_when_slug_is_also_a_taken_name(self, store):
        store.create_tag("Cloud", "cloud-computing")

        tag = store.get_or_create_tag_by_slug("cloud", name="Cloud")

        assert (tag.slug, tag.name) == ("cloud", "cloud-2")
        assert store.get_or_create_tag_by_slug("cloud").id == tag.id
        assert len(store.list_tags()) == 2

    def test_link_pair_unique(self, store):
        article = store.create_article(make_article("https://example.com/1"))
        tag = store.create_tag("AI", "ai")

        first = store.create_article_tag(article.id, tag.id)
        second = store.create_article_tag(article.id, tag.id)

        assert first.id == second.id
        assert len(store.list_article_tags()) == 1
        assert [t.slug for t in store.list_tags_for_article(article.id)] == ["ai"]

    def test_link_requires_both_ends(self, store):
        article = store.create_article(make_article("https://example.com/1"))
        tag = store.create_tag("AI", "ai")

        with pytest.raises(NotFoundError):
            store.create_article_tag(99, tag.id)
        with pytest.raises(NotFoundError):
            store.create_article_tag(article.id, 99)

    def test_articles_by_tag(self, store):
        a1 = store.create_article(make_article("https://example.com/1", hours_ago=2))
        a2 = store.create_article(make_article("https://example.com/2", hours_ago=1))
        store.create_article(make_article("https://example.com/3"))
        tag = store.create_tag("AI", "ai")
        store.create_article_tag(a1.id, tag.id)
        store.create_article_tag(a2.id, tag.id)

        assert [a.id for a in store.list_articles_by_tag(tag.id)] == [a2.id, a1.id]
