"""
Fixture news source for development and testing.
Serves a fixed set of realistic tech stories without external API calls.
"""
from datetime import datetime, timedelta
from typing import Optional

from sillygeeks.models.domain import RawArticle, utcnow
from sillygeeks.sources.base import ArticleFetcher

FIXTURE_DATA = [
    {
        "title": "GPT-5 Prototype Shows Remarkable Reasoning Abilities, Claims OpenAI Researcher",
        "content": (
            "OpenAI's latest language model prototype demonstrates unprecedented reasoning "
            "capabilities and contextual understanding according to internal testing. The model "
            "reportedly shows significant improvements in mathematical reasoning, code generation "
            "and logical analysis compared to previous versions.\n\n"
            "During internal benchmarking, the prototype solved multi-step logical problems with "
            "an accuracy that approaches human-level performance in certain domains. \"We're seeing "
            "capabilities that genuinely surprised the research team,\" said Dr. Elena Martinez, who "
            "leads the evaluation division.\n\n"
            "The architecture builds on the transformer approach behind recent AI advances, with a "
            "context window of up to 1 million tokens, tighter multimodal integration and a process "
            "researchers call recursive self-critique. Despite the larger capabilities, the model "
            "reportedly needs only 1.5x the compute of GPT-4.\n\n"
            "Researchers stress that the road from prototype to production includes extensive "
            "evaluation, fine-tuning and the development of usage guidelines."
        ),
        "url": "https://example.com/gpt5-prototype",
        "image_url": "https://images.unsplash.com/photo-1620712943543-bcc4688e7485",
        "hours_ago": 2,
        "source_id": "ai-insider",
        "source_name": "AI Insider",
    },
    {
        "title": "Microsoft Unveils AI-Powered Developer Copilot Pro with Advanced Code Generation",
        "content": (
            "Microsoft has announced Developer Copilot Pro, a new tier of its AI pair programmer "
            "aimed at professional software teams. The tool supports more than 50 programming "
            "languages and keeps context across entire repositories rather than single files.\n\n"
            "Copilot Pro can propose multi-file refactorings, write and run unit tests, and explain "
            "unfamiliar code to developers joining a project. Early customers report that routine "
            "pull requests are being reviewed in half the time.\n\n"
            "The company describes the product as a continuous collaborator throughout the "
            "development process. Critics warn that teams will need new review practices to catch "
            "subtle bugs in generated code."
        ),
        "url": "https://example.com/microsoft-copilot-pro",
        "image_url": "https://images.unsplash.com/photo-1515879218367-8466d910aaa4",
        "hours_ago": 4,
        "source_id": "techcrunch",
        "source_name": "TechCrunch",
    },
    {
        "title": "iPhone 16 Design Leaked: What to Expect from Apple's Next Generation Smartphone",
        "content": (
            "Leaked schematics reveal a radical design overhaul for the iPhone 16, featuring a "
            "vertically stacked camera layout and a new display technology not seen in previous "
            "models. The documents suggest Apple's most significant smartphone redesign since the "
            "iPhone X.\n\n"
            "According to the leak, the device uses a thinner titanium frame, a dedicated capture "
            "button and a new generation of Apple silicon built on a 3nm process. Supply chain "
            "reports point to improved battery life and faster charging.\n\n"
            "Apple has declined to comment on unreleased products. As always, leaks should be "
            "treated with some skepticism until the official announcement."
        ),
        "url": "https://example.com/iphone-16-leaks",
        "image_url": "https://images.unsplash.com/photo-1600267175161-cfaa711b4a81",
        "hours_ago": 6,
        "source_id": "the-verge",
        "source_name": "The Verge",
    },
    {
        "title": "Breakthrough in Quantum Computing Could Lead to More Stable Qubits",
        "content": (
            "Researchers have developed a new method to maintain quantum coherence for longer "
            "periods, potentially accelerating the path to practical quantum applications. The "
            "technique extends qubit coherence times by an order of magnitude in laboratory tests.\n\n"
            "The team combined a new error-suppression scheme with improved materials for the "
            "superconducting circuits, reducing the noise that causes qubits to lose superposition "
            "and entanglement.\n\n"
            "Independent verification and peer review will be crucial, but preliminary confirmation "
            "from other laboratories suggests a genuine leap forward for the field."
        ),
        "url": "https://example.com/quantum-computing-breakthrough",
        "image_url": "https://images.unsplash.com/photo-1551739440-5dd934d3a94a",
        "hours_ago": 12,
        "source_id": "wired",
        "source_name": "Wired",
    },
    {
        "title": "New Zero-Day Vulnerability Affecting Multiple Operating Systems Found by Security Researchers",
        "content": (
            "A critical vulnerability has been discovered that could allow attackers to execute "
            "arbitrary code remotely on Windows, macOS and Linux systems. Patches are being "
            "developed urgently by the affected vendors.\n\n"
            "The flaw, dubbed MultiKernel, sits in a shared network driver component and can be "
            "triggered by a crafted packet without user interaction. Security researchers say there "
            "is no evidence of exploitation in the wild yet.\n\n"
            "Organizations are advised to restrict exposed services, monitor for unusual traffic and "
            "apply vendor mitigations as soon as they become available."
        ),
        "url": "https://example.com/zero-day-vulnerability",
        "image_url": "https://images.unsplash.com/photo-1526666923127-b2970f64b422",
        "hours_ago": 18,
        "source_id": "ars-technica",
        "source_name": "Ars Technica",
    },
]


def fixture_articles(now: Optional[datetime] = None) -> list[RawArticle]:
    """The fixture stories, published a few hours before ``now``."""
    now = now or utcnow()
    return [
        RawArticle(
            title=item["title"],
            content=item["content"],
            url=item["url"],
            published_at=now - timedelta(hours=item["hours_ago"]),
            source_name=item["source_name"],
            source_id=item["source_id"],
            image_url=item["image_url"],
        )
        for item in FIXTURE_DATA
    ]


class FixtureFetcher(ArticleFetcher):
    """Fetcher that always returns the fixture stories."""

    @property
    def name(self) -> str:
        return "Fixtures"

    async def fetch_batch(self) -> list[RawArticle]:
        return fixture_articles()
