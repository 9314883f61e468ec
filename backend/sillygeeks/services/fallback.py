"""
Local, deterministic stand-ins for the generative-text backend.

Used when no API key is configured, when the backend is marked unavailable,
or when a backend reply cannot be used. Same input, same output.
"""
import re

from sillygeeks.core.taxonomy import (
    DEFAULT_TAG,
    MAX_TAGS,
    TAG_TOPIC_GROUPS,
    get_category_keywords,
)

SUMMARY_CHAR_BUDGET = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def local_summary(text: str, char_budget: int = SUMMARY_CHAR_BUDGET) -> str:
    """
    Leading sentences of ``text`` until roughly ``char_budget`` characters.

    The sentence that crosses the budget is still included, so a summary is
    never cut mid-sentence.
    """
    summary_parts: list[str] = []
    char_count = 0

    for sentence in _SENTENCE_SPLIT.split(text.replace("\n", " ")):
        sentence = " ".join(sentence.split())
        if not sentence:
            continue
        clean = sentence + "."
        summary_parts.append(clean)
        char_count += len(clean)
        if char_count > char_budget:
            break

    return " ".join(summary_parts)


def local_category(title: str, text: str, candidates: list[str]) -> str:
    """
    Keyword-vote classifier.

    Each candidate scores one point per keyword of its group found in the
    title and body. Highest score wins; ties and zero matches go to the
    first candidate.
    """
    if not candidates:
        raise ValueError("candidates must not be empty")

    combined = f"{title} {text}"
    best_category = candidates[0]
    highest_score = 0

    for candidate in candidates:
        group = get_category_keywords(candidate)
        score = group.score(combined) if group else 0
        if score > highest_score:
            highest_score = score
            best_category = candidate

    return best_category


def local_tags(title: str, text: str) -> list[str]:
    """Names of the topic groups mentioned in the article, capped at five."""
    combined = f"{title} {text}"
    tags = [group.name for group in TAG_TOPIC_GROUPS if group.matches(combined)]
    if not tags:
        tags = [DEFAULT_TAG]
    return tags[:MAX_TAGS]
