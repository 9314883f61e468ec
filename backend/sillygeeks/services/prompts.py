"""
Prompt templates for the generative-text backend.
"""

SYSTEM_PROMPT = (
    "You are an editor at a technology news site. "
    "Be accurate, concise and neutral. Never invent facts that are not in the article."
)


def summarize_prompt(text: str) -> str:
    return f"""Summarize the following tech news article in 2-3 sentences.
Preserve the key points and technical details. Return only the summary.

Article:
{text}

Summary:"""


def categorize_prompt(title: str, text: str, candidates: list[str]) -> str:
    options = "\n".join(f"- {name}" for name in candidates)
    return f"""Assign the tech article below to exactly one of these categories:
{options}

Respond with only the category name, spelled exactly as listed.

Title: {title}

Content:
{text}

Category:"""


def tags_prompt(title: str, text: str) -> str:
    return f"""Generate 3-5 short topical tags for the tech article below.
Respond with JSON only, in this format: {{"tags": ["tag one", "tag two", "tag three"]}}

Title: {title}

Content:
{text}"""


CONNECTION_PROBE_PROMPT = "Reply with the single word: ok"
