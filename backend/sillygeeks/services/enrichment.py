"""
Text-enrichment client using LLMs (Claude or GPT).

Produces the summary, category and tags for every ingested article. Every
operation has a deterministic local fallback (see ``fallback.py``) so a
backend outage, a timeout or an unusable reply never stops ingestion.

Backend health is tracked explicitly by ``BackendAvailability``: after a
transport failure the backend is skipped for ``probe_interval`` seconds, then
the next call is let through as a probe.
"""
import asyncio
import json
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import anthropic
import openai
import structlog
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from sillygeeks.config import Settings, get_settings
from sillygeeks.core.taxonomy import MAX_TAGS, MIN_TAGS
from sillygeeks.models.domain import ConnectionStatus
from sillygeeks.services import prompts
from sillygeeks.services.fallback import local_category, local_summary, local_tags

logger = structlog.get_logger(__name__)

# Article bodies beyond this are truncated before being sent to the backend.
MAX_PROMPT_CHARS = 8000


# =============================================================================
# Errors
# =============================================================================

class EnrichmentError(Exception):
    """Base error for a backend call that could not be used."""


class BackendUnavailableError(EnrichmentError):
    """Backend unreachable: timeout, connection error, rate limit, 5xx or bad credentials."""


class InvalidResponseError(EnrichmentError):
    """Backend answered, but the answer is empty, malformed or off-list."""


class TagList(BaseModel):
    tags: list[str]


# =============================================================================
# Availability (circuit breaker)
# =============================================================================

class BackendAvailability:
    """
    Remembers whether the generative backend is usable.

    closed (available) -> every call goes through
    open (unavailable) -> calls are refused until ``probe_interval`` seconds
                          have passed since the failure, then one probe call
                          is allowed; its outcome closes or re-opens the breaker
    """

    def __init__(
        self,
        probe_interval: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.probe_interval = probe_interval
        self._clock = clock
        self.available = True
        self.opened_at: Optional[float] = None
        self.last_error: Optional[str] = None

    def allow_request(self) -> bool:
        if self.available or self.opened_at is None:
            return True
        now = self._clock()
        if now - self.opened_at < self.probe_interval:
            return False
        # Hand out a single probe; later callers wait for its outcome.
        self.opened_at = now
        return True

    def record_success(self) -> None:
        if not self.available:
            logger.info("Enrichment backend available again")
        self.available = True
        self.opened_at = None
        self.last_error = None

    def record_failure(self, error: str) -> None:
        if self.available:
            logger.warning("Enrichment backend marked unavailable", error=error)
        self.available = False
        self.opened_at = self._clock()
        self.last_error = error


# =============================================================================
# Backends
# =============================================================================

class GenerativeBackend(ABC):
    """A single-prompt text completion provider."""

    name: str = "generic"

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        json_output: bool = False,
    ) -> str:
        """
        Return the model's text reply to ``prompt``.

        Raises:
            InvalidResponseError: the reply has no usable text
            Exception: any SDK/transport error, classified by the caller
        """


class AnthropicBackend(GenerativeBackend):
    """Claude via the Anthropic SDK."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str, timeout: float):
        self.model = model
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(self, prompt: str, *, max_tokens: int, json_output: bool = False) -> str:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=prompts.SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        try:
            text = response.content[0].text
        except (IndexError, AttributeError) as e:
            raise InvalidResponseError("Unexpected response structure from Anthropic") from e
        if not text or not text.strip():
            raise InvalidResponseError("Empty response from Anthropic")
        return text.strip()


class OpenAIBackend(GenerativeBackend):
    """GPT via the OpenAI SDK."""

    name = "openai"

    def __init__(self, api_key: str, model: str, timeout: float):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(self, prompt: str, *, max_tokens: int, json_output: bool = False) -> str:
        kwargs = {}
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": prompts.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            **kwargs,
        )
        try:
            text = response.choices[0].message.content
        except (IndexError, AttributeError) as e:
            raise InvalidResponseError("Unexpected response structure from OpenAI") from e
        if not text or not text.strip():
            raise InvalidResponseError("Empty response from OpenAI")
        return text.strip()


def create_backend(settings: Settings) -> Optional[GenerativeBackend]:
    """Pick a backend from configured credentials; None means demo mode."""
    if settings.anthropic_api_key:
        return AnthropicBackend(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.enrichment_timeout_seconds,
        )
    if settings.openai_api_key:
        return OpenAIBackend(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.enrichment_timeout_seconds,
        )
    return None


def describe_backend_error(error: BaseException) -> str:
    """Short, log-friendly reason for a failed backend call."""
    if isinstance(error, asyncio.TimeoutError):
        return "request timed out"
    if isinstance(error, (openai.APITimeoutError, anthropic.APITimeoutError)):
        return "request timed out"
    if isinstance(error, (openai.RateLimitError, anthropic.RateLimitError)):
        return "rate limit exceeded"
    if isinstance(error, (openai.AuthenticationError, anthropic.AuthenticationError)):
        return "authentication failed"
    if isinstance(error, (openai.APIConnectionError, anthropic.APIConnectionError)):
        return "service unreachable"
    if isinstance(error, (openai.APIStatusError, anthropic.APIStatusError)):
        return f"service error (status {error.status_code})"
    return f"unexpected error: {error}"


# =============================================================================
# Reply parsing
# =============================================================================

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")
_REPLY_NOISE = "\"'`*.:;!\n\t "


def match_category(reply: str, candidates: list[str]) -> str:
    """
    Map a free-text category reply onto one of ``candidates``.

    Exact (case-insensitive) match first, then a reply that mentions exactly
    one candidate as a whole phrase ("The category is AI.").
    """
    cleaned = reply.strip().strip(_REPLY_NOISE)
    if cleaned.lower().startswith("category"):
        cleaned = cleaned[len("category"):].strip(_REPLY_NOISE)

    for candidate in candidates:
        if candidate.lower() == cleaned.lower():
            return candidate

    mentioned = [
        candidate
        for candidate in candidates
        if re.search(r"\b" + re.escape(candidate.lower()) + r"\b", reply.lower())
    ]
    if len(mentioned) == 1:
        return mentioned[0]

    raise InvalidResponseError(f"Category reply not in candidate list: {reply[:80]!r}")


def parse_tags(reply: str) -> list[str]:
    """Parse a JSON tag reply into three to five distinct, non-empty names."""
    body = _CODE_FENCE.sub("", reply.strip())
    try:
        parsed = json.loads(body)
        if isinstance(parsed, list):
            parsed = {"tags": parsed}
        result = TagList.model_validate(parsed)
    except (json.JSONDecodeError, ValidationError) as e:
        raise InvalidResponseError(f"Malformed tag reply: {e}") from e

    tags: list[str] = []
    seen: set[str] = set()
    for tag in result.tags:
        name = " ".join(tag.split())
        if name and name.lower() not in seen:
            seen.add(name.lower())
            tags.append(name)

    if len(tags) < MIN_TAGS:
        raise InvalidResponseError(f"Tag reply had {len(tags)} tags, expected at least {MIN_TAGS}")
    return tags[:MAX_TAGS]


# =============================================================================
# Client
# =============================================================================

class TextEnrichmentClient:
    """
    Summaries, categories and tags for articles.

    ``summarize``, ``categorize`` and ``generate_tags`` never raise for backend
    problems: they fall back to the local implementations and log why.
    """

    def __init__(
        self,
        backend: Optional[GenerativeBackend] = None,
        *,
        timeout: float = 20.0,
        availability: Optional[BackendAvailability] = None,
    ):
        self.backend = backend
        self.timeout = timeout
        self.availability = availability or BackendAvailability()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TextEnrichmentClient":
        settings = settings or get_settings()
        backend = create_backend(settings)
        client = cls(
            backend,
            timeout=settings.enrichment_timeout_seconds,
            availability=BackendAvailability(
                probe_interval=settings.enrichment_probe_interval_minutes * 60,
            ),
        )
        if backend is None:
            logger.info("No generative backend key configured, using demo mode")
        else:
            logger.info("Enrichment backend configured", provider=backend.name)
        return client

    @property
    def api_key_configured(self) -> bool:
        return self.backend is not None

    @property
    def backend_available(self) -> bool:
        return self.backend is not None and self.availability.available

    async def _call(self, prompt: str, *, max_tokens: int, json_output: bool = False) -> str:
        """One bounded backend call; transport problems become BackendUnavailableError."""
        if self.backend is None:
            raise BackendUnavailableError("no backend configured")
        try:
            return await asyncio.wait_for(
                self.backend.complete(prompt, max_tokens=max_tokens, json_output=json_output),
                timeout=self.timeout,
            )
        except InvalidResponseError:
            raise
        except Exception as e:
            raise BackendUnavailableError(describe_backend_error(e)) from e

    async def _enrich(self, operation: str, call, parse, fallback):
        """
        Run ``call`` through the breaker and ``parse`` its reply, or return
        ``fallback()`` if the backend is missing, unavailable or unusable.
        """
        if self.backend is None:
            return fallback()
        if not self.availability.allow_request():
            logger.debug("Enrichment backend unavailable, using local fallback", operation=operation)
            return fallback()

        try:
            reply = await call()
            result = parse(reply)
        except BackendUnavailableError as e:
            self.availability.record_failure(str(e))
            logger.warning(
                "Enrichment backend call failed, using local fallback",
                operation=operation,
                error=str(e),
            )
            return fallback()
        except InvalidResponseError as e:
            # The backend answered, so it stays marked available.
            self.availability.record_success()
            logger.warning(
                "Unusable enrichment reply, using local fallback",
                operation=operation,
                error=str(e),
            )
            return fallback()

        self.availability.record_success()
        return result

    async def summarize(self, text: str) -> str:
        """2-3 sentence abstract of ``text``."""
        if not text.strip():
            return ""

        body = text[:MAX_PROMPT_CHARS]
        return await self._enrich(
            "summarize",
            lambda: self._call(prompts.summarize_prompt(body), max_tokens=200),
            lambda reply: reply,
            lambda: local_summary(text),
        )

    async def categorize(self, title: str, text: str, candidates: list[str]) -> str:
        """Exactly one name out of ``candidates``."""
        if not candidates:
            raise ValueError("candidates must not be empty")

        body = text[:MAX_PROMPT_CHARS]
        return await self._enrich(
            "categorize",
            lambda: self._call(
                prompts.categorize_prompt(title, body, candidates),
                max_tokens=20,
            ),
            lambda reply: match_category(reply, candidates),
            lambda: local_category(title, text, candidates),
        )

    async def generate_tags(self, title: str, text: str) -> list[str]:
        """3-5 topical tag names."""
        body = text[:MAX_PROMPT_CHARS]
        return await self._enrich(
            "generate_tags",
            lambda: self._call(
                prompts.tags_prompt(title, body),
                max_tokens=100,
                json_output=True,
            ),
            parse_tags,
            lambda: local_tags(title, text),
        )

    async def test_connection(self) -> ConnectionStatus:
        """
        Probe the backend. Never raises.

        Ignores the breaker (this *is* the probe) and updates it with the outcome.
        """
        if self.backend is None:
            return ConnectionStatus(
                ok=False,
                message="No generative backend API key provided. Running in demo mode.",
                api_key_configured=False,
            )

        try:
            await self._call(prompts.CONNECTION_PROBE_PROMPT, max_tokens=5)
        except BackendUnavailableError as e:
            self.availability.record_failure(str(e))
            return ConnectionStatus(
                ok=False,
                message=f"Failed to connect to {self.backend.name}: {e}. Running in demo mode.",
                api_key_configured=True,
                provider=self.backend.name,
            )
        except InvalidResponseError as e:
            return ConnectionStatus(
                ok=False,
                message=f"Connected to {self.backend.name} but got an unexpected reply: {e}",
                api_key_configured=True,
                provider=self.backend.name,
            )

        self.availability.record_success()
        return ConnectionStatus(
            ok=True,
            message=f"Successfully connected to {self.backend.name}.",
            api_key_configured=True,
            provider=self.backend.name,
        )
