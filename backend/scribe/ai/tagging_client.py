"""
Tagging client: asks a small JSON-mode model for structured tags.
"""
from dataclasses import dataclass
from typing import Optional
import logging
import time

from openai import AsyncOpenAI

from scribe.ai.catalog import ModelDescriptor
from scribe.config import settings
from scribe.utils.logging import log_provider_request, log_provider_failure
from scribe.utils.metrics import (
    ai_provider_requests_total,
    ai_provider_failures_total,
    ai_provider_latency_seconds,
    ai_provider_tokens_total,
)

logger = logging.getLogger(__name__)

TAGGING_SYSTEM_PROMPT = """You are an expert at analyzing business conversations and extracting structured information.

Extract the following from the summary and return ONLY a JSON object with these keys:
- skills: professional skills discussed (e.g. "project management", "negotiation")
- technologies: tools, frameworks and platforms mentioned
- roles: job roles or people's functions mentioned
- action_items: concrete tasks that were assigned or agreed
- decisions: decisions that were made
- sentiments: overall sentiments (e.g. "positive", "concerned")
- emotions: emotions expressed (e.g. "excitement", "frustration")
- confidence_score: a number between 0 and 1 for how confident you are in the extraction

Every key except confidence_score must be an array of short strings. Use an empty array when nothing applies."""


@dataclass
class TaggingResponse:
    content: str
    tokens_used: int


class TaggingClient:
    """OpenAI-compatible JSON-mode client, pointed at OpenRouter by default."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        if client is None and settings.openrouter_api_key:
            client = AsyncOpenAI(
                api_key=settings.openrouter_api_key,
                base_url=settings.openrouter_base_url,
                default_headers={"HTTP-Referer": settings.site_url, "X-Title": "SummaryScribe Smart Tagging"},
            )
        self.client = client

    def is_configured(self) -> bool:
        return self.client is not None

    async def extract(self, model: ModelDescriptor, summary_text: str) -> TaggingResponse:
        """
        Request tags for a summary.

        Returns the raw message content; parsing and validation are the
        caller's job.

        Raises:
            ValueError: If no client is configured or the reply is empty
            Exception: Any provider failure
        """
        if not self.client:
            raise ValueError("Tagging client not configured")

        provider = model.provider
        start_time = time.monotonic()
        ai_provider_requests_total.labels(provider=provider, operation="tag").inc()

        try:
            completion = await self.client.chat.completions.create(
                model=model.provider_model,
                messages=[
                    {"role": "system", "content": TAGGING_SYSTEM_PROMPT},
                    {"role": "user", "content": f"Extract structured tags from this summary:\n\n{summary_text}"},
                ],
                response_format={"type": "json_object"},
                temperature=0.1,
                max_tokens=model.max_tokens,
            )
        except Exception as e:
            duration = time.monotonic() - start_time
            ai_provider_failures_total.labels(provider=provider, operation="tag").inc()
            ai_provider_latency_seconds.labels(provider=provider, operation="tag").observe(duration)
            log_provider_failure(
                logger,
                provider=provider,
                operation="tag",
                error=str(e),
                duration_ms=duration * 1000,
                model_id=model.id,
            )
            raise

        duration = time.monotonic() - start_time
        ai_provider_latency_seconds.labels(provider=provider, operation="tag").observe(duration)

        content = completion.choices[0].message.content
        if not content:
            raise ValueError("No response from AI tagging service")

        usage = getattr(completion, "usage", None)
        tokens_used = getattr(usage, "total_tokens", None) or 0
        if tokens_used:
            ai_provider_tokens_total.labels(provider=provider, operation="tag", token_type="total").inc(tokens_used)

        log_provider_request(
            logger,
            provider=provider,
            operation="tag",
            duration_ms=duration * 1000,
            model_id=model.id,
        )
        return TaggingResponse(content=content, tokens_used=tokens_used)
