"""
Multi-model backend.
Routes catalog models to their provider: OpenAI and OpenRouter through
the OpenAI SDK, Anthropic through the Anthropic SDK. Returns provider
token usage when reported and heuristic quality signals for the result.
"""
from typing import Any, Dict, Optional
import logging

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from scribe.ai.base import SummaryBackend, BackendResponse, build_system_prompt, build_user_prompt
from scribe.ai.catalog import ModelDescriptor
from scribe.config import settings
from scribe.services.quality_scorer import estimate_quality_signals

logger = logging.getLogger(__name__)


class MultiModelBackend(SummaryBackend):
    """Premium-model backend covering several providers."""

    name = "multi_model"

    def __init__(
        self,
        openai_client: Optional[AsyncOpenAI] = None,
        openrouter_client: Optional[AsyncOpenAI] = None,
        anthropic_client: Optional[AsyncAnthropic] = None,
    ):
        self._clients = {
            "openai": openai_client,
            "openrouter": openrouter_client,
            "anthropic": anthropic_client,
        }

    @classmethod
    def from_settings(cls) -> "MultiModelBackend":
        openai_client = None
        if settings.openai_api_key:
            openai_client = AsyncOpenAI(api_key=settings.openai_api_key)

        openrouter_client = None
        if settings.openrouter_api_key:
            openrouter_client = AsyncOpenAI(
                api_key=settings.openrouter_api_key,
                base_url=settings.openrouter_base_url,
                default_headers={"HTTP-Referer": settings.site_url, "X-Title": "SummaryScribe"},
            )

        anthropic_client = None
        if settings.anthropic_api_key:
            anthropic_client = AsyncAnthropic(api_key=settings.anthropic_api_key)

        return cls(openai_client, openrouter_client, anthropic_client)

    def is_configured(self) -> bool:
        return any(client is not None for client in self._clients.values())

    def supports_provider(self, provider: str) -> bool:
        return self._clients.get(provider) is not None

    async def generate(
        self,
        model: ModelDescriptor,
        text: str,
        source_context: Optional[Dict[str, Any]] = None,
    ) -> BackendResponse:
        client = self._clients.get(model.provider)
        if client is None:
            raise ValueError(f"No client configured for provider {model.provider}")

        system_prompt = build_system_prompt(source_context)
        if model.provider == "anthropic":
            response = await self._generate_anthropic(client, model, system_prompt, text)
        else:
            response = await self._generate_openai(client, model, system_prompt, text)

        response.quality_signals = estimate_quality_signals(text, response.text)
        return response

    async def _generate_openai(self, client: AsyncOpenAI, model: ModelDescriptor, system_prompt: str, text: str) -> BackendResponse:
        completion = await client.chat.completions.create(
            model=model.provider_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": build_user_prompt(text)},
            ],
            temperature=0.3,
            max_tokens=model.max_tokens,
        )

        summary = completion.choices[0].message.content
        if not summary:
            raise ValueError(f"{model.provider} returned an empty summary")

        usage = getattr(completion, "usage", None)
        return BackendResponse(
            text=summary,
            tokens_in=getattr(usage, "prompt_tokens", None),
            tokens_out=getattr(usage, "completion_tokens", None),
        )

    async def _generate_anthropic(self, client: AsyncAnthropic, model: ModelDescriptor, system_prompt: str, text: str) -> BackendResponse:
        message = await client.messages.create(
            model=model.provider_model,
            system=system_prompt,
            messages=[{"role": "user", "content": build_user_prompt(text)}],
            temperature=0.3,
            max_tokens=model.max_tokens,
        )

        parts = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        summary = "".join(parts)
        if not summary:
            raise ValueError("anthropic returned an empty summary")

        usage = getattr(message, "usage", None)
        return BackendResponse(
            text=summary,
            tokens_in=getattr(usage, "input_tokens", None),
            tokens_out=getattr(usage, "output_tokens", None),
        )
