"""
Legacy single-model backend.
Serves the free-tier model through DeepSeek's OpenAI-compatible API.
It reports neither token counts nor quality signals.
"""
from typing import Any, Dict, Optional
import logging

from openai import AsyncOpenAI

from scribe.ai.base import SummaryBackend, BackendResponse, build_system_prompt, build_user_prompt
from scribe.ai.catalog import ModelDescriptor
from scribe.config import settings

logger = logging.getLogger(__name__)


class DeepSeekBackend(SummaryBackend):
    """
    DeepSeek chat completion backend.

    The catalog's provider_model is ignored; the legacy path always calls
    the configured DeepSeek chat model.
    """

    name = "deepseek"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, chat_model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.deepseek_api_key
        self.base_url = base_url or settings.deepseek_base_url
        self.chat_model = chat_model or settings.deepseek_chat_model

        if self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        else:
            self.client = None

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate(
        self,
        model: ModelDescriptor,
        text: str,
        source_context: Optional[Dict[str, Any]] = None,
    ) -> BackendResponse:
        if not self.is_configured() or not self.client:
            raise ValueError("DeepSeek API key not configured")

        response = await self.client.chat.completions.create(
            model=self.chat_model,
            messages=[
                {"role": "system", "content": build_system_prompt(source_context)},
                {"role": "user", "content": build_user_prompt(text)},
            ],
            temperature=0.3,
            max_tokens=model.max_tokens,
        )

        summary = response.choices[0].message.content
        if not summary:
            raise ValueError("DeepSeek returned an empty summary")

        logger.debug(f"DeepSeek summary generated ({len(summary)} chars)")
        return BackendResponse(text=summary)
