"""
Base class for summary backends.
A backend turns (model, text) into summary text; the invoker picks one
per request from the model's catalog features.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from scribe.ai.catalog import ModelDescriptor

SYSTEM_PROMPT = (
    "You are an expert at analyzing conversations and creating structured summaries. "
    "Focus on key decisions, action items, and important information."
)


def build_system_prompt(source_context: Optional[Dict[str, Any]]) -> str:
    if not source_context:
        return SYSTEM_PROMPT
    context = ", ".join(f"{key}: {value}" for key, value in source_context.items())
    return f"{SYSTEM_PROMPT} Context: {context}"


def build_user_prompt(text: str) -> str:
    return f"Please create a comprehensive summary of the following text:\n\n{text}"


@dataclass
class BackendResponse:
    """
    Raw backend output.

    Token counts are None when the provider did not report them; the
    invoker estimates them in that case.
    """
    text: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    quality_signals: Dict[str, Any] = field(default_factory=dict)


class SummaryBackend(ABC):
    """
    Abstract summary backend.

    All backends must implement:
    - generate(): produce a summary for a catalog model
    - is_configured(): whether credentials are present
    """

    name: str = "backend"

    @abstractmethod
    async def generate(
        self,
        model: ModelDescriptor,
        text: str,
        source_context: Optional[Dict[str, Any]] = None,
    ) -> BackendResponse:
        """
        Generate a summary of text with the given model.

        Raises:
            Exception: Any provider failure; the invoker wraps it
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """True if the backend has the credentials it needs."""
