"""
AI component factory.
Builds the catalog, backends and invoker from environment configuration.
"""
import logging

from scribe.ai.catalog import ModelCatalog, build_default_catalog
from scribe.ai.deepseek_backend import DeepSeekBackend
from scribe.ai.invoker import SummaryInvoker
from scribe.ai.multi_model_backend import MultiModelBackend
from scribe.ai.tagging_client import TaggingClient

logger = logging.getLogger(__name__)


def get_summary_invoker(catalog: ModelCatalog = None) -> SummaryInvoker:
    """
    Build the invoker with both backend strategies.

    Missing API keys are not fatal here: the affected backend raises on
    use and the request fails with a 500, while the other models keep
    working.
    """
    catalog = catalog or build_default_catalog()

    legacy = DeepSeekBackend()
    if not legacy.is_configured():
        logger.warning("DeepSeek API key not configured; free-tier summaries will fail")

    multi_model = MultiModelBackend.from_settings()
    for provider in ("openai", "openrouter", "anthropic"):
        if not multi_model.supports_provider(provider):
            logger.warning(f"No API key configured for provider {provider}")

    return SummaryInvoker(catalog, legacy, multi_model)


def get_tagging_client() -> TaggingClient:
    client = TaggingClient()
    if not client.is_configured():
        logger.warning("OpenRouter API key not configured; smart tagging will fail")
    return client
