"""
FastAPI dependencies wiring the summarization core.

Long-lived components (catalog, limiters, invoker, usage meter) are
built once per process; tests replace them via app.dependency_overrides.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Awaitable, Optional, TypeVar

from fastapi import Depends, Request

from scribe.ai.catalog import ModelCatalog, build_default_catalog
from scribe.ai.factory import get_summary_invoker, get_tagging_client
from scribe.ai.invoker import SummaryInvoker
from scribe.ai.selector import ModelSelector
from scribe.ai.tagging_client import TaggingClient
from scribe.config import settings
from scribe.exceptions import ClientDisconnected
from scribe.repositories.summary_repository import SummaryRepository
from scribe.repositories.usage_repository import UsageRepository
from scribe.services.plan_resolver import SubscriptionPlanResolver
from scribe.services.quality_scorer import QualityScorer
from scribe.services.rate_limiter import RateLimiterRegistry
from scribe.services.summarization import SummarizationPipeline
from scribe.services.tag_extraction import TagExtractionGate
from scribe.services.usage_meter import UsageMeter

logger = logging.getLogger(__name__)

T = TypeVar("T")

ANONYMOUS_CALLER_ID = "demo-anonymous"


def client_ip(request: Request) -> str:
    """Best-effort caller IP behind proxies and CDNs."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def client_identity(request: Request, operation: str) -> str:
    """Rate-limit key: operation class plus caller IP."""
    return f"{operation}:{client_ip(request)}"


@lru_cache
def get_catalog() -> ModelCatalog:
    return build_default_catalog()


@lru_cache
def get_rate_limiters() -> RateLimiterRegistry:
    return RateLimiterRegistry.from_settings(settings)


@lru_cache
def get_invoker() -> SummaryInvoker:
    return get_summary_invoker(get_catalog())


@lru_cache
def get_tagging() -> TaggingClient:
    return get_tagging_client()


@lru_cache
def get_usage_meter() -> UsageMeter:
    return UsageMeter(get_catalog(), UsageRepository())


def get_plan_resolver():
    return SubscriptionPlanResolver()


def get_summary_repository() -> SummaryRepository:
    return SummaryRepository()


def get_pipeline(
    limiters: RateLimiterRegistry = Depends(get_rate_limiters),
    catalog: ModelCatalog = Depends(get_catalog),
    invoker: SummaryInvoker = Depends(get_invoker),
    usage_meter: UsageMeter = Depends(get_usage_meter),
    plan_resolver=Depends(get_plan_resolver),
    summary_repository: SummaryRepository = Depends(get_summary_repository),
) -> SummarizationPipeline:
    return SummarizationPipeline(
        rate_limiter=limiters["summarize"],
        plan_resolver=plan_resolver,
        selector=ModelSelector(catalog),
        invoker=invoker,
        scorer=QualityScorer(),
        usage_meter=usage_meter,
        summary_repository=summary_repository,
    )


def get_tag_gate(
    catalog: ModelCatalog = Depends(get_catalog),
    tagging_client: TaggingClient = Depends(get_tagging),
    usage_meter: UsageMeter = Depends(get_usage_meter),
    plan_resolver=Depends(get_plan_resolver),
    summary_repository: SummaryRepository = Depends(get_summary_repository),
) -> TagExtractionGate:
    return TagExtractionGate(
        plan_resolver=plan_resolver,
        tagging_client=tagging_client,
        catalog=catalog,
        summary_repository=summary_repository,
        usage_meter=usage_meter,
        model_id=settings.tagging_model_id,
        timeout=settings.tagging_timeout_seconds,
    )


async def run_cancellable(
    request: Request,
    work: Awaitable[T],
    poll_interval: Optional[float] = None,
) -> T:
    """
    Run work as a task and cancel it if the HTTP client disconnects.

    Raises:
        ClientDisconnected: If the client went away before work finished
    """
    poll_interval = poll_interval or settings.disconnect_poll_interval_seconds
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(
                    f"Client disconnected, cancelling {request.url.path}",
                    extra={"event": "client_disconnected", "path": request.url.path},
                )
                task.cancel()
                await asyncio.wait({task})
                raise ClientDisconnected()
    except asyncio.CancelledError:
        task.cancel()
        raise
