"""
SummaryInvoker: calls the backend that serves a catalog model, times
the call, and normalizes the result.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from scribe.ai.base import SummaryBackend
from scribe.ai.catalog import ModelCatalog, ModelDescriptor, LEGACY_BACKEND
from scribe.exceptions import InvocationError
from scribe.utils.logging import log_provider_request, log_provider_failure
from scribe.utils.metrics import (
    ai_provider_requests_total,
    ai_provider_failures_total,
    ai_provider_latency_seconds,
    ai_provider_tokens_total,
)

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: Optional[str]) -> int:
    """Rough token count used when a backend reports none."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass
class InvocationResult:
    text: str
    tokens_in: int
    tokens_out: int
    processing_time_ms: int
    quality_signals: Dict[str, Any] = field(default_factory=dict)


class SummaryInvoker:
    """
    Dispatches a summary request to the legacy or multi-model backend.

    Errors and timeouts are wrapped in InvocationError carrying the
    elapsed time. Cancellation is never wrapped, so a caller that goes
    away stops the inflight provider call.
    """

    def __init__(self, catalog: ModelCatalog, legacy_backend: SummaryBackend, multi_model_backend: SummaryBackend):
        self.catalog = catalog
        self.legacy_backend = legacy_backend
        self.multi_model_backend = multi_model_backend

    def backend_for(self, model: ModelDescriptor) -> SummaryBackend:
        if model.supports(LEGACY_BACKEND):
            return self.legacy_backend
        return self.multi_model_backend

    async def invoke(
        self,
        model_id: str,
        text: str,
        source_context: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> InvocationResult:
        model = self.catalog.require(model_id)
        backend = self.backend_for(model)
        provider = model.provider

        start_time = time.monotonic()
        ai_provider_requests_total.labels(provider=provider, operation="summarize").inc()

        try:
            call = backend.generate(model, text, source_context)
            if timeout is not None:
                response = await asyncio.wait_for(call, timeout=timeout)
            else:
                response = await call
        except asyncio.CancelledError:
            duration = time.monotonic() - start_time
            ai_provider_latency_seconds.labels(provider=provider, operation="summarize").observe(duration)
            raise
        except Exception as e:
            duration = time.monotonic() - start_time
            ai_provider_failures_total.labels(provider=provider, operation="summarize").inc()
            ai_provider_latency_seconds.labels(provider=provider, operation="summarize").observe(duration)

            error = "timed out" if isinstance(e, asyncio.TimeoutError) else str(e)
            log_provider_failure(
                logger,
                provider=provider,
                operation="summarize",
                error=error,
                duration_ms=duration * 1000,
                model_id=model.id,
            )
            raise InvocationError(model.id, e, processing_time_ms=int(duration * 1000)) from e

        duration = time.monotonic() - start_time
        ai_provider_latency_seconds.labels(provider=provider, operation="summarize").observe(duration)

        tokens_in = response.tokens_in if response.tokens_in is not None else estimate_tokens(text)
        tokens_out = response.tokens_out if response.tokens_out is not None else estimate_tokens(response.text)
        ai_provider_tokens_total.labels(provider=provider, operation="summarize", token_type="prompt").inc(tokens_in)
        ai_provider_tokens_total.labels(provider=provider, operation="summarize", token_type="completion").inc(tokens_out)

        log_provider_request(
            logger,
            provider=provider,
            operation="summarize",
            duration_ms=duration * 1000,
            model_id=model.id,
        )

        return InvocationResult(
            text=response.text,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            processing_time_ms=int(duration * 1000),
            quality_signals=dict(response.quality_signals or {}),
        )
