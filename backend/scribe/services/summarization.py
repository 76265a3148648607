"""
Summarization pipeline.

Admission, entitlement, model selection, invocation, scoring, metering
and persistence for one summarize request, in that order.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from scribe.ai.invoker import SummaryInvoker, InvocationResult
from scribe.ai.selector import ModelSelector, UpgradePrompt
from scribe.config import settings
from scribe.exceptions import InvocationError, ValidationError
from scribe.models.subscription import Plan
from scribe.services.plan_resolver import PlanResolver
from scribe.services.quality_scorer import QualityScorer, QualityScores
from scribe.services.rate_limiter import RateLimiter, enforce_rate_limit
from scribe.services.usage_meter import UsageMeter, OPERATION_SUMMARIZE
from scribe.utils.logging import log_summary_generated, log_summary_failed
from scribe.utils.metrics import summaries_generated_total, summary_quality_score

logger = logging.getLogger(__name__)


@dataclass
class SummarizationRequest:
    text: str
    caller_id: str
    team_id: Optional[str] = None
    source_context: Optional[Dict[str, Any]] = None
    requested_model_id: Optional[str] = None


@dataclass
class SummarizationOutcome:
    summary_id: str
    text: str
    model_used: str
    plan: Plan
    tokens_in: int
    tokens_out: int
    cost_usd: float
    processing_time_ms: int
    quality_scores: QualityScores
    upgrade_prompt: Optional[UpgradePrompt] = None
    created_at: Optional[Any] = field(default=None, repr=False)


def _title_from(text: str) -> str:
    first_line = text.strip().splitlines()[0] if text.strip() else ""
    return first_line[:100] or "Summary"


class SummarizationPipeline:
    """Runs one summarize request end to end."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        plan_resolver: PlanResolver,
        selector: ModelSelector,
        invoker: SummaryInvoker,
        scorer: QualityScorer,
        usage_meter: UsageMeter,
        summary_repository,
        max_input_chars: int = settings.max_input_chars,
    ):
        self.rate_limiter = rate_limiter
        self.plan_resolver = plan_resolver
        self.selector = selector
        self.invoker = invoker
        self.scorer = scorer
        self.usage_meter = usage_meter
        self.summary_repository = summary_repository
        self.max_input_chars = max_input_chars

    def validate(self, request: SummarizationRequest) -> None:
        """
        Raises:
            ValidationError: If the text is missing, blank or too long
        """
        if not isinstance(request.text, str) or not request.text.strip():
            raise ValidationError("Text is required")
        if len(request.text) > self.max_input_chars:
            raise ValidationError(f"Text exceeds {self.max_input_chars} characters")

    def admit(self, client_id: str) -> None:
        """
        Raises:
            RateLimitExceeded: If the client is over its summarize budget
        """
        enforce_rate_limit(self.rate_limiter, client_id)

    async def summarize(
        self,
        request: SummarizationRequest,
        client_id: str,
        timeout: Optional[float] = None,
    ) -> SummarizationOutcome:
        self.validate(request)
        self.admit(client_id)

        plan = await self.plan_resolver.resolve_plan(request.caller_id)
        org_id = request.team_id or await self.plan_resolver.resolve_organization(request.caller_id)
        selection = self.selector.select(request.requested_model_id, plan)
        model = selection.model

        start_time = time.monotonic()
        try:
            result = await self.invoker.invoke(model.id, request.text, request.source_context, timeout=timeout)
        except InvocationError as e:
            self._dispatch_failure(request, org_id, model.id, e.processing_time_ms, str(e.cause) or "timed out")
            log_summary_failed(
                logger,
                user_id=request.caller_id,
                model_id=model.id,
                duration_ms=e.processing_time_ms,
                error=str(e.cause),
            )
            raise
        except asyncio.CancelledError:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            self._dispatch_failure(request, org_id, model.id, elapsed_ms, "cancelled")
            logger.info(
                f"Summarization cancelled for {request.caller_id}",
                extra={"event": "summary_cancelled", "user_id": request.caller_id, "model_id": model.id},
            )
            raise

        scores = self.scorer.score(result, request)
        cost = self.usage_meter.compute_cost(model.id, result.tokens_in, result.tokens_out)

        self.usage_meter.dispatch(
            caller_id=request.caller_id,
            org_id=org_id,
            model_id=model.id,
            operation_type=OPERATION_SUMMARIZE,
            tokens_used=result.tokens_in + result.tokens_out,
            cost_usd=cost,
            processing_time_ms=result.processing_time_ms,
            success=True,
        )

        summary = await self._persist(request, model.id, result, scores, cost)

        summaries_generated_total.labels(model=model.id, plan=plan.value).inc()
        summary_quality_score.labels(model=model.id).observe(scores.overall)
        log_summary_generated(
            logger,
            summary_id=summary.id,
            user_id=request.caller_id,
            model_id=model.id,
            duration_ms=result.processing_time_ms,
            plan=plan.value,
            cost_usd=cost,
        )

        return SummarizationOutcome(
            summary_id=summary.id,
            text=result.text,
            model_used=model.id,
            plan=plan,
            tokens_in=result.tokens_in,
            tokens_out=result.tokens_out,
            cost_usd=cost,
            processing_time_ms=result.processing_time_ms,
            quality_scores=scores,
            upgrade_prompt=selection.upgrade_prompt,
            created_at=summary.created_at,
        )

    async def _persist(self, request: SummarizationRequest, model_id: str, result: InvocationResult, scores: QualityScores, cost: float):
        return await self.summary_repository.save_summary(
            user_id=request.caller_id,
            team_id=request.team_id,
            title=_title_from(result.text),
            content=result.text,
            source=(request.source_context or {}).get("source", "manual"),
            source_context=request.source_context,
            ai_model=model_id,
            tokens_in=result.tokens_in,
            tokens_out=result.tokens_out,
            cost_usd=cost,
            processing_time_ms=result.processing_time_ms,
            quality_score=scores.overall,
            coherence_score=scores.coherence,
            coverage_score=scores.coverage,
            style_score=scores.style,
            length_score=scores.length,
        )

    def _dispatch_failure(self, request: SummarizationRequest, org_id: Optional[str], model_id: str, processing_time_ms: int, error: str) -> None:
        self.usage_meter.dispatch(
            caller_id=request.caller_id,
            org_id=org_id,
            model_id=model_id,
            operation_type=OPERATION_SUMMARIZE,
            tokens_used=0,
            cost_usd=0.0,
            processing_time_ms=processing_time_ms,
            success=False,
            error_message=error,
        )
