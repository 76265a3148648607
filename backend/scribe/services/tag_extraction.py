"""
Premium-gated smart tagging.

Extracts structured tags (skills, technologies, roles, action items,
decisions, sentiments, emotions) from a summary with a secondary AI
call. Failures are reported in the result envelope rather than raised,
and every attempted AI call is metered like a summarization.
"""
import asyncio
import json
import logging
import math
import re
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from scribe.ai.catalog import ModelCatalog
from scribe.ai.tagging_client import TaggingClient
from scribe.exceptions import AccessDenied
from scribe.models.subscription import Plan
from scribe.services.plan_resolver import PlanResolver
from scribe.services.usage_meter import UsageMeter, OPERATION_TAGGING
from scribe.utils.logging import log_tagging_completed, log_tagging_failed
from scribe.utils.metrics import tagging_requests_total

logger = logging.getLogger(__name__)

TAG_FIELD_LIMITS = {
    "skills": 20,
    "technologies": 20,
    "roles": 10,
    "action_items": 15,
    "decisions": 10,
    "sentiments": 5,
    "emotions": 5,
}
MAX_TAG_LENGTH = 200
DEFAULT_CONFIDENCE = 0.5
REQUIRED_PLAN = Plan.PRO

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


@dataclass
class SummaryTags:
    skills: List[str] = field(default_factory=list)
    technologies: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    action_items: List[str] = field(default_factory=list)
    decisions: List[str] = field(default_factory=list)
    sentiments: List[str] = field(default_factory=list)
    emotions: List[str] = field(default_factory=list)
    confidence_score: float = DEFAULT_CONFIDENCE

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaggingResult:
    success: bool
    tags: Optional[SummaryTags] = None
    error: Optional[str] = None
    processing_time_ms: int = 0


def parse_tag_payload(content: str) -> Dict[str, Any]:
    """
    Decode the model's JSON reply, tolerating a markdown code fence.

    Raises:
        ValueError: If the content is not valid JSON
    """
    match = _FENCE_RE.match(content)
    if match:
        content = match.group(1)
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError("Invalid JSON response from AI tagging service") from e

    if not isinstance(payload, dict):
        # Nothing usable; validation turns this into empty tags
        return {}
    return payload


def _confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    if math.isnan(value):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, float(value)))


def validate_tags(payload: Dict[str, Any]) -> SummaryTags:
    """
    Sanitize a raw tag payload.

    Non-list fields become empty lists, lists keep their first N items,
    items are stringified and cut to MAX_TAG_LENGTH characters.
    """
    fields = {}
    for name, limit in TAG_FIELD_LIMITS.items():
        value = payload.get(name)
        if not isinstance(value, list):
            fields[name] = []
            continue
        fields[name] = [str(item)[:MAX_TAG_LENGTH] for item in value[:limit] if item is not None]

    return SummaryTags(confidence_score=_confidence(payload.get("confidence_score")), **fields)


class TagExtractionGate:
    """Plan check, AI call, validation, persistence and metering for smart tags."""

    def __init__(
        self,
        plan_resolver: PlanResolver,
        tagging_client: TaggingClient,
        catalog: ModelCatalog,
        summary_repository,
        usage_meter: UsageMeter,
        model_id: str = "gpt-4o-mini",
        timeout: Optional[float] = None,
    ):
        self.plan_resolver = plan_resolver
        self.tagging_client = tagging_client
        self.model = catalog.require(model_id)
        self.summary_repository = summary_repository
        self.usage_meter = usage_meter
        self.timeout = timeout

    async def check_access(self, caller_id: str) -> Plan:
        """
        Raises:
            AccessDenied: If the caller's plan is below PRO
        """
        plan = await self.plan_resolver.resolve_plan(caller_id)
        if plan < REQUIRED_PLAN:
            raise AccessDenied()
        return plan

    async def extract_tags(self, summary_text: str, summary_id: str, caller_id: str) -> TaggingResult:
        start_time = time.monotonic()

        try:
            await self.check_access(caller_id)
        except AccessDenied as e:
            tagging_requests_total.labels(outcome="denied").inc()
            return TaggingResult(success=False, error=e.public_message)

        org_id = await self.plan_resolver.resolve_organization(caller_id)
        tokens_used = 0
        try:
            response = await self._invoke(summary_text)
            tokens_used = response.tokens_used
            tags = validate_tags(parse_tag_payload(response.content))
            processing_time_ms = int((time.monotonic() - start_time) * 1000)
            await self.summary_repository.upsert_tags(
                summary_id,
                tags.as_dict(),
                ai_model=self.model.id,
                processing_time_ms=processing_time_ms,
            )
        except asyncio.CancelledError:
            processing_time_ms = int((time.monotonic() - start_time) * 1000)
            self._dispatch_failure(caller_id, org_id, tokens_used, processing_time_ms, "cancelled")
            logger.info(
                f"Tag extraction cancelled for summary {summary_id}",
                extra={"event": "tagging_cancelled", "summary_id": summary_id, "user_id": caller_id},
            )
            raise
        except Exception as e:
            processing_time_ms = int((time.monotonic() - start_time) * 1000)
            if isinstance(e, asyncio.TimeoutError):
                error = "timed out"
            else:
                error = str(e) or "Tag extraction failed"
            tagging_requests_total.labels(outcome="failed").inc()
            log_tagging_failed(
                logger,
                summary_id=summary_id,
                user_id=caller_id,
                error=error,
                duration_ms=processing_time_ms,
            )
            self._dispatch_failure(caller_id, org_id, tokens_used, processing_time_ms, error)
            return TaggingResult(success=False, error=error, processing_time_ms=processing_time_ms)

        self.usage_meter.dispatch(
            caller_id=caller_id,
            org_id=org_id,
            model_id=self.model.id,
            operation_type=OPERATION_TAGGING,
            tokens_used=tokens_used,
            cost_usd=self.usage_meter.compute_cost(self.model.id, tokens_used, 0),
            processing_time_ms=processing_time_ms,
            success=True,
        )
        tagging_requests_total.labels(outcome="success").inc()
        log_tagging_completed(
            logger,
            summary_id=summary_id,
            user_id=caller_id,
            duration_ms=processing_time_ms,
            confidence_score=tags.confidence_score,
        )
        return TaggingResult(success=True, tags=tags, processing_time_ms=processing_time_ms)

    async def _invoke(self, summary_text: str):
        call = self.tagging_client.extract(self.model, summary_text)
        if self.timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout)

    def _dispatch_failure(self, caller_id: str, org_id: Optional[str], tokens_used: int, processing_time_ms: int, error: str):
        # Tokens already spent are priced the same as on success
        self.usage_meter.dispatch(
            caller_id=caller_id,
            org_id=org_id,
            model_id=self.model.id,
            operation_type=OPERATION_TAGGING,
            tokens_used=tokens_used,
            cost_usd=self.usage_meter.compute_cost(self.model.id, tokens_used, 0),
            processing_time_ms=processing_time_ms,
            success=False,
            error_message=error,
        )
