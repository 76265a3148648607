"""
Usage metering: cost arithmetic and the append-only usage log.

Every AI invocation attempt, successful or not, produces one usage
record. Writing it is best-effort: a failed write is logged and counted
but never fails the request that caused it.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Protocol, Set

from scribe.ai.catalog import ModelCatalog
from scribe.utils.logging import log_usage_recorded, log_usage_write_failed
from scribe.utils.metrics import ai_usage_records_total, ai_usage_write_failures_total, ai_cost_usd_total

logger = logging.getLogger(__name__)

OPERATION_SUMMARIZE = "summarize"
OPERATION_TAGGING = "tagging"


@dataclass
class UsageRecord:
    caller_id: str
    org_id: Optional[str]
    model_id: str
    operation_type: str
    tokens_used: int
    cost_usd: float
    processing_time_ms: int
    success: bool
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


class UsageStore(Protocol):
    async def insert(self, record: UsageRecord) -> None: ...


class UsageMeter:
    """Computes costs and writes usage records to a UsageStore."""

    def __init__(self, catalog: ModelCatalog, store: UsageStore):
        self.catalog = catalog
        self.store = store
        self._pending: Set[asyncio.Task] = set()

    def compute_cost(self, model_id: str, tokens_in: int, tokens_out: int) -> float:
        """
        Approximate USD cost of a call.

        Unknown models cost 0.0 so that accounting never blocks a request.
        """
        model = self.catalog.get(model_id)
        if model is None:
            logger.warning(f"No pricing for unknown model {model_id}, recording zero cost")
            return 0.0
        return (
            max(0, tokens_in) * model.cost_per_input_token
            + max(0, tokens_out) * model.cost_per_output_token
        )

    async def record_usage(
        self,
        caller_id: str,
        model_id: str,
        operation_type: str,
        tokens_used: int,
        cost_usd: float,
        processing_time_ms: int,
        success: bool,
        org_id: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[UsageRecord]:
        """Persist one usage record. Returns None if the write failed."""
        record = UsageRecord(
            caller_id=caller_id,
            org_id=org_id,
            model_id=model_id,
            operation_type=operation_type,
            tokens_used=tokens_used,
            cost_usd=cost_usd,
            processing_time_ms=processing_time_ms,
            success=success,
            error_message=error_message,
        )

        try:
            await self.store.insert(record)
        except Exception as e:
            ai_usage_write_failures_total.labels(operation=operation_type).inc()
            log_usage_write_failed(
                logger,
                user_id=caller_id,
                model_id=model_id,
                operation=operation_type,
                error=str(e),
            )
            return None

        ai_usage_records_total.labels(operation=operation_type, success=str(success).lower()).inc()
        if cost_usd:
            ai_cost_usd_total.labels(model=model_id, operation=operation_type).inc(cost_usd)
        log_usage_recorded(
            logger,
            user_id=caller_id,
            model_id=model_id,
            operation=operation_type,
            tokens_used=tokens_used,
            cost_usd=cost_usd,
            success=success,
        )
        return record

    def dispatch(self, **kwargs) -> asyncio.Task:
        """
        Fire-and-forget record_usage.

        The task is kept until it finishes so the event loop does not
        drop it; call drain() to wait for outstanding writes.
        """
        task = asyncio.create_task(self.record_usage(**kwargs))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._pending)
