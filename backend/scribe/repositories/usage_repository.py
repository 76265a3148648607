"""
Repository for the append-only AI usage log.
"""
from scribe.database import AsyncSessionLocal
from scribe.models.ai_usage import AIUsageTracking


class UsageRepository:
    """
    Writes usage records in their own session.

    Usage writes run detached from the request, so they never share the
    request's session or transaction.
    """

    def __init__(self, session_factory=AsyncSessionLocal):
        self._session_factory = session_factory

    async def insert(self, record) -> None:
        async with self._session_factory() as db:
            db.add(AIUsageTracking(
                user_id=record.caller_id,
                organization_id=record.org_id,
                ai_model=record.model_id,
                operation_type=record.operation_type,
                tokens_used=record.tokens_used,
                cost_usd=record.cost_usd,
                processing_time_ms=record.processing_time_ms,
                success=record.success,
                error_message=record.error_message,
                created_at=record.timestamp,
            ))
            await db.commit()
