"""
Repository for summaries and their smart tags.
Each call opens its own session from the session factory.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select, delete

from scribe.database import AsyncSessionLocal
from scribe.exceptions import PersistenceError
from scribe.models.summary import Summary
from scribe.models.summary_tag import SummaryTag

logger = logging.getLogger(__name__)

TAG_COLUMNS = ("skills", "technologies", "roles", "action_items", "decisions", "sentiments", "emotions")


class SummaryRepository:
    """Repository for summary and tag database operations."""

    def __init__(self, session_factory=AsyncSessionLocal):
        self._session_factory = session_factory

    async def save_summary(self, **fields) -> Summary:
        """
        Insert a summary row.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            async with self._session_factory() as db:
                summary = Summary(**fields)
                db.add(summary)
                await db.commit()
                await db.refresh(summary)
                return summary
        except Exception as e:
            logger.error(f"Failed to save summary for {fields.get('user_id')}: {e}")
            raise PersistenceError("Failed to save summary", cause=e) from e

    async def get_summary(self, summary_id: str) -> Optional[Summary]:
        async with self._session_factory() as db:
            result = await db.execute(select(Summary).where(Summary.id == summary_id))
            return result.scalar_one_or_none()

    async def upsert_tags(
        self,
        summary_id: str,
        tags: Dict[str, Any],
        ai_model: str,
        processing_time_ms: int,
    ) -> SummaryTag:
        """
        Create or overwrite the tag row of a summary.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(SummaryTag).where(SummaryTag.summary_id == summary_id))
                row = result.scalar_one_or_none()
                if row is None:
                    row = SummaryTag(summary_id=summary_id)
                    db.add(row)

                for column in TAG_COLUMNS:
                    setattr(row, column, list(tags.get(column, [])))
                row.confidence_score = tags.get("confidence_score", 0.5)
                row.ai_model = ai_model
                row.processing_time_ms = processing_time_ms
                row.updated_at = datetime.utcnow()

                await db.commit()
                await db.refresh(row)
                return row
        except Exception as e:
            raise PersistenceError(f"Failed to save tags: {e}", cause=e) from e

    async def get_tags(self, summary_id: str) -> Optional[SummaryTag]:
        async with self._session_factory() as db:
            result = await db.execute(select(SummaryTag).where(SummaryTag.summary_id == summary_id))
            return result.scalar_one_or_none()

    async def delete_tags(self, summary_id: str) -> bool:
        """Remove the tag row. Returns False if there was none."""
        async with self._session_factory() as db:
            result = await db.execute(delete(SummaryTag).where(SummaryTag.summary_id == summary_id))
            await db.commit()
            return result.rowcount > 0
