"""
SummaryTag model storing smart tags extracted from a summary.
One row per summary; re-tagging overwrites it.
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, JSON, ForeignKey
from datetime import datetime

from scribe.models.base import Base, generate_uuid


class SummaryTag(Base):
    """Structured tags for a summary (skills, technologies, roles, ...)."""

    __tablename__ = "summary_tags"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    summary_id = Column(String(36), ForeignKey("summaries.id", ondelete="CASCADE"), nullable=False, unique=True)

    skills = Column(JSON, nullable=False, default=list)
    technologies = Column(JSON, nullable=False, default=list)
    roles = Column(JSON, nullable=False, default=list)
    action_items = Column(JSON, nullable=False, default=list)
    decisions = Column(JSON, nullable=False, default=list)
    sentiments = Column(JSON, nullable=False, default=list)
    emotions = Column(JSON, nullable=False, default=list)
    confidence_score = Column(Float, nullable=False, default=0.5)

    ai_model = Column(String(64), nullable=False)
    processing_time_ms = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SummaryTag(summary_id={self.summary_id}, confidence={self.confidence_score})>"
