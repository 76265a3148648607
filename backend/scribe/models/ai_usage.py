"""
AIUsageTracking model: append-only accounting of AI invocations.
One row per attempt, successful or not, used for billing and analytics.
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, Text, Index
from datetime import datetime

from scribe.models.base import Base, generate_uuid


class AIUsageTracking(Base):
    """A single AI invocation attempt with its tokens, cost and outcome."""

    __tablename__ = "ai_usage_tracking"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(128), nullable=False)
    organization_id = Column(String(128), nullable=True)

    ai_model = Column(String(64), nullable=False)
    operation_type = Column(String(20), nullable=False)  # "summarize" or "tagging"

    tokens_used = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    processing_time_ms = Column(Integer, nullable=False, default=0)

    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_ai_usage_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<AIUsageTracking(user_id={self.user_id}, model={self.ai_model}, success={self.success})>"
