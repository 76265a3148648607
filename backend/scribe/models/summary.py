"""
Summary model holding the primary artifact of a summarization request.
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON
from datetime import datetime

from scribe.models.base import Base, generate_uuid


class Summary(Base):
    """AI-generated summary with its quality scores and token accounting."""

    __tablename__ = "summaries"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(128), nullable=False, index=True)
    team_id = Column(String(128), nullable=True)

    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)  # Summary text
    source = Column(String(50), nullable=False, default="manual")  # slack, upload, manual, ...
    source_context = Column(JSON, nullable=True)

    # AI accounting
    ai_model = Column(String(64), nullable=False)
    tokens_in = Column(Integer, nullable=False, default=0)
    tokens_out = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    processing_time_ms = Column(Integer, nullable=False, default=0)

    # Quality scores, each in [0, 1]; NULL when the dimension was not scored
    quality_score = Column(Float, nullable=False)
    coherence_score = Column(Float, nullable=True)
    coverage_score = Column(Float, nullable=True)
    style_score = Column(Float, nullable=True)
    length_score = Column(Float, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Summary(id={self.id}, user_id={self.user_id}, model={self.ai_model})>"
