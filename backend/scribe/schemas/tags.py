"""
Pydantic schemas for smart tagging endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from scribe.schemas.summarize import CamelModel


class TagRequest(CamelModel):
    """Schema for a tag extraction request."""
    summary_id: Optional[str] = Field(None, description="Ignored when it disagrees with the path id")
    caller_id: Optional[str] = None


class TagsPayload(BaseModel):
    """Tag keys keep their snake_case names on the wire."""
    skills: List[str] = []
    technologies: List[str] = []
    roles: List[str] = []
    action_items: List[str] = []
    decisions: List[str] = []
    sentiments: List[str] = []
    emotions: List[str] = []
    confidence_score: float = 0.5


class TagResponse(CamelModel):
    """Envelope for POST tag extraction; failures are reported with success=false."""
    success: bool
    tags: Optional[TagsPayload] = None
    error: Optional[str] = None
    processing_time_ms: Optional[int] = None


class StoredTagsResponse(CamelModel):
    summary_id: str
    tags: Optional[TagsPayload] = None
    has_tags: bool
