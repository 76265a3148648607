"""
Pydantic schemas for the summarize endpoint.
Wire format is camelCase; Python attributes stay snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummarizeRequest(CamelModel):
    """Schema for a summarization request."""
    text: Optional[str] = Field(None, description="Text to summarize")
    caller_id: Optional[str] = Field(None, description="Caller identity used for plan lookup")
    team_id: Optional[str] = Field(None, description="Team the usage is billed to")
    source_context: Optional[Dict[str, Any]] = Field(None, description="Where the text came from (channel, meeting, ...)")
    preferred_model_id: Optional[str] = Field(None, description="Catalog id of the requested model")


class QualityScoresResponse(CamelModel):
    coherence: Optional[float] = None
    coverage: Optional[float] = None
    style: Optional[float] = None
    length: Optional[float] = None
    overall: float


class UpgradePromptResponse(CamelModel):
    message: str
    required_plan: str
    model_features: List[str] = []


class UsageResponse(CamelModel):
    tokens_in: int
    tokens_out: int
    cost_usd: float
    processing_time_ms: int


class SummaryResultResponse(CamelModel):
    id: str
    text: str
    model_used: str
    tokens_in: int
    tokens_out: int
    processing_time_ms: int
    quality_scores: QualityScoresResponse


class SummarizeResponse(CamelModel):
    """Schema for a successful summarization."""
    summary: SummaryResultResponse
    model_used: str
    plan: str
    upgrade_prompt: Optional[UpgradePromptResponse] = None
    usage: UsageResponse
    quality_scores: QualityScoresResponse


class ModelInfo(CamelModel):
    id: str
    name: str
    provider: str
    required_plan: str
    description: str
    max_tokens: int
    features: List[str]
    available: bool


class ModelsResponse(CamelModel):
    plan: str
    default_model: str
    models: List[ModelInfo]
