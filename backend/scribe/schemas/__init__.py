"""
Pydantic schemas for API request/response validation.
"""
from scribe.schemas.summarize import (
    SummarizeRequest,
    SummarizeResponse,
    ModelsResponse,
)
from scribe.schemas.tags import (
    TagRequest,
    TagResponse,
    StoredTagsResponse,
)

__all__ = [
    "SummarizeRequest",
    "SummarizeResponse",
    "ModelsResponse",
    "TagRequest",
    "TagResponse",
    "StoredTagsResponse",
]
