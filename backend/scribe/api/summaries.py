"""
Smart tagging endpoints for stored summaries.
"""
from fastapi import APIRouter, Depends, Request, Response, status

from scribe.api.dependencies import (
    ANONYMOUS_CALLER_ID,
    client_identity,
    get_rate_limiters,
    get_summary_repository,
    get_tag_gate,
    run_cancellable,
)
from scribe.exceptions import SummaryNotFound, ValidationError
from scribe.repositories.summary_repository import SummaryRepository
from scribe.schemas.tags import TagRequest, TagResponse, TagsPayload, StoredTagsResponse
from scribe.services.rate_limiter import RateLimiterRegistry, enforce_rate_limit
from scribe.services.tag_extraction import TagExtractionGate

router = APIRouter()


def _tags_payload(row) -> TagsPayload:
    return TagsPayload(
        skills=row.skills or [],
        technologies=row.technologies or [],
        roles=row.roles or [],
        action_items=row.action_items or [],
        decisions=row.decisions or [],
        sentiments=row.sentiments or [],
        emotions=row.emotions or [],
        confidence_score=row.confidence_score,
    )


@router.post("/{summary_id}/tags", response_model=TagResponse, response_model_exclude_none=True)
async def extract_tags(
    summary_id: str,
    body: TagRequest,
    request: Request,
    limiters: RateLimiterRegistry = Depends(get_rate_limiters),
    repository: SummaryRepository = Depends(get_summary_repository),
    gate: TagExtractionGate = Depends(get_tag_gate),
):
    """
    Extract smart tags from a summary (PRO and above).

    Plan denials and AI failures come back as 200 with success=false.
    """
    enforce_rate_limit(limiters["tagging"], client_identity(request, "tagging"))

    summary = await repository.get_summary(summary_id)
    if summary is None:
        raise SummaryNotFound(summary_id)
    if not summary.content or not summary.content.strip():
        raise ValidationError("Summary has no content to analyze")

    caller_id = body.caller_id or ANONYMOUS_CALLER_ID
    result = await run_cancellable(request, gate.extract_tags(summary.content, summary_id, caller_id))

    return TagResponse(
        success=result.success,
        tags=TagsPayload(**result.tags.as_dict()) if result.tags else None,
        error=result.error,
        processing_time_ms=result.processing_time_ms if result.success else None,
    )


@router.get("/{summary_id}/tags", response_model=StoredTagsResponse)
async def get_tags(
    summary_id: str,
    repository: SummaryRepository = Depends(get_summary_repository),
):
    """Return the stored tags of a summary, if any."""
    summary = await repository.get_summary(summary_id)
    if summary is None:
        raise SummaryNotFound(summary_id)

    row = await repository.get_tags(summary_id)
    return StoredTagsResponse(
        summary_id=summary_id,
        tags=_tags_payload(row) if row else None,
        has_tags=row is not None,
    )


@router.delete("/{summary_id}/tags", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tags(
    summary_id: str,
    repository: SummaryRepository = Depends(get_summary_repository),
):
    """Remove the stored tags of a summary."""
    if not await repository.delete_tags(summary_id):
        raise SummaryNotFound(summary_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
