"""
Summarize endpoint.
"""
from fastapi import APIRouter, Depends, Request

from scribe.api.dependencies import ANONYMOUS_CALLER_ID, client_identity, get_pipeline, run_cancellable
from scribe.config import settings
from scribe.schemas.summarize import (
    SummarizeRequest,
    SummarizeResponse,
    SummaryResultResponse,
    QualityScoresResponse,
    UpgradePromptResponse,
    UsageResponse,
)
from scribe.services.summarization import SummarizationPipeline, SummarizationRequest

router = APIRouter()


@router.post("", response_model=SummarizeResponse)
async def summarize(
    body: SummarizeRequest,
    request: Request,
    pipeline: SummarizationPipeline = Depends(get_pipeline),
):
    """
    Summarize text with the best model the caller's plan allows.

    Asking for a model above the caller's plan is not an error: the
    plan's default model answers and the response carries an upgrade
    prompt.
    """
    summarization_request = SummarizationRequest(
        text=body.text,
        caller_id=body.caller_id or ANONYMOUS_CALLER_ID,
        team_id=body.team_id,
        source_context=body.source_context,
        requested_model_id=body.preferred_model_id,
    )

    outcome = await run_cancellable(
        request,
        pipeline.summarize(
            summarization_request,
            client_identity(request, "summarize"),
            timeout=settings.ai_request_timeout_seconds,
        ),
    )

    scores = QualityScoresResponse(**outcome.quality_scores.as_dict())
    upgrade_prompt = None
    if outcome.upgrade_prompt:
        upgrade_prompt = UpgradePromptResponse(
            message=outcome.upgrade_prompt.message,
            required_plan=outcome.upgrade_prompt.required_plan.value,
            model_features=list(outcome.upgrade_prompt.model_features),
        )

    return SummarizeResponse(
        summary=SummaryResultResponse(
            id=outcome.summary_id,
            text=outcome.text,
            model_used=outcome.model_used,
            tokens_in=outcome.tokens_in,
            tokens_out=outcome.tokens_out,
            processing_time_ms=outcome.processing_time_ms,
            quality_scores=scores,
        ),
        model_used=outcome.model_used,
        plan=outcome.plan.value,
        upgrade_prompt=upgrade_prompt,
        usage=UsageResponse(
            tokens_in=outcome.tokens_in,
            tokens_out=outcome.tokens_out,
            cost_usd=outcome.cost_usd,
            processing_time_ms=outcome.processing_time_ms,
        ),
        quality_scores=scores,
    )
