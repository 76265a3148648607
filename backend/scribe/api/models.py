"""
AI model listing endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from scribe.api.dependencies import get_catalog, get_plan_resolver
from scribe.ai.catalog import ModelCatalog, SUMMARIZATION
from scribe.schemas.summarize import ModelInfo, ModelsResponse

router = APIRouter()


@router.get("", response_model=ModelsResponse)
async def list_models(
    caller_id: Optional[str] = Query(None, alias="callerId"),
    catalog: ModelCatalog = Depends(get_catalog),
    plan_resolver=Depends(get_plan_resolver),
):
    """Summarization models with availability for the caller's plan."""
    plan = await plan_resolver.resolve_plan(caller_id)

    models = [
        ModelInfo(
            id=model.id,
            name=model.display_name,
            provider=model.provider,
            required_plan=model.required_plan.value,
            description=model.description,
            max_tokens=model.max_tokens,
            features=list(model.highlights),
            available=model.required_plan <= plan,
        )
        for model in catalog
        if model.supports(SUMMARIZATION)
    ]

    return ModelsResponse(
        plan=plan.value,
        default_model=catalog.default_for(plan).id,
        models=models,
    )
