"""
Model selection with graceful fallback.

A caller who asks for a model above their plan still gets a summary,
produced by their plan's default model, plus an upgrade prompt naming
the plan that would unlock the requested one.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from scribe.ai.catalog import ModelCatalog, ModelDescriptor, SUMMARIZATION
from scribe.models.subscription import Plan
from scribe.utils.metrics import upgrade_prompts_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradePrompt:
    message: str
    required_plan: Plan
    model_features: Tuple[str, ...]


@dataclass(frozen=True)
class ModelSelection:
    model: ModelDescriptor
    upgrade_prompt: Optional[UpgradePrompt] = None


class ModelSelector:
    """Picks the model that serves a request for a given plan."""

    def __init__(self, catalog: ModelCatalog):
        self.catalog = catalog

    def select(self, requested_model_id: Optional[str], plan: Plan) -> ModelSelection:
        default = self.catalog.default_for(plan, SUMMARIZATION)
        if not requested_model_id:
            return ModelSelection(default)

        requested = self.catalog.get(requested_model_id)
        if requested is None or not requested.supports(SUMMARIZATION):
            logger.warning(
                f"Requested model {requested_model_id} is not a summarization model, using {default.id}",
                extra={"event": "model_fallback", "model_id": requested_model_id},
            )
            return ModelSelection(default)

        if requested.required_plan <= plan:
            return ModelSelection(requested)

        upgrade_prompts_total.labels(required_plan=requested.required_plan.value).inc()
        prompt = UpgradePrompt(
            message=f"Upgrade to {requested.required_plan.value} plan to use {requested.display_name}",
            required_plan=requested.required_plan,
            model_features=tuple(requested.highlights),
        )
        return ModelSelection(default, prompt)
