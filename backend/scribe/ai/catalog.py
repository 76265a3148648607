"""
Registry of AI models the product can route summaries to.

Descriptors are immutable and validated when the catalog is built, so a
typo'd model id or a negative price is a startup error rather than a
silent None at request time.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional

from scribe.exceptions import CatalogError, UnknownModelError
from scribe.models.subscription import Plan

# Capability tags
SUMMARIZATION = "summarization"
STRUCTURED_TAGGING = "structured_tagging"
JSON_OUTPUT = "json_output"
LEGACY_BACKEND = "legacy_backend"  # Served by the single-model DeepSeek backend

PROVIDERS = frozenset({"deepseek", "openrouter", "openai", "anthropic"})


@dataclass(frozen=True)
class ModelDescriptor:
    """Static metadata for one AI model."""
    id: str
    display_name: str
    provider: str
    provider_model: str  # Model name as the provider's API expects it
    required_plan: Plan
    cost_per_input_token: float  # USD
    cost_per_output_token: float  # USD
    max_tokens: int = 4000
    features: FrozenSet[str] = field(default_factory=frozenset)
    highlights: tuple = ()  # Marketing bullet points shown in upgrade prompts
    description: str = ""

    def supports(self, feature: str) -> bool:
        return feature in self.features


class ModelCatalog:
    """Read-only, insertion-ordered model registry."""

    def __init__(self, descriptors: Iterable[ModelDescriptor]):
        self._models: Dict[str, ModelDescriptor] = {}
        for descriptor in descriptors:
            self._validate(descriptor)
            if descriptor.id in self._models:
                raise CatalogError(f"Duplicate model id in catalog: {descriptor.id}")
            self._models[descriptor.id] = descriptor

        if not self._models:
            raise CatalogError("Model catalog is empty")

    @staticmethod
    def _validate(descriptor: ModelDescriptor) -> None:
        if not descriptor.id:
            raise CatalogError("Model descriptor without id")
        if not isinstance(descriptor.required_plan, Plan):
            raise CatalogError(f"Model {descriptor.id} has invalid required plan: {descriptor.required_plan!r}")
        if descriptor.provider not in PROVIDERS:
            raise CatalogError(f"Model {descriptor.id} has unknown provider: {descriptor.provider}")
        if descriptor.cost_per_input_token < 0 or descriptor.cost_per_output_token < 0:
            raise CatalogError(f"Model {descriptor.id} has a negative token price")
        if descriptor.max_tokens <= 0:
            raise CatalogError(f"Model {descriptor.id} has a non-positive max_tokens")

    def get(self, model_id: Optional[str]) -> Optional[ModelDescriptor]:
        if model_id is None:
            return None
        return self._models.get(model_id)

    def require(self, model_id: str) -> ModelDescriptor:
        descriptor = self._models.get(model_id)
        if descriptor is None:
            raise UnknownModelError(model_id)
        return descriptor

    def supports(self, model_id: str, feature: str) -> bool:
        descriptor = self._models.get(model_id)
        return descriptor is not None and descriptor.supports(feature)

    def available_for(self, plan: Plan, feature: Optional[str] = None) -> List[ModelDescriptor]:
        """Models the plan may use, in catalog order."""
        return [
            model for model in self._models.values()
            if model.required_plan <= plan and (feature is None or model.supports(feature))
        ]

    def default_for(self, plan: Plan, feature: str = SUMMARIZATION) -> ModelDescriptor:
        """
        The model a plan gets when it asks for nothing in particular.

        Candidates are the models on the highest tier the plan reaches;
        among them the lowest input price wins, and catalog order breaks
        ties.
        """
        candidates = self.available_for(plan, feature)
        if not candidates:
            raise CatalogError(f"No model supports '{feature}' for plan {plan.value}")

        top_tier = max(model.required_plan.rank for model in candidates)
        tier_models = [model for model in candidates if model.required_plan.rank == top_tier]
        # min() keeps the first of equal keys, preserving catalog order
        return min(tier_models, key=lambda model: model.cost_per_input_token)

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)


DEFAULT_MODELS = (
    ModelDescriptor(
        id="deepseek-r1",
        display_name="DeepSeek R1",
        provider="deepseek",
        provider_model="deepseek-chat",
        required_plan=Plan.FREE,
        cost_per_input_token=0.0,
        cost_per_output_token=0.0,
        max_tokens=4000,
        features=frozenset({SUMMARIZATION, LEGACY_BACKEND}),
        highlights=("Basic summarization", "Fast processing", "Free tier"),
        description="Fast and efficient AI model for basic summarization tasks",
    ),
    ModelDescriptor(
        id="gpt-4o",
        display_name="GPT-4o",
        provider="openai",
        provider_model="gpt-4o",
        required_plan=Plan.PRO,
        cost_per_input_token=0.00003,
        cost_per_output_token=0.00003,
        max_tokens=8000,
        features=frozenset({SUMMARIZATION}),
        highlights=("Advanced reasoning", "Better context understanding", "Premium quality"),
        description="OpenAI's most capable model with superior reasoning and analysis",
    ),
    ModelDescriptor(
        id="claude-3-5-sonnet",
        display_name="Claude 3.5 Sonnet",
        provider="anthropic",
        provider_model="claude-3-5-sonnet-20241022",
        required_plan=Plan.PRO,
        cost_per_input_token=0.00003,
        cost_per_output_token=0.00003,
        max_tokens=8000,
        features=frozenset({SUMMARIZATION}),
        highlights=("Excellent writing quality", "Nuanced analysis", "Premium insights"),
        description="Anthropic's most advanced model with exceptional writing and analysis capabilities",
    ),
    ModelDescriptor(
        id="gpt-4o-enterprise",
        display_name="GPT-4o Enterprise",
        provider="openai",
        provider_model="gpt-4o",
        required_plan=Plan.ENTERPRISE,
        cost_per_input_token=0.00003,
        cost_per_output_token=0.00003,
        max_tokens=16000,
        features=frozenset({SUMMARIZATION}),
        highlights=("Extended context", "Priority processing", "Custom fine-tuning"),
        description="Enterprise-grade GPT-4o with extended context and priority processing",
    ),
    ModelDescriptor(
        id="gpt-4o-mini",
        display_name="GPT-4o Mini",
        provider="openrouter",
        provider_model="openai/gpt-4o-mini",
        required_plan=Plan.PRO,
        cost_per_input_token=0.00000015,
        cost_per_output_token=0.00000015,
        max_tokens=1000,
        features=frozenset({STRUCTURED_TAGGING, JSON_OUTPUT}),
        highlights=("Smart tagging",),
        description="Small model used for structured tag extraction",
    ),
)


def build_default_catalog() -> ModelCatalog:
    """Catalog used by the running service."""
    return ModelCatalog(DEFAULT_MODELS)
