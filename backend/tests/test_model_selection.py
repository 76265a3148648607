"""
Tests for the model catalog and plan-aware model selection.
"""
import pytest

from scribe.ai.catalog import ModelCatalog, ModelDescriptor, SUMMARIZATION, DEFAULT_MODELS
from scribe.ai.selector import ModelSelector
from scribe.exceptions import CatalogError, UnknownModelError
from scribe.models.subscription import Plan


def _model(model_id, plan, cost=0.00001, provider="openai", features=frozenset({SUMMARIZATION})):
    return ModelDescriptor(
        id=model_id,
        display_name=model_id.upper(),
        provider=provider,
        provider_model=model_id,
        required_plan=plan,
        cost_per_input_token=cost,
        cost_per_output_token=cost,
        features=features,
    )


class TestPlanOrdering:
    """Tests for Plan ordering."""

    def test_plans_order_by_tier(self):
        """FREE < PRO < ENTERPRISE regardless of string order."""
        assert Plan.FREE < Plan.PRO < Plan.ENTERPRISE
        assert Plan.ENTERPRISE > Plan.FREE
        assert Plan.PRO <= Plan.PRO
        assert sorted([Plan.PRO, Plan.ENTERPRISE, Plan.FREE]) == [Plan.FREE, Plan.PRO, Plan.ENTERPRISE]


class TestModelCatalog:
    """Tests for ModelCatalog."""

    def test_default_catalog_contents(self, catalog):
        """Default catalog carries the shipped models in order."""
        assert [m.id for m in catalog] == [
            "deepseek-r1", "gpt-4o", "claude-3-5-sonnet", "gpt-4o-enterprise", "gpt-4o-mini",
        ]
        assert catalog.require("deepseek-r1").cost_per_input_token == 0.0
        assert catalog.require("gpt-4o").required_plan == Plan.PRO

    def test_get_unknown_returns_none(self, catalog):
        """Optional lookups return None for unknown ids."""
        assert catalog.get("gpt-9") is None
        assert catalog.get(None) is None

    def test_require_unknown_raises(self, catalog):
        """Mandatory lookups raise UnknownModelError."""
        with pytest.raises(UnknownModelError):
            catalog.require("gpt-9")

    def test_duplicate_ids_rejected(self):
        """Duplicate ids are a configuration error."""
        with pytest.raises(CatalogError):
            ModelCatalog([_model("a", Plan.FREE), _model("a", Plan.PRO)])

    def test_negative_cost_rejected(self):
        """Negative prices are a configuration error."""
        with pytest.raises(CatalogError):
            ModelCatalog([_model("a", Plan.FREE, cost=-0.1)])

    def test_unknown_provider_rejected(self):
        """Providers outside the supported set are rejected."""
        with pytest.raises(CatalogError):
            ModelCatalog([_model("a", Plan.FREE, provider="mystery")])

    def test_supports(self, catalog):
        """Capability lookups use descriptor features."""
        assert catalog.supports("gpt-4o", SUMMARIZATION)
        assert not catalog.supports("gpt-4o-mini", SUMMARIZATION)
        assert catalog.supports("gpt-4o-mini", "structured_tagging")
        assert not catalog.supports("gpt-9", SUMMARIZATION)

    def test_available_for(self, catalog):
        """available_for lists models at or below the plan."""
        free_ids = [m.id for m in catalog.available_for(Plan.FREE, SUMMARIZATION)]
        pro_ids = [m.id for m in catalog.available_for(Plan.PRO, SUMMARIZATION)]

        assert free_ids == ["deepseek-r1"]
        assert pro_ids == ["deepseek-r1", "gpt-4o", "claude-3-5-sonnet"]

    def test_default_for_each_plan(self, catalog):
        """Each plan defaults to the cheapest model on its top reachable tier."""
        assert catalog.default_for(Plan.FREE).id == "deepseek-r1"
        assert catalog.default_for(Plan.PRO).id == "gpt-4o"
        assert catalog.default_for(Plan.ENTERPRISE).id == "gpt-4o-enterprise"

    def test_default_prefers_cheaper_then_insertion_order(self):
        """Ties on tier break by price, then by catalog order."""
        catalog = ModelCatalog([
            _model("free", Plan.FREE, cost=0.0),
            _model("pro-expensive", Plan.PRO, cost=0.00005),
            _model("pro-cheap-1", Plan.PRO, cost=0.00001),
            _model("pro-cheap-2", Plan.PRO, cost=0.00001),
        ])

        assert catalog.default_for(Plan.PRO).id == "pro-cheap-1"
        assert catalog.default_for(Plan.ENTERPRISE).id == "pro-cheap-1"

    def test_default_without_candidates_raises(self):
        """A plan with no usable model is a configuration error."""
        catalog = ModelCatalog([_model("pro-only", Plan.PRO)])

        with pytest.raises(CatalogError):
            catalog.default_for(Plan.FREE)


class TestModelSelector:
    """Tests for ModelSelector."""

    def test_no_request_uses_default(self, catalog):
        """Absent model id selects the plan default without a prompt."""
        selection = ModelSelector(catalog).select(None, Plan.FREE)

        assert selection.model.id == "deepseek-r1"
        assert selection.upgrade_prompt is None

    def test_allowed_request_used_verbatim(self, catalog):
        """A model within the plan is used as requested."""
        selection = ModelSelector(catalog).select("claude-3-5-sonnet", Plan.PRO)

        assert selection.model.id == "claude-3-5-sonnet"
        assert selection.upgrade_prompt is None

    def test_insufficient_plan_falls_back_with_prompt(self, catalog):
        """FREE asking for gpt-4o gets the FREE default and a PRO upgrade prompt."""
        selection = ModelSelector(catalog).select("gpt-4o", Plan.FREE)

        assert selection.model.id == "deepseek-r1"
        assert selection.upgrade_prompt is not None
        assert selection.upgrade_prompt.required_plan == Plan.PRO
        assert selection.upgrade_prompt.message == "Upgrade to PRO plan to use GPT-4o"
        assert "Advanced reasoning" in selection.upgrade_prompt.model_features

    def test_enterprise_model_prompt_names_enterprise(self, catalog):
        """PRO asking for an ENTERPRISE model is told to upgrade to ENTERPRISE."""
        selection = ModelSelector(catalog).select("gpt-4o-enterprise", Plan.PRO)

        assert selection.model.id == "gpt-4o"
        assert selection.upgrade_prompt.required_plan == Plan.ENTERPRISE

    def test_unknown_model_falls_back_silently(self, catalog):
        """Unknown ids fall back to the default without a prompt."""
        selection = ModelSelector(catalog).select("gpt-9", Plan.PRO)

        assert selection.model.id == "gpt-4o"
        assert selection.upgrade_prompt is None

    def test_non_summarization_model_falls_back(self, catalog):
        """Tagging-only models cannot be picked for summaries."""
        selection = ModelSelector(catalog).select("gpt-4o-mini", Plan.ENTERPRISE)

        assert selection.model.id == "gpt-4o-enterprise"
        assert selection.upgrade_prompt is None

    @pytest.mark.parametrize("plan", list(Plan))
    def test_selection_never_exceeds_plan(self, catalog, plan):
        """Whatever is requested, the selected model is within the plan."""
        selector = ModelSelector(catalog)
        for requested in [None, "gpt-9"] + [m.id for m in DEFAULT_MODELS]:
            selection = selector.select(requested, plan)
            assert selection.model.required_plan <= plan

    @pytest.mark.parametrize("plan", list(Plan))
    def test_prompt_iff_plan_too_low(self, catalog, plan):
        """An upgrade prompt appears exactly when the requested model needs a higher plan."""
        selector = ModelSelector(catalog)
        for model in catalog.available_for(Plan.ENTERPRISE, SUMMARIZATION):
            selection = selector.select(model.id, plan)
            assert (selection.upgrade_prompt is not None) == (model.required_plan > plan)
