"""
Tests for Pydantic schemas validation.
"""
import pytest
from pydantic import ValidationError

from scribe.schemas.summarize import SummarizeRequest, QualityScoresResponse, UpgradePromptResponse
from scribe.schemas.tags import TagRequest, TagResponse, TagsPayload, StoredTagsResponse


class TestSummarizeSchemas:
    """Tests for summarize schemas."""

    def test_request_accepts_camel_case(self):
        """Wire payloads use camelCase keys."""
        schema = SummarizeRequest.model_validate({
            "text": "notes",
            "callerId": "user-1",
            "teamId": "team-1",
            "preferredModelId": "gpt-4o",
            "sourceContext": {"source": "slack"},
        })

        assert schema.caller_id == "user-1"
        assert schema.team_id == "team-1"
        assert schema.preferred_model_id == "gpt-4o"
        assert schema.source_context == {"source": "slack"}

    def test_request_accepts_field_names(self):
        """Snake_case field names also populate the model."""
        schema = SummarizeRequest(text="notes", caller_id="user-1")

        assert schema.caller_id == "user-1"

    def test_request_fields_optional(self):
        """Missing text is left to the pipeline to reject."""
        schema = SummarizeRequest()

        assert schema.text is None

    def test_request_rejects_non_string_text(self):
        """Text must be a string."""
        with pytest.raises(ValidationError):
            SummarizeRequest(text=["a", "b"])

    def test_quality_scores_serialize_camel_case(self):
        """Unscored dimensions serialize as null."""
        schema = QualityScoresResponse(coherence=0.9, overall=0.9)

        assert schema.model_dump(by_alias=True) == {
            "coherence": 0.9,
            "coverage": None,
            "style": None,
            "length": None,
            "overall": 0.9,
        }

    def test_upgrade_prompt_aliases(self):
        """Upgrade prompts expose requiredPlan and modelFeatures."""
        schema = UpgradePromptResponse(message="Upgrade to PRO plan to use GPT-4o", required_plan="PRO")

        data = schema.model_dump(by_alias=True)
        assert data["requiredPlan"] == "PRO"
        assert data["modelFeatures"] == []


class TestTagSchemas:
    """Tests for tagging schemas."""

    def test_tags_payload_defaults(self):
        """Empty payloads have empty lists and neutral confidence."""
        payload = TagsPayload()

        assert payload.skills == []
        assert payload.action_items == []
        assert payload.confidence_score == 0.5

    def test_tags_payload_keeps_snake_case(self):
        """Tag keys are not camelCased on the wire."""
        data = TagsPayload(action_items=["ship"]).model_dump(by_alias=True)

        assert "action_items" in data
        assert "confidence_score" in data

    def test_tag_request_caller_alias(self):
        """callerId maps to caller_id."""
        assert TagRequest.model_validate({"callerId": "user-1"}).caller_id == "user-1"

    def test_tag_response_failure_shape(self):
        """Failures drop unset fields when None is excluded."""
        schema = TagResponse(success=False, error="premium required")

        assert schema.model_dump(by_alias=True, exclude_none=True) == {"success": False, "error": "premium required"}

    def test_stored_tags_aliases(self):
        """Stored tags expose summaryId and hasTags."""
        data = StoredTagsResponse(summary_id="s-1", has_tags=False).model_dump(by_alias=True)

        assert data == {"summaryId": "s-1", "tags": None, "hasTags": False}
