"""
Tests for request-scoped helpers: client identity and disconnect handling.
"""
import asyncio
from types import SimpleNamespace

import pytest

from scribe.ai.invoker import SummaryInvoker
from scribe.ai.selector import ModelSelector
from scribe.api.dependencies import run_cancellable
from scribe.exceptions import ClientDisconnected
from scribe.services.quality_scorer import QualityScorer
from scribe.services.rate_limiter import RateLimiter
from scribe.services.summarization import SummarizationPipeline, SummarizationRequest
from scribe.services.tag_extraction import TagExtractionGate

from conftest import FakeBackend, FakeClock, FakeTaggingClient


class StubRequest:
    """Minimal stand-in for starlette's Request."""

    def __init__(self, disconnected: bool):
        self.disconnected = disconnected
        self.url = SimpleNamespace(path="/api/test")

    async def is_disconnected(self) -> bool:
        return self.disconnected


class RecordingRepository:
    def __init__(self):
        self.saved = []

    async def save_summary(self, **fields):
        row = SimpleNamespace(id="summary-1", created_at=None, **fields)
        self.saved.append(row)
        return row

    async def upsert_tags(self, summary_id, tags, ai_model, processing_time_ms):
        self.saved.append(tags)
        return tags


class TestRunCancellable:
    """Tests for run_cancellable."""

    @pytest.mark.asyncio
    async def test_returns_result_while_connected(self):
        """Work that finishes is returned unchanged."""
        async def work():
            await asyncio.sleep(0.02)
            return "done"

        result = await run_cancellable(StubRequest(disconnected=False), work(), poll_interval=0.01)

        assert result == "done"

    @pytest.mark.asyncio
    async def test_disconnect_cancels_work(self):
        """A disconnected client cancels the task and raises ClientDisconnected."""
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(ClientDisconnected) as exc_info:
            await run_cancellable(StubRequest(disconnected=True), work(), poll_interval=0.01)

        assert cancelled.is_set()
        assert exc_info.value.status_code == 499

    @pytest.mark.asyncio
    async def test_disconnect_during_summarize_records_failed_usage(self, plan_resolver, catalog, usage_meter, usage_store):
        """A summary cancelled by a disconnect leaves one failed usage record."""
        repository = RecordingRepository()
        pipeline = SummarizationPipeline(
            rate_limiter=RateLimiter(10, 60, name="summarize", clock=FakeClock()),
            plan_resolver=plan_resolver,
            selector=ModelSelector(catalog),
            invoker=SummaryInvoker(catalog, FakeBackend(delay=10.0), FakeBackend()),
            scorer=QualityScorer(),
            usage_meter=usage_meter,
            summary_repository=repository,
        )
        work = pipeline.summarize(SummarizationRequest(text="hello", caller_id="free-user"), "client")

        with pytest.raises(ClientDisconnected):
            await run_cancellable(StubRequest(disconnected=True), work, poll_interval=0.01)
        await usage_meter.drain()

        assert [r.success for r in usage_store.records] == [False]
        assert usage_store.records[0].error_message == "cancelled"
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_disconnect_during_tagging_records_failed_usage(self, plan_resolver, catalog, usage_meter, usage_store):
        """Tag extraction cancelled by a disconnect leaves one failed usage record."""
        repository = RecordingRepository()
        gate = TagExtractionGate(
            plan_resolver=plan_resolver,
            tagging_client=FakeTaggingClient(delay=10.0),
            catalog=catalog,
            summary_repository=repository,
            usage_meter=usage_meter,
        )
        work = gate.extract_tags("summary text", "summary-1", "pro-user")

        with pytest.raises(ClientDisconnected):
            await run_cancellable(StubRequest(disconnected=True), work, poll_interval=0.01)
        await usage_meter.drain()

        assert [r.success for r in usage_store.records] == [False]
        assert usage_store.records[0].operation_type == "tagging"
        assert usage_store.records[0].error_message == "cancelled"
        assert repository.saved == []
