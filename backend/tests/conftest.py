"""
Test configuration and fixtures.
Uses a throwaway SQLite database (aiosqlite) and fake AI backends.
"""
import asyncio
import os
import tempfile

# Set test environment before any imports
_TEST_DB_DIR = tempfile.mkdtemp(prefix="scribe-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'scribe_test.db')}"
os.environ["ENVIRONMENT"] = "test"
for _key in ("OPENAI_API_KEY", "DEEPSEEK_API_KEY", "OPENROUTER_API_KEY", "ANTHROPIC_API_KEY"):
    os.environ.pop(_key, None)

import pytest
from typing import AsyncGenerator, List, Optional

from httpx import AsyncClient, ASGITransport

from scribe.ai.base import SummaryBackend, BackendResponse
from scribe.ai.catalog import ModelCatalog, build_default_catalog
from scribe.ai.invoker import SummaryInvoker
from scribe.ai.tagging_client import TaggingResponse
from scribe.database import engine, AsyncSessionLocal
from scribe.models.base import Base
from scribe.models.subscription import Plan
from scribe.repositories.summary_repository import SummaryRepository
from scribe.services.plan_resolver import StaticPlanResolver
from scribe.services.rate_limiter import RateLimiter, RateLimiterRegistry
from scribe.services.usage_meter import UsageMeter


class FakeBackend(SummaryBackend):
    """Summary backend returning a canned response."""

    def __init__(self, text="Summary of the conversation.", tokens_in=None, tokens_out=None,
                 quality_signals=None, error: Optional[Exception] = None, delay: float = 0.0):
        self.text = text
        self.tokens_in = tokens_in
        self.tokens_out = tokens_out
        self.quality_signals = quality_signals or {}
        self.error = error
        self.delay = delay
        self.calls = []

    def is_configured(self) -> bool:
        return True

    async def generate(self, model, text, source_context=None) -> BackendResponse:
        self.calls.append((model.id, text, source_context))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return BackendResponse(
            text=self.text,
            tokens_in=self.tokens_in,
            tokens_out=self.tokens_out,
            quality_signals=dict(self.quality_signals),
        )


class FakeTaggingClient:
    """Tagging client returning canned JSON content."""

    def __init__(self, content: str = "{}", tokens_used: int = 120, error: Optional[Exception] = None, delay: float = 0.0):
        self.content = content
        self.tokens_used = tokens_used
        self.error = error
        self.delay = delay
        self.calls = []

    def is_configured(self) -> bool:
        return True

    async def extract(self, model, summary_text):
        self.calls.append((model.id, summary_text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return TaggingResponse(content=self.content, tokens_used=self.tokens_used)


class MemoryUsageStore:
    """UsageStore keeping records in a list; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.records: List = []
        self.fail = fail

    async def insert(self, record) -> None:
        if self.fail:
            raise RuntimeError("usage table unavailable")
        self.records.append(record)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def db():
    """Fresh schema per test on the shared engine."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield AsyncSessionLocal
    # Pooled connections are bound to this test's event loop
    await engine.dispose()


@pytest.fixture
def catalog() -> ModelCatalog:
    return build_default_catalog()


@pytest.fixture
def usage_store() -> MemoryUsageStore:
    return MemoryUsageStore()


@pytest.fixture
def usage_meter(catalog, usage_store) -> UsageMeter:
    return UsageMeter(catalog, usage_store)


@pytest.fixture
def legacy_backend() -> FakeBackend:
    return FakeBackend(text="Free tier summary.")


@pytest.fixture
def multi_model_backend() -> FakeBackend:
    return FakeBackend(
        text="Premium summary. However, the team agreed on next steps.",
        tokens_in=500,
        tokens_out=120,
        quality_signals={"coherence": 0.9, "coverage": 0.6, "style": 1.0, "length": 0.7},
    )


@pytest.fixture
def invoker(catalog, legacy_backend, multi_model_backend) -> SummaryInvoker:
    return SummaryInvoker(catalog, legacy_backend, multi_model_backend)


@pytest.fixture
def plan_resolver() -> StaticPlanResolver:
    return StaticPlanResolver(
        plans={"pro-user": Plan.PRO, "enterprise-user": Plan.ENTERPRISE, "free-user": Plan.FREE},
        organizations={"pro-user": "org-1"},
    )


@pytest.fixture
def tagging_client() -> FakeTaggingClient:
    return FakeTaggingClient(content='{"skills": ["negotiation"], "technologies": ["Python"], "confidence_score": 0.9}')


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiters(clock) -> RateLimiterRegistry:
    return RateLimiterRegistry({
        "auth": RateLimiter(5, 900, name="auth", clock=clock),
        "summarize": RateLimiter(10, 60, name="summarize", clock=clock),
        "tagging": RateLimiter(20, 60, name="tagging", clock=clock),
    })


@pytest.fixture
async def client(db, catalog, invoker, usage_meter, plan_resolver, tagging_client, rate_limiters) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client with fake AI backends and in-memory usage store."""
    from scribe.main import app
    from scribe.api import dependencies

    app.dependency_overrides[dependencies.get_catalog] = lambda: catalog
    app.dependency_overrides[dependencies.get_invoker] = lambda: invoker
    app.dependency_overrides[dependencies.get_usage_meter] = lambda: usage_meter
    app.dependency_overrides[dependencies.get_plan_resolver] = lambda: plan_resolver
    app.dependency_overrides[dependencies.get_tagging] = lambda: tagging_client
    app.dependency_overrides[dependencies.get_rate_limiters] = lambda: rate_limiters
    app.dependency_overrides[dependencies.get_summary_repository] = lambda: SummaryRepository(db)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await usage_meter.drain()
    app.dependency_overrides.clear()
