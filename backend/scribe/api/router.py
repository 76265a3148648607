"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from scribe.api import health, summarize, summaries, models

api_router = APIRouter()

# Include route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(summarize.router, prefix="/summarize", tags=["summarize"])
api_router.include_router(summaries.router, prefix="/summaries", tags=["summaries"])
api_router.include_router(models.router, prefix="/ai/models", tags=["models"])
