"""
Repository layer for database operations.
"""
from scribe.repositories.summary_repository import SummaryRepository
from scribe.repositories.usage_repository import UsageRepository

__all__ = ["SummaryRepository", "UsageRepository"]
