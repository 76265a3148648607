"""
Business logic services.
"""
from scribe.services.rate_limiter import RateLimiter, RateLimiterRegistry, RateLimitStatus
from scribe.services.plan_resolver import SubscriptionPlanResolver, StaticPlanResolver
from scribe.services.quality_scorer import QualityScorer, QualityScores
from scribe.services.usage_meter import UsageMeter, UsageRecord

__all__ = [
    "RateLimiter",
    "RateLimiterRegistry",
    "RateLimitStatus",
    "SubscriptionPlanResolver",
    "StaticPlanResolver",
    "QualityScorer",
    "QualityScores",
    "UsageMeter",
    "UsageRecord",
]
