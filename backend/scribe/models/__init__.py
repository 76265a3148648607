"""
Database models package.
"""
from scribe.models.base import Base
from scribe.models.subscription import Plan, SubscriptionStatus, Subscription, OrganizationMember
from scribe.models.summary import Summary
from scribe.models.summary_tag import SummaryTag
from scribe.models.ai_usage import AIUsageTracking

__all__ = [
    "Base",
    "Plan",
    "SubscriptionStatus",
    "Subscription",
    "OrganizationMember",
    "Summary",
    "SummaryTag",
    "AIUsageTracking",
]
