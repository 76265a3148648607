"""
Entitlement lookup: which plan (and organization) a caller belongs to.
"""
import logging
from typing import Optional, Protocol

from sqlalchemy import select

from scribe.database import AsyncSessionLocal
from scribe.models.subscription import Plan, Subscription, SubscriptionStatus, OrganizationMember

logger = logging.getLogger(__name__)

DEMO_CALLER_PREFIX = "demo-"


class PlanResolver(Protocol):
    async def resolve_plan(self, caller_id: Optional[str]) -> Plan: ...

    async def resolve_organization(self, caller_id: Optional[str]) -> Optional[str]: ...


def _is_anonymous(caller_id: Optional[str]) -> bool:
    return not caller_id or not caller_id.strip() or caller_id.startswith(DEMO_CALLER_PREFIX)


class SubscriptionPlanResolver:
    """
    Resolves plans from the subscriptions table.

    Lookups never raise: a caller whose plan cannot be determined is
    treated as FREE, which is the least privileged tier.
    """

    def __init__(self, session_factory=AsyncSessionLocal):
        self._session_factory = session_factory

    async def resolve_plan(self, caller_id: Optional[str]) -> Plan:
        if _is_anonymous(caller_id):
            return Plan.FREE

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Subscription.plan)
                    .where(
                        Subscription.user_id == caller_id,
                        Subscription.status == SubscriptionStatus.ACTIVE,
                    )
                    .order_by(Subscription.created_at.desc())
                    .limit(1)
                )
                plan = result.scalar_one_or_none()
        except Exception as e:
            logger.warning(
                f"Plan lookup failed for {caller_id}, defaulting to FREE: {e}",
                extra={"event": "plan_lookup_failed", "user_id": caller_id},
            )
            return Plan.FREE

        return plan or Plan.FREE

    async def resolve_organization(self, caller_id: Optional[str]) -> Optional[str]:
        if _is_anonymous(caller_id):
            return None

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(OrganizationMember.organization_id)
                    .where(OrganizationMember.user_id == caller_id)
                    .order_by(OrganizationMember.created_at)
                    .limit(1)
                )
                return result.scalar_one_or_none()
        except Exception as e:
            logger.warning(
                f"Organization lookup failed for {caller_id}: {e}",
                extra={"event": "organization_lookup_failed", "user_id": caller_id},
            )
            return None


class StaticPlanResolver:
    """Fixed caller -> plan mapping, for local runs and tests."""

    def __init__(self, plans: Optional[dict] = None, organizations: Optional[dict] = None, default: Plan = Plan.FREE):
        self._plans = dict(plans or {})
        self._organizations = dict(organizations or {})
        self._default = default

    async def resolve_plan(self, caller_id: Optional[str]) -> Plan:
        if _is_anonymous(caller_id):
            return Plan.FREE
        return self._plans.get(caller_id, self._default)

    async def resolve_organization(self, caller_id: Optional[str]) -> Optional[str]:
        return self._organizations.get(caller_id)
