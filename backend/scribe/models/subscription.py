"""
Subscription and organization membership models.
Owned by the billing system; the summarization core only reads them to
resolve a caller's plan and organization.
"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Index
from datetime import datetime
import enum

from scribe.models.base import Base, generate_uuid


class Plan(str, enum.Enum):
    """
    Subscription tier with a strict total order FREE < PRO < ENTERPRISE.

    Members are strings (for JSON and the database) but compare by tier
    rank, never alphabetically.
    """
    FREE = "FREE"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"

    @property
    def rank(self) -> int:
        return _PLAN_RANKS[self.value]

    def __lt__(self, other):
        if not isinstance(other, Plan):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Plan):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Plan):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Plan):
            return NotImplemented
        return self.rank >= other.rank


_PLAN_RANKS = {"FREE": 0, "PRO": 1, "ENTERPRISE": 2}


class SubscriptionStatus(str, enum.Enum):
    """Subscription status enum."""
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    PAST_DUE = "PAST_DUE"


class Subscription(Base):
    """A caller's subscription to a plan."""

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(128), nullable=False)
    plan = Column(SQLEnum(Plan, native_enum=False, length=16), nullable=False, default=Plan.FREE)
    status = Column(SQLEnum(SubscriptionStatus, native_enum=False, length=16), nullable=False, default=SubscriptionStatus.ACTIVE)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    current_period_end = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_subscription_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<Subscription(user_id={self.user_id}, plan={self.plan}, status={self.status})>"


class OrganizationMember(Base):
    """Links a caller to the organization usage is billed to."""

    __tablename__ = "organization_members"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(128), nullable=False, index=True)
    organization_id = Column(String(128), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<OrganizationMember(user_id={self.user_id}, organization_id={self.organization_id})>"
