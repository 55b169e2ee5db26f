"""
SLA Insights Domain Entities
=============================

Pure Python domain entities for referral SLA insights.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns. Every entity is
a frozen snapshot: the engine reads them and never mutates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from config import (
    CaseStatus, Origin, CLOSED_DEAL_STATUSES, POST_CONTRACT_DEAL_STATUSES
)
from sla_insights.domain.value_objects import DurationValue, KnownDuration, as_utc


def _normalize(entity, *names: str) -> None:
    for name in names:
        object.__setattr__(entity, name, as_utc(getattr(entity, name)))


@dataclass(frozen=True)
class AuditEntry:
    """One append-only change record on a referral."""
    field: str
    new_value: Optional[str]
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        _normalize(self, "timestamp")

    @property
    def is_status_change(self) -> bool:
        return self.field == "status"


@dataclass(frozen=True)
class Deal:
    """
    One attempt at carrying a referral from contract to payout.

    A referral may hold several deals when an earlier one fell through.
    """
    status: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    def __post_init__(self):
        _normalize(self, "created_at", "updated_at", "paid_at")

    @property
    def is_post_contract(self) -> bool:
        return self.status in POST_CONTRACT_DEAL_STATUSES

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_DEAL_STATUSES


@dataclass(frozen=True)
class Note:
    """A human touchpoint logged on the referral."""
    created_at: Optional[datetime] = None

    def __post_init__(self):
        _normalize(self, "created_at")


@dataclass(frozen=True)
class SlaCarryForward:
    """
    Minute values stored by the surrounding system at cycle reset.

    The engine only reads these to surface history next to pending values.
    """
    contract_to_close_minutes: Optional[int] = None
    closed_to_paid_minutes: Optional[int] = None
    previous_contract_to_close_minutes: Optional[int] = None
    previous_closed_to_paid_minutes: Optional[int] = None

    def __post_init__(self):
        # A negative stored value is corrupt; treat it as never recorded
        for name in (
            "contract_to_close_minutes", "closed_to_paid_minutes",
            "previous_contract_to_close_minutes", "previous_closed_to_paid_minutes"
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                object.__setattr__(self, name, None)


@dataclass(frozen=True)
class ReferralCase:
    """
    Referral snapshot entity.

    Holds everything the engine needs for one evaluation; callers must
    materialize notes, deals and audit entries before building it.
    """

    # Core attributes
    id: str
    created_at: datetime
    status: str = CaseStatus.NEW_LEAD
    origin: str = Origin.MC

    # Timestamps
    status_last_updated: Optional[datetime] = None

    # Collaborator presence
    has_assigned_agent: bool = False
    has_lender: bool = False

    # Related records
    notes: Tuple[Note, ...] = ()
    deals: Tuple[Deal, ...] = ()
    audit: Tuple[AuditEntry, ...] = ()

    carry_forward: SlaCarryForward = field(default_factory=SlaCarryForward)
    days_in_status: Optional[int] = None

    def __post_init__(self):
        _normalize(self, "created_at", "status_last_updated")
        for name in ("notes", "deals", "audit"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def is_self_originated(self) -> bool:
        """Agent-originated referrals skip the receiving-side handoff."""
        return self.origin == Origin.AGENT

    @property
    def status_changed_at(self) -> datetime:
        """When the current status began, falling back to creation."""
        return self.status_last_updated or self.created_at


@dataclass(frozen=True)
class SlaDuration:
    """A named milestone-to-milestone interval for the case detail view."""
    key: str
    label: str
    value: DurationValue

    @property
    def minutes(self) -> Optional[int]:
        """Minutes when known; None while pending."""
        if isinstance(self.value, KnownDuration):
            return self.value.minutes
        return None

    @property
    def formatted(self) -> str:
        return self.value.formatted


@dataclass(frozen=True)
class Recommendation:
    """A proactive-outreach suggestion for the operator task list."""
    id: str
    title: str
    message: str
    priority: str
    category: str
    due_at: Optional[datetime] = None
    supporting_metric: Optional[str] = None


@dataclass(frozen=True)
class RiskSummary:
    """Aggregate risk rating for a status badge."""
    level: str
    headline: str
    detail: str


@dataclass(frozen=True)
class SlaInsights:
    """Everything one evaluation produces for a referral."""
    case_id: str
    evaluated_at: datetime
    durations: Tuple[SlaDuration, ...]
    recommendations: Tuple[Recommendation, ...]
    risk_summary: RiskSummary

    def duration(self, key: str) -> Optional[SlaDuration]:
        """Look up a duration by key."""
        for item in self.durations:
            if item.key == key:
                return item
        return None
