"""
Recommendation Engine
=====================

Rule-based proactive-outreach recommendations.

Each referral origin has its own rule set (strategy), selected by the
referral's origin tag so each can be exercised on its own:
- AgentOriginRuleSet: self-originated referrals (agent found the borrower)
- StandardRuleSet: mortgage-consultant and admin referrals

The engine de-duplicates by recommendation id and sorts by priority, then
soonest due date, then the order rules fired.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from config import (
    VALID_PRIORITIES,
    CaseStatus,
    Origin,
    RecommendationCategory,
    RecommendationPriority,
)
from sla_insights.domain.durations import (
    CLOSE_TO_PAID, COMMUNICATION_TO_CONTRACT, CONTRACT_TO_CLOSE,
    NEW_LEAD_TO_PAIRED, PAIRED_TO_COMMUNICATION
)
from sla_insights.domain.entities import Recommendation, ReferralCase, SlaDuration
from sla_insights.domain.value_objects import SLAThresholds, as_utc, format_minutes

PRIORITY_WEIGHT = {priority: weight for weight, priority in enumerate(VALID_PRIORITIES)}

ACTIVE_SEARCH_STATUSES = (CaseStatus.IN_COMMUNICATION, CaseStatus.SHOWING_HOMES)
ENDED_STATUSES = (CaseStatus.TERMINATED, CaseStatus.LOST)


def _whole_units(delta: timedelta, unit: timedelta) -> int:
    """Complete units elapsed, truncated toward zero."""
    return int(delta / unit)


def _due_after(anchor: datetime, delta: timedelta) -> Optional[datetime]:
    """Due instant, or None when it falls past the last representable date."""
    if datetime.max.replace(tzinfo=anchor.tzinfo) - anchor < delta:
        return None
    return anchor + delta


@dataclass(frozen=True)
class EvaluationContext:
    """Signals derived once per evaluation and shared by every rule."""
    case: ReferralCase
    now: datetime
    durations: Dict[str, SlaDuration] = field(default_factory=dict)
    latest_note_at: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        case: ReferralCase,
        now: datetime,
        durations: Iterable[SlaDuration],
        latest_note_at: Optional[datetime]
    ) -> "EvaluationContext":
        return cls(
            case=case,
            now=as_utc(now),
            durations={item.key: item for item in durations},
            latest_note_at=latest_note_at
        )

    @property
    def status(self) -> str:
        return self.case.status or CaseStatus.NEW_LEAD

    @property
    def status_changed_at(self) -> datetime:
        return self.case.status_changed_at

    @property
    def time_in_status(self) -> timedelta:
        return self.now - self.status_changed_at

    @property
    def hours_in_status(self) -> int:
        return _whole_units(self.time_in_status, timedelta(hours=1))

    @property
    def days_in_status(self) -> int:
        if self.case.days_in_status is not None:
            return self.case.days_in_status
        return _whole_units(self.time_in_status, timedelta(days=1))

    @property
    def hours_since_last_note(self) -> Optional[int]:
        if self.latest_note_at is None:
            return None
        return _whole_units(self.now - self.latest_note_at, timedelta(hours=1))

    def minutes(self, key: str) -> Optional[int]:
        duration = self.durations.get(key)
        return duration.minutes if duration is not None else None

    def formatted(self, key: str) -> str:
        duration = self.durations.get(key)
        return duration.formatted if duration is not None else "Pending"


class RecommendationRuleSet(ABC):
    """Strategy interface for one origin's recommendation rules."""

    name: str = "base"

    def __init__(self, thresholds: Optional[SLAThresholds] = None):
        self.thresholds = thresholds or SLAThresholds()

    @abstractmethod
    def evaluate(self, context: EvaluationContext) -> List[Recommendation]:
        """Return every recommendation whose rule fires, in rule order."""


class AgentOriginRuleSet(RecommendationRuleSet):
    """
    Rules for self-originated referrals.

    The receiving side here is the mortgage consultant (lender); there is
    no agent handoff and no referral fee to chase.
    """

    name = "agent_origin"

    def evaluate(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        case = context.case
        status = context.status
        hours_in_status = context.hours_in_status
        hours_since_note = context.hours_since_last_note
        recommendations = []

        if not case.has_lender:
            recommendations.append(Recommendation(
                id="assign-mc-agent-origin",
                title="Assign a mortgage consultant",
                message="Choose the MC who will take this referral so they can contact the borrower without delay.",
                priority=RecommendationPriority.URGENT,
                category=RecommendationCategory.ASSIGNMENT,
                due_at=_due_after(case.created_at, timedelta(hours=t.hours_to_lender_assignment)),
                supporting_metric="Awaiting MC assignment"
            ))

        if (
            case.has_lender
            and status in (CaseStatus.NEW_LEAD, CaseStatus.PAIRED)
            and hours_in_status >= t.hours_to_borrower_intro
        ):
            recommendations.append(Recommendation(
                id="confirm-borrower-intro",
                title="Confirm borrower outreach",
                message="Make sure the MC has introduced themselves to the borrower and acknowledged the referral.",
                priority=RecommendationPriority.HIGH,
                category=RecommendationCategory.COMMUNICATION,
                due_at=_due_after(context.status_changed_at, timedelta(hours=t.hours_to_borrower_intro)),
                supporting_metric=f"{hours_in_status}h since transfer"
            ))

        if hours_since_note is not None and hours_since_note > t.hours_without_note:
            recommendations.append(Recommendation(
                id="share-agent-update",
                title="Share an update with the referring agent",
                message="Log a quick note so the referring agent knows how the borrower conversation is progressing.",
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.COMMUNICATION,
                supporting_metric=f"Last update {hours_since_note}h ago"
            ))

        if status == CaseStatus.IN_COMMUNICATION and hours_in_status >= t.hours_in_communication_stall:
            recommendations.append(Recommendation(
                id="plan-next-step",
                title="Plan the borrower's next milestone",
                message="Suggest documents, education, or follow-ups to keep the borrower moving forward.",
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.PIPELINE,
                due_at=_due_after(context.status_changed_at, timedelta(hours=t.hours_in_communication_stall)),
                supporting_metric=f"{hours_in_status}h in current stage"
            ))

        return recommendations


class StandardRuleSet(RecommendationRuleSet):
    """Rules for referrals routed by a mortgage consultant or an admin."""

    name = "standard"

    def evaluate(self, context: EvaluationContext) -> List[Recommendation]:
        recommendations: List[Recommendation] = []
        recommendations.extend(self._assignment(context))
        recommendations.extend(self._paired(context))
        recommendations.extend(self._active_search(context))
        recommendations.extend(self._contract_and_payment(context))
        recommendations.extend(self._ended(context))
        return recommendations

    def _assignment(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        case = context.case

        if not case.has_assigned_agent:
            return [Recommendation(
                id="assign-agent",
                title="Assign an agent",
                message="No partner agent is assigned. Route this referral before the SLA breach.",
                priority=RecommendationPriority.URGENT,
                category=RecommendationCategory.ASSIGNMENT,
                due_at=_due_after(case.created_at, timedelta(minutes=t.minutes_to_assignment)),
                supporting_metric=f"Assignment SLA: {format_minutes(t.minutes_to_assignment)}"
            )]

        pairing = context.minutes(NEW_LEAD_TO_PAIRED)
        minutes_in_status = _whole_units(context.time_in_status, timedelta(minutes=1))
        if (
            context.status == CaseStatus.NEW_LEAD
            and minutes_in_status > t.minutes_to_assignment
            and (pairing is None or pairing > t.minutes_to_assignment)
        ):
            return [Recommendation(
                id="coach-initial-outreach",
                title="Confirm first touchpoint",
                message=(
                    f"It has taken longer than {format_minutes(t.minutes_to_assignment)} to connect. "
                    "Confirm the agent reached out to the borrower."
                ),
                priority=RecommendationPriority.HIGH,
                category=RecommendationCategory.COMMUNICATION,
                due_at=_due_after(context.status_changed_at, timedelta(minutes=t.minutes_to_assignment)),
                supporting_metric=f"Current lead-to-pairing: {context.formatted(NEW_LEAD_TO_PAIRED)}"
            )]

        return []

    def _paired(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        if context.status != CaseStatus.PAIRED:
            return []

        recommendations = []
        hours_in_status = context.hours_in_status
        if hours_in_status > t.hours_to_first_conversation:
            recommendations.append(Recommendation(
                id="nudge-first-conversation",
                title="Prompt first borrower conversation",
                message="Follow up with the agent to ensure they have scheduled an introduction call.",
                priority=RecommendationPriority.HIGH,
                category=RecommendationCategory.COMMUNICATION,
                due_at=_due_after(context.status_changed_at, timedelta(hours=t.hours_to_first_conversation)),
                supporting_metric=f"Hours since paired: {hours_in_status}"
            ))

        if context.minutes(PAIRED_TO_COMMUNICATION) is None:
            recommendations.append(Recommendation(
                id="log-communication-update",
                title="Capture communication progress",
                message="Record a timeline update once the agent makes contact so SLA tracking stays accurate.",
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.OPS,
                supporting_metric="Awaiting communication milestone"
            ))

        return recommendations

    def _active_search(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        if context.status not in ACTIVE_SEARCH_STATUSES:
            return []

        recommendations = []
        days_in_status = context.days_in_status
        hours_since_note = context.hours_since_last_note

        if days_in_status >= t.days_without_touch_point:
            recommendations.append(Recommendation(
                id="schedule-proactive-check-in",
                title="Schedule a proactive check-in",
                message="It has been a few days without movement. Suggest next steps or resources to keep momentum.",
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.COMMUNICATION,
                due_at=_due_after(context.status_changed_at, timedelta(days=t.days_without_touch_point)),
                supporting_metric=f"{days_in_status} days in current stage"
            ))

        if hours_since_note is not None and hours_since_note > t.hours_without_note:
            recommendations.append(Recommendation(
                id="refresh-activity-log",
                title="Update the activity log",
                message="Log a quick note or call outcome so the team has the latest borrower context.",
                priority=RecommendationPriority.LOW,
                category=RecommendationCategory.OPS,
                supporting_metric=f"Last note {hours_since_note}h ago"
            ))

        if (
            context.minutes(COMMUNICATION_TO_CONTRACT) is None
            and days_in_status >= t.days_to_under_contract
        ):
            recommendations.append(Recommendation(
                id="review-conversion-plan",
                title="Review conversion plan",
                message="Share open houses, financing refreshers, or incentives to help the borrower move forward.",
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.PIPELINE,
                due_at=_due_after(context.status_changed_at, timedelta(days=t.days_to_under_contract)),
                supporting_metric=f"{days_in_status} days without contract"
            ))

        return recommendations

    def _contract_and_payment(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        days_in_status = context.days_in_status

        if context.status == CaseStatus.UNDER_CONTRACT:
            if context.minutes(CONTRACT_TO_CLOSE) is None and days_in_status >= t.days_to_close:
                return [Recommendation(
                    id="check-escrow-milestones",
                    title="Check escrow milestones",
                    message="Confirm appraisal, inspection, and financing checkpoints are on track to avoid delays.",
                    priority=RecommendationPriority.HIGH,
                    category=RecommendationCategory.PIPELINE,
                    due_at=_due_after(context.status_changed_at, timedelta(days=t.days_to_close)),
                    supporting_metric=f"{days_in_status} days since contract"
                )]

        if context.status == CaseStatus.CLOSED:
            paid_minutes = context.minutes(CLOSE_TO_PAID)
            payment_window = timedelta(days=t.days_to_payment_after_close)
            overdue = (
                days_in_status >= t.days_to_payment_after_close
                if paid_minutes is None
                else timedelta(minutes=paid_minutes) > payment_window
            )
            if overdue:
                return [Recommendation(
                    id="confirm-referral-fee",
                    title="Confirm referral fee payment",
                    message="Closed files should have invoices tracked. Verify the payment status and log receipt.",
                    priority=RecommendationPriority.MEDIUM,
                    category=RecommendationCategory.FINANCE,
                    due_at=_due_after(context.status_changed_at, payment_window),
                    supporting_metric=(
                        "Awaiting payment confirmation" if paid_minutes is None
                        else f"Close to paid: {context.formatted(CLOSE_TO_PAID)}"
                    )
                )]

        return []

    def _ended(self, context: EvaluationContext) -> List[Recommendation]:
        t = self.thresholds
        if context.status not in ENDED_STATUSES:
            return []

        # A note logged after the status change documents the reason
        documented = (
            context.latest_note_at is not None
            and context.latest_note_at >= context.status_changed_at
        )
        if documented or context.hours_in_status <= t.hours_to_termination_reason:
            return []

        hours_since_note = context.hours_since_last_note
        return [Recommendation(
            id="capture-termination-reason",
            title="Capture termination context",
            message="Document the reason for termination to inform performance analytics and follow-up campaigns.",
            priority=RecommendationPriority.MEDIUM,
            category=RecommendationCategory.OPS,
            due_at=_due_after(context.status_changed_at, timedelta(hours=t.hours_to_termination_reason)),
            supporting_metric=(
                "No notes logged" if hours_since_note is None
                else f"Last note {hours_since_note}h ago"
            )
        )]


def rule_set_for(origin: Optional[str], thresholds: Optional[SLAThresholds] = None) -> RecommendationRuleSet:
    """Select the rule set for an origin; unknown origins use the standard rules."""
    if origin == Origin.AGENT:
        return AgentOriginRuleSet(thresholds)
    return StandardRuleSet(thresholds)


def dedupe_recommendations(items: Iterable[Recommendation]) -> List[Recommendation]:
    """Keep the first recommendation for each id."""
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def sort_recommendations(items: Sequence[Recommendation]) -> List[Recommendation]:
    """Priority first, then soonest due date (undated last), then insertion order."""
    def sort_key(item: Recommendation):
        weight = PRIORITY_WEIGHT.get(item.priority, len(PRIORITY_WEIGHT))
        due = as_utc(item.due_at)
        return (weight, due is None, due.timestamp() if due else 0.0)

    return sorted(items, key=sort_key)


class RecommendationEngine:
    """
    Evaluates a referral against the rule set for its origin.

    Deterministic: identical inputs and `now` give identical output.
    """

    def __init__(self, thresholds: Optional[SLAThresholds] = None):
        self.thresholds = thresholds or SLAThresholds()

    def evaluate(
        self,
        case: ReferralCase,
        durations: Iterable[SlaDuration],
        now: datetime,
        latest_note_at: Optional[datetime] = None
    ) -> List[Recommendation]:
        """
        Evaluate recommendations for a referral.

        Args:
            case: Referral snapshot
            durations: Duration series already built for the referral
            now: Evaluation instant
            latest_note_at: Most recent note instant, if any

        Returns:
            Unique recommendations, sorted for display
        """
        rule_set = rule_set_for(case.origin, self.thresholds)
        context = EvaluationContext.build(case, now, durations, latest_note_at)
        fired = rule_set.evaluate(context)
        return sort_recommendations(dedupe_recommendations(fired))
