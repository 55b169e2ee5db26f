"""
Duration Series Builder
=======================

Composes the milestone resolver and the business duration calculator into
the fixed, ordered chain of milestone-to-milestone durations.
"""

from datetime import datetime
from typing import List, Optional

from config import CaseStatus, CONTRACTING_STATUSES, PRE_CONTRACT_STATUSES
from sla_insights.domain.business_time import BusinessDurationCalculator
from sla_insights.domain.entities import ReferralCase, SlaDuration
from sla_insights.domain.milestones import MilestoneTimestampResolver
from sla_insights.domain.value_objects import duration_value

NEW_LEAD_TO_PAIRED = "new-lead-to-paired"
PAIRED_TO_COMMUNICATION = "paired-to-communication"
COMMUNICATION_TO_CONTRACT = "communication-to-contract"
CONTRACT_TO_CLOSE = "contract-to-close"
CLOSE_TO_PAID = "close-to-paid"

DURATION_LABELS = {
    NEW_LEAD_TO_PAIRED: "New Lead → Paired",
    PAIRED_TO_COMMUNICATION: "Paired → Communicating",
    COMMUNICATION_TO_CONTRACT: "Communicating → Under Contract",
    CONTRACT_TO_CLOSE: "Deal: Under Contract → Closed",
    CLOSE_TO_PAID: "Deal: Closed → Paid",
}


def minutes_between(
    calculator: BusinessDurationCalculator,
    start: Optional[datetime],
    end: Optional[datetime]
) -> Optional[int]:
    """Business minutes for a milestone interval; None unless end is after start."""
    if start is None or end is None or end <= start:
        return None
    return calculator.business_minutes(start, end)


def build_duration_series(
    case: ReferralCase,
    calculator: BusinessDurationCalculator,
    resolver: Optional[MilestoneTimestampResolver] = None
) -> List[SlaDuration]:
    """
    Build the ordered duration chain for a referral.

    While the referral is back in a pre-contract status, deal durations are
    pending and stored carry-forward values are shown as history instead.
    Self-originated referrals have no close-to-paid step.
    """
    resolver = resolver or MilestoneTimestampResolver(case)

    paired_at = resolver.first_status_at(CaseStatus.PAIRED)
    communicating_at = resolver.first_status_at(CaseStatus.IN_COMMUNICATION)
    showing_at = resolver.first_status_at(CaseStatus.SHOWING_HOMES)

    contracting = resolver.has_deal_progress() or case.status in CONTRACTING_STATUSES
    contract_at = resolver.contract_reached_at() if contracting else None
    closed_at = resolver.closed_at()
    paid_at = resolver.paid_at()

    communication_start = showing_at or communicating_at or paired_at or case.created_at

    new_lead_to_paired = minutes_between(calculator, case.created_at, paired_at)
    paired_to_communication = minutes_between(calculator, paired_at, communicating_at)
    communication_to_contract = minutes_between(calculator, communication_start, contract_at)
    contract_to_close = minutes_between(calculator, contract_at, closed_at)
    close_to_paid = minutes_between(calculator, closed_at, paid_at)

    stored = case.carry_forward
    if case.status in PRE_CONTRACT_STATUSES:
        contract_to_close = None
        close_to_paid = None
        contract_to_close_prev = _first_known(
            stored.previous_contract_to_close_minutes, stored.contract_to_close_minutes
        )
        close_to_paid_prev = _first_known(
            stored.previous_closed_to_paid_minutes, stored.closed_to_paid_minutes
        )
    else:
        contract_to_close = _first_known(contract_to_close, stored.contract_to_close_minutes)
        close_to_paid = _first_known(close_to_paid, stored.closed_to_paid_minutes)
        contract_to_close_prev = stored.previous_contract_to_close_minutes
        close_to_paid_prev = stored.previous_closed_to_paid_minutes

    series = [
        _duration(NEW_LEAD_TO_PAIRED, new_lead_to_paired),
        _duration(PAIRED_TO_COMMUNICATION, paired_to_communication),
        _duration(COMMUNICATION_TO_CONTRACT, communication_to_contract),
        _duration(CONTRACT_TO_CLOSE, contract_to_close, contract_to_close_prev),
        _duration(CLOSE_TO_PAID, close_to_paid, close_to_paid_prev),
    ]

    if case.is_self_originated:
        series = [item for item in series if item.key != CLOSE_TO_PAID]

    return series


def _first_known(*values: Optional[int]) -> Optional[int]:
    for value in values:
        if value is not None:
            return value
    return None


def _duration(key: str, minutes: Optional[int], previous: Optional[int] = None) -> SlaDuration:
    return SlaDuration(
        key=key,
        label=DURATION_LABELS[key],
        value=duration_value(minutes, previous)
    )
