"""
Milestone Timestamp Resolver
============================

Resolves when a referral first reached each milestone.

Status milestones come from the status audit log; deal milestones come
from the referral's deals, falling back to the audit log. The resolver
does not enforce ordering between milestones: a manually corrected audit
entry may place a later milestone before an earlier one, and callers must
tolerate that.
"""

from datetime import datetime
from typing import Callable, Iterable, List, Optional

from config import CaseStatus, DealStatus
from sla_insights.domain.entities import AuditEntry, Deal, ReferralCase


def _earliest(
    deals: Iterable[Deal],
    matches: Callable[[Deal], bool],
    timestamp: Callable[[Deal], Optional[datetime]]
) -> Optional[datetime]:
    candidates = [timestamp(deal) for deal in deals if matches(deal)]
    candidates = [value for value in candidates if value is not None]
    return min(candidates) if candidates else None


class MilestoneTimestampResolver:
    """Looks up first-occurrence instants for one referral snapshot."""

    def __init__(self, case: ReferralCase):
        self.case = case
        self._status_audit: List[AuditEntry] = sorted(
            (
                entry for entry in case.audit
                if entry.is_status_change and entry.timestamp is not None
            ),
            key=lambda entry: entry.timestamp
        )

    # ==================== Status milestones ====================

    def first_status_at(self, status: str) -> Optional[datetime]:
        """
        First instant the referral entered a status.

        Falls back to the status-change instant when the referral sits in
        that status but no audit entry records it.
        """
        for entry in self._status_audit:
            if entry.new_value == status:
                return entry.timestamp

        if self.case.status == status:
            return self.case.status_changed_at

        return None

    # ==================== Deal milestones ====================

    def has_deal_progress(self) -> bool:
        """Whether any deal shows the referral reached a contract."""
        return any(deal.is_post_contract for deal in self.case.deals)

    def contract_reached_at(self) -> Optional[datetime]:
        """
        Earliest contract instant across qualifying deals.

        Falls back to the audited Under Contract instant, then Paired,
        then creation.
        """
        from_deals = _earliest(
            self.case.deals,
            lambda deal: deal.is_post_contract,
            lambda deal: deal.created_at or deal.updated_at
        )
        return (
            from_deals
            or self.first_status_at(CaseStatus.UNDER_CONTRACT)
            or self.first_status_at(CaseStatus.PAIRED)
            or self.case.created_at
        )

    def closed_at(self) -> Optional[datetime]:
        """Earliest closing across closed or paid deals, else the audit log."""
        from_deals = _earliest(
            self.case.deals,
            lambda deal: deal.is_closed,
            lambda deal: deal.updated_at or deal.created_at
        )
        return from_deals or self.first_status_at(CaseStatus.CLOSED)

    def paid_at(self) -> Optional[datetime]:
        """Earliest payment across paid deals."""
        return _earliest(
            self.case.deals,
            lambda deal: deal.status == DealStatus.PAID,
            lambda deal: deal.paid_at or deal.updated_at or deal.created_at
        )

    # ==================== Touchpoints ====================

    def latest_note_at(self) -> Optional[datetime]:
        """Most recent note timestamp, ignoring notes without one."""
        stamps = [note.created_at for note in self.case.notes if note.created_at is not None]
        return max(stamps) if stamps else None
