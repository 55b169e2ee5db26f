from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from config import CaseStatus, Origin
from sla_insights.application import SLAInsightsService
from sla_insights.domain import (
    AuditEntry,
    BusinessCalendar,
    BusinessDurationCalculator,
    ReferralCase,
)

DENVER = ZoneInfo("America/Denver")

# Monday 2026-10-05 09:00 Mountain Time; Monday 2026-10-12 is Columbus Day
MONDAY_9AM = datetime(2026, 10, 5, 9, 0, tzinfo=DENVER)


def local(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=DENVER)


def status_change(status: str, when: datetime) -> AuditEntry:
    return AuditEntry(field="status", new_value=status, timestamp=when)


def make_case(**overrides) -> ReferralCase:
    values = {
        "id": "REF-001",
        "created_at": MONDAY_9AM,
        "status": CaseStatus.NEW_LEAD,
        "origin": Origin.MC,
        "has_assigned_agent": True,
        "has_lender": True,
    }
    values.update(overrides)
    return ReferralCase(**values)


@pytest.fixture()
def calendar() -> BusinessCalendar:
    return BusinessCalendar()


@pytest.fixture()
def calculator(calendar: BusinessCalendar) -> BusinessDurationCalculator:
    return BusinessDurationCalculator(calendar)


@pytest.fixture()
def service() -> SLAInsightsService:
    return SLAInsightsService()
