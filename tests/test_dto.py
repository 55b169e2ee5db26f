from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from config import CaseStatus, Origin
from sla_insights.application import (
    CaseSnapshotDTO,
    DurationResponse,
    RecommendationResponse,
    parse_timestamp,
)
from sla_insights.domain import (
    AuditEntry,
    Deal,
    KnownDuration,
    PendingNoHistory,
    PendingWithHistory,
    Recommendation,
    ReferralCase,
    SlaCarryForward,
    SlaDuration,
)


@pytest.mark.parametrize("value", [None, "", "not-a-date", "2026-13-45T99:00:00", {"at": 1}, [2026]])
def test_unparseable_timestamps_become_none(value):
    assert parse_timestamp(value) is None


def test_iso_timestamps_are_parsed():
    parsed = parse_timestamp("2026-10-05T15:00:00Z")
    assert parsed == datetime(2026, 10, 5, 15, 0, tzinfo=timezone.utc)

    offset = parse_timestamp("2026-10-05T09:00:00-06:00")
    assert offset == parsed


def test_dates_become_utc_midnight():
    assert parse_timestamp(date(2026, 10, 5)) == datetime(2026, 10, 5, tzinfo=timezone.utc)


def test_datetimes_pass_through():
    value = datetime(2026, 10, 5, 15, 0, tzinfo=timezone.utc)
    assert parse_timestamp(value) is value


def test_snapshot_defaults():
    snapshot = CaseSnapshotDTO(id="REF-1", status=None, origin="")
    assert snapshot.status == CaseStatus.NEW_LEAD
    assert snapshot.origin == Origin.MC
    assert snapshot.notes == []
    assert snapshot.sla is None


def test_snapshot_requires_id():
    with pytest.raises(ValidationError):
        CaseSnapshotDTO(id="")


def test_snapshot_rejects_negative_days_in_status():
    with pytest.raises(ValidationError):
        CaseSnapshotDTO(id="REF-1", days_in_status=-1)


def test_snapshot_to_domain():
    snapshot = CaseSnapshotDTO.model_validate({
        "id": "REF-1",
        "created_at": "2026-10-05T15:00:00",
        "status": "Closed",
        "origin": "agent",
        "audit": [{"field": "status", "new_value": 42, "timestamp": "2026-10-05T16:00:00Z"}],
        "deals": [{"status": "paid", "paid_at": "2026-11-01T12:00:00Z", "updated_at": "bad"}],
        "sla": {"contract_to_close_minutes": -3, "closed_to_paid_minutes": 90},
    })
    case = snapshot.to_domain()

    assert isinstance(case, ReferralCase)
    assert isinstance(case.audit[0], AuditEntry)
    assert isinstance(case.deals[0], Deal)
    assert isinstance(case.carry_forward, SlaCarryForward)
    # Naive timestamps are taken as UTC
    assert case.created_at == datetime(2026, 10, 5, 15, 0, tzinfo=timezone.utc)
    assert case.is_self_originated
    assert case.audit[0].new_value == "42"
    assert case.deals[0].updated_at is None
    assert case.deals[0].paid_at == datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)
    assert case.carry_forward.contract_to_close_minutes is None
    assert case.carry_forward.closed_to_paid_minutes == 90


def test_snapshot_to_domain_fallback_creation():
    fallback = datetime(2026, 10, 5, 15, 0, tzinfo=timezone.utc)
    case = CaseSnapshotDTO(id="REF-1").to_domain(fallback_created_at=fallback)
    assert case.created_at == fallback
    assert case.status_changed_at == fallback


@pytest.mark.parametrize("value,state,previous,formatted", [
    (KnownDuration(95), "known", None, "1h 35m"),
    (PendingWithHistory(60), "pending_with_history", 60, "Pending (prev 1h)"),
    (PendingNoHistory(), "pending", None, "Pending"),
])
def test_duration_response_states(value, state, previous, formatted):
    response = DurationResponse.from_domain(SlaDuration(key="k", label="Label", value=value))
    assert response.state == state
    assert response.previous_minutes == previous
    assert response.formatted == formatted


def test_recommendation_response_serializes_due_date():
    due = datetime(2026, 10, 5, 17, 0, tzinfo=timezone.utc)
    response = RecommendationResponse.from_domain(Recommendation(
        id="assign-agent",
        title="Assign an agent",
        message="Route it",
        priority="urgent",
        category="assignment",
        due_at=due,
    ))
    payload = response.model_dump(mode="json")
    assert payload["due_at"] == "2026-10-05T17:00:00Z"
    assert payload["supporting_metric"] is None
