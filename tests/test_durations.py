from datetime import timedelta

from config import CaseStatus, DealStatus, Origin
from sla_insights.domain import (
    Deal,
    KnownDuration,
    PendingNoHistory,
    PendingWithHistory,
    SlaCarryForward,
    build_duration_series,
    format_minutes,
)
from sla_insights.domain.durations import (
    CLOSE_TO_PAID,
    COMMUNICATION_TO_CONTRACT,
    CONTRACT_TO_CLOSE,
    NEW_LEAD_TO_PAIRED,
    PAIRED_TO_COMMUNICATION,
)

from conftest import local, make_case, status_change

ALL_KEYS = [
    NEW_LEAD_TO_PAIRED,
    PAIRED_TO_COMMUNICATION,
    COMMUNICATION_TO_CONTRACT,
    CONTRACT_TO_CLOSE,
    CLOSE_TO_PAID,
]


def by_key(series):
    return {item.key: item for item in series}


def early_pipeline_audit():
    return [
        status_change(CaseStatus.PAIRED, local(2026, 10, 5, 9, 30)),
        status_change(CaseStatus.IN_COMMUNICATION, local(2026, 10, 5, 10, 30)),
    ]


def test_new_lead_without_audit_is_all_pending(calculator):
    series = build_duration_series(make_case(), calculator)
    assert [item.key for item in series] == ALL_KEYS
    for item in series[1:]:
        assert item.minutes is None
        assert item.formatted == "Pending"


def test_early_pipeline_durations(calculator):
    case = make_case(status=CaseStatus.IN_COMMUNICATION, audit=early_pipeline_audit())
    series = by_key(build_duration_series(case, calculator))

    assert series[NEW_LEAD_TO_PAIRED].value == KnownDuration(30)
    assert series[NEW_LEAD_TO_PAIRED].formatted == "30m"
    assert series[PAIRED_TO_COMMUNICATION].formatted == "1h"
    assert series[COMMUNICATION_TO_CONTRACT].value == PendingNoHistory()


def test_communication_to_contract_from_audit(calculator):
    audit = early_pipeline_audit() + [
        status_change(CaseStatus.UNDER_CONTRACT, local(2026, 10, 6, 10, 30)),
    ]
    case = make_case(status=CaseStatus.UNDER_CONTRACT, audit=audit)
    series = by_key(build_duration_series(case, calculator))

    assert series[COMMUNICATION_TO_CONTRACT].minutes == 540
    assert series[CONTRACT_TO_CLOSE].value == PendingNoHistory()


def test_showing_homes_starts_the_conversion_clock(calculator):
    audit = early_pipeline_audit() + [
        status_change(CaseStatus.SHOWING_HOMES, local(2026, 10, 5, 13)),
        status_change(CaseStatus.UNDER_CONTRACT, local(2026, 10, 6, 10, 30)),
    ]
    case = make_case(status=CaseStatus.UNDER_CONTRACT, audit=audit)
    assert by_key(build_duration_series(case, calculator))[COMMUNICATION_TO_CONTRACT].minutes == 390


def test_contract_is_pending_without_contract_signal(calculator):
    audit = early_pipeline_audit() + [
        status_change(CaseStatus.UNDER_CONTRACT, local(2026, 10, 6, 10, 30)),
    ]
    case = make_case(
        status=CaseStatus.SHOWING_HOMES,
        audit=audit,
        deals=[Deal(status=DealStatus.TERMINATED, created_at=local(2026, 10, 6, 10, 30))],
    )
    series = by_key(build_duration_series(case, calculator))
    assert series[COMMUNICATION_TO_CONTRACT].minutes is None


def test_deal_milestones(calculator):
    case = make_case(
        status=CaseStatus.PAYMENT_SENT,
        audit=early_pipeline_audit(),
        deals=[
            Deal(
                status=DealStatus.PAID,
                created_at=local(2026, 10, 6, 9),
                updated_at=local(2026, 10, 7, 9),
                paid_at=local(2026, 10, 7, 11),
            )
        ],
    )
    series = by_key(build_duration_series(case, calculator))
    assert series[COMMUNICATION_TO_CONTRACT].minutes == 450
    assert series[CONTRACT_TO_CLOSE].minutes == 540
    assert series[CLOSE_TO_PAID].minutes == 120


def test_inverted_milestones_are_pending(calculator):
    case = make_case(
        status=CaseStatus.IN_COMMUNICATION,
        audit=[
            status_change(CaseStatus.PAIRED, local(2026, 10, 5, 10, 30)),
            status_change(CaseStatus.IN_COMMUNICATION, local(2026, 10, 5, 9, 30)),
        ],
    )
    series = by_key(build_duration_series(case, calculator))
    assert series[PAIRED_TO_COMMUNICATION].value == PendingNoHistory()


def test_pre_contract_status_shows_carried_history(calculator):
    case = make_case(
        status=CaseStatus.SHOWING_HOMES,
        audit=early_pipeline_audit(),
        deals=[
            Deal(
                status=DealStatus.CLOSED,
                created_at=local(2026, 10, 6, 9),
                updated_at=local(2026, 10, 7, 9),
            )
        ],
        carry_forward=SlaCarryForward(
            contract_to_close_minutes=600,
            previous_contract_to_close_minutes=1500,
            closed_to_paid_minutes=300,
        ),
    )
    series = by_key(build_duration_series(case, calculator))

    assert series[CONTRACT_TO_CLOSE].value == PendingWithHistory(1500)
    assert series[CONTRACT_TO_CLOSE].formatted == "Pending (prev 25h)"
    assert series[CLOSE_TO_PAID].value == PendingWithHistory(300)
    assert series[CLOSE_TO_PAID].formatted == "Pending (prev 5h)"


def test_post_contract_status_falls_back_to_stored_value(calculator):
    case = make_case(
        status=CaseStatus.CLOSED,
        carry_forward=SlaCarryForward(
            contract_to_close_minutes=900,
            previous_closed_to_paid_minutes=300,
        ),
    )
    series = by_key(build_duration_series(case, calculator))

    assert series[CONTRACT_TO_CLOSE].value == KnownDuration(900)
    assert series[CONTRACT_TO_CLOSE].formatted == "15h"
    assert series[CLOSE_TO_PAID].formatted == "Pending (prev 5h)"


def test_negative_carry_forward_is_ignored(calculator):
    case = make_case(
        status=CaseStatus.SHOWING_HOMES,
        carry_forward=SlaCarryForward(previous_contract_to_close_minutes=-5),
    )
    series = by_key(build_duration_series(case, calculator))
    assert series[CONTRACT_TO_CLOSE].formatted == "Pending"


def test_agent_origin_has_no_close_to_paid(calculator):
    case = make_case(origin=Origin.AGENT, status=CaseStatus.CLOSED)
    keys = [item.key for item in build_duration_series(case, calculator)]
    assert keys == ALL_KEYS[:-1]


def test_format_minutes():
    assert format_minutes(0) == "0m"
    assert format_minutes(45) == "45m"
    assert format_minutes(120) == "2h"
    assert format_minutes(135) == "2h 15m"
