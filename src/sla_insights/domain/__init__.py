"""
SLA Insights Domain Layer
=========================

Domain layer for the referral SLA insights module.

Contains:
- Entities: Referral snapshot and its records, plus engine outputs
- Value Objects: Duration variants and SLA thresholds
- Domain Services: Business calendar, duration calculator, milestone
  resolver, duration series, recommendation rules and risk summary

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from sla_insights.domain.entities import (
    AuditEntry,
    Deal,
    Note,
    Recommendation,
    ReferralCase,
    RiskSummary,
    SlaCarryForward,
    SlaDuration,
    SlaInsights,
)
from sla_insights.domain.value_objects import (
    DurationValue,
    KnownDuration,
    PendingNoHistory,
    PendingWithHistory,
    SLAThresholds,
    duration_value,
    format_minutes,
)
from sla_insights.domain.calendar import BusinessCalendar, holiday_set, holidays
from sla_insights.domain.business_time import BusinessDurationCalculator
from sla_insights.domain.milestones import MilestoneTimestampResolver
from sla_insights.domain.durations import build_duration_series
from sla_insights.domain.recommendations import (
    AgentOriginRuleSet,
    RecommendationEngine,
    RecommendationRuleSet,
    StandardRuleSet,
    rule_set_for,
    sort_recommendations,
)
from sla_insights.domain.risk import summarize_risk

__all__ = [
    # Entities
    "AuditEntry",
    "Deal",
    "Note",
    "Recommendation",
    "ReferralCase",
    "RiskSummary",
    "SlaCarryForward",
    "SlaDuration",
    "SlaInsights",
    # Value Objects
    "DurationValue",
    "KnownDuration",
    "PendingNoHistory",
    "PendingWithHistory",
    "SLAThresholds",
    "duration_value",
    "format_minutes",
    # Domain Services
    "BusinessCalendar",
    "holiday_set",
    "holidays",
    "BusinessDurationCalculator",
    "MilestoneTimestampResolver",
    "build_duration_series",
    "AgentOriginRuleSet",
    "RecommendationEngine",
    "RecommendationRuleSet",
    "StandardRuleSet",
    "rule_set_for",
    "sort_recommendations",
    "summarize_risk",
]
