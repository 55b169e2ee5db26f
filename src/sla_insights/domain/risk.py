"""
Risk Summarizer
===============

Collapses a recommendation list into one aggregate risk rating.

Missing signal degrades toward on_track rather than raising false alarms.
"""

from typing import Iterable

from config import RecommendationPriority, RiskLevel
from sla_insights.domain.entities import Recommendation, RiskSummary

ON_TRACK = RiskSummary(
    level=RiskLevel.ON_TRACK,
    headline="All milestones are on track",
    detail="SLA clocks are healthy and no proactive outreach is required right now."
)

AT_RISK = RiskSummary(
    level=RiskLevel.AT_RISK,
    headline="Critical SLA risk detected",
    detail="Immediate attention is needed to protect this referral before SLAs are breached."
)

WATCH = RiskSummary(
    level=RiskLevel.WATCH,
    headline="Important follow-ups recommended",
    detail="Address the recommended actions soon to keep the borrower journey on track."
)

MINOR_OPTIMIZATIONS = RiskSummary(
    level=RiskLevel.ON_TRACK,
    headline="Minor optimizations available",
    detail="Consider the suggested touchpoints to keep momentum with the borrower."
)


def summarize_risk(recommendations: Iterable[Recommendation]) -> RiskSummary:
    """
    Reduce recommendations to a risk summary.

    Empty -> on_track; any urgent -> at_risk; any high -> watch;
    otherwise on_track with a minor-optimizations message.
    """
    priorities = {item.priority for item in recommendations}

    if not priorities:
        return ON_TRACK
    if RecommendationPriority.URGENT in priorities:
        return AT_RISK
    if RecommendationPriority.HIGH in priorities:
        return WATCH
    return MINOR_OPTIMIZATIONS
