"""
SLA Insights Application Services
==================================

Application services orchestrate the domain services for one referral
evaluation: durations, then recommendations, then the risk summary.

Following SOLID principles:
- Single Responsibility: Each domain service has one clear purpose
- Dependency Inversion: Thresholds come from a provider abstraction
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from config import Settings
from sla_insights.application.dto import CaseSnapshotDTO, SlaInsightsResponse
from sla_insights.domain import (
    BusinessCalendar,
    BusinessDurationCalculator,
    MilestoneTimestampResolver,
    Recommendation,
    RecommendationEngine,
    ReferralCase,
    RiskSummary,
    SLAThresholds,
    SlaDuration,
    SlaInsights,
    build_duration_series,
    summarize_risk,
)
from sla_insights.domain.value_objects import as_utc
from shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Provider Interfaces (Dependency Inversion) ==========

class ISLAConfigProvider(ABC):
    """Interface for SLA threshold access."""

    @abstractmethod
    def get_config(self) -> SLAThresholds:
        """Get current SLA thresholds."""


class StaticConfigProvider(ISLAConfigProvider):
    """Provider returning a fixed set of thresholds."""

    def __init__(self, thresholds: Optional[SLAThresholds] = None):
        self._thresholds = thresholds or SLAThresholds()

    def get_config(self) -> SLAThresholds:
        return self._thresholds


# ========== Application Services ==========

class SLAInsightsService:
    """
    Service computing SLA insights for referral snapshots.

    Pure and synchronous: no I/O, no shared mutable state besides the
    holiday cache, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        config_provider: Optional[ISLAConfigProvider] = None,
        calculator: Optional[BusinessDurationCalculator] = None
    ):
        self._config_provider = config_provider or StaticConfigProvider()
        self._calculator = calculator or BusinessDurationCalculator(BusinessCalendar())

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        config_provider: Optional[ISLAConfigProvider] = None
    ) -> "SLAInsightsService":
        """Build a service with the business window from settings."""
        calendar = BusinessCalendar(settings.business_timezone)
        calculator = BusinessDurationCalculator(
            calendar,
            start_hour=settings.business_start_hour,
            end_hour=settings.business_end_hour
        )
        return cls(config_provider, calculator)

    @property
    def calculator(self) -> BusinessDurationCalculator:
        return self._calculator

    def compute_durations(self, case: ReferralCase) -> List[SlaDuration]:
        """Ordered milestone durations for a referral."""
        return build_duration_series(case, self._calculator)

    def compute_recommendations(
        self,
        case: ReferralCase,
        now: Optional[datetime] = None,
        durations: Optional[Iterable[SlaDuration]] = None
    ) -> List[Recommendation]:
        """Sorted, de-duplicated recommendations for a referral."""
        now = as_utc(now) or datetime.now(timezone.utc)
        if durations is None:
            durations = self.compute_durations(case)

        engine = RecommendationEngine(self._config_provider.get_config())
        resolver = MilestoneTimestampResolver(case)
        return engine.evaluate(case, durations, now, resolver.latest_note_at())

    def compute_risk_summary(self, recommendations: Iterable[Recommendation]) -> RiskSummary:
        """Aggregate risk rating for a recommendation list."""
        return summarize_risk(recommendations)

    def compute_insights(
        self,
        case: ReferralCase,
        now: Optional[datetime] = None
    ) -> SlaInsights:
        """
        Compute durations, recommendations and risk summary for a referral.

        Args:
            case: Referral snapshot
            now: Evaluation instant (defaults to the current time)

        Returns:
            SlaInsights for the referral
        """
        now = as_utc(now) or datetime.now(timezone.utc)

        with log_latency(logger, "compute_insights", case_id=case.id):
            durations = self.compute_durations(case)
            recommendations = self.compute_recommendations(case, now, durations)
            risk_summary = self.compute_risk_summary(recommendations)

        logger.debug(
            "SLA insights computed",
            extra={
                "case_id": case.id,
                "status": case.status,
                "origin": case.origin,
                "pending_durations": sum(1 for item in durations if item.minutes is None),
                "recommendation_count": len(recommendations),
                "risk_level": risk_summary.level
            }
        )

        return SlaInsights(
            case_id=case.id,
            evaluated_at=now,
            durations=tuple(durations),
            recommendations=tuple(recommendations),
            risk_summary=risk_summary
        )

    def compute_insights_for_snapshot(
        self,
        snapshot: CaseSnapshotDTO,
        now: Optional[datetime] = None
    ) -> SlaInsightsResponse:
        """
        Compute insights for a parsed snapshot and serialize them.

        A snapshot without a creation timestamp is treated as created at `now`.
        """
        now = as_utc(now) or datetime.now(timezone.utc)
        if snapshot.created_at is None:
            logger.warning(
                "Referral snapshot has no creation timestamp",
                extra={"case_id": snapshot.id}
            )
        case = snapshot.to_domain(fallback_created_at=now)
        return SlaInsightsResponse.from_domain(self.compute_insights(case, now))

    def compute_insights_for_cases(
        self,
        cases: Iterable[ReferralCase],
        now: Optional[datetime] = None
    ) -> Dict[str, SlaInsights]:
        """
        Compute insights for several referrals against the same instant.

        Returns:
            Dict mapping case id to SlaInsights
        """
        now = as_utc(now) or datetime.now(timezone.utc)
        return {case.id: self.compute_insights(case, now) for case in cases}
