"""
Referral SLA Engine - Runtime Wiring
=====================================

Business-time SLA durations and outreach recommendations for real estate
referrals.

Modules:
- SLA Insights: Milestone durations, recommendations and risk summary

Clean Architecture Layers:
- Application: Services and DTOs
- Domain: Calendar, business time, milestone resolution, rule sets
- Infrastructure: YAML threshold file with hot reload

Usage:
    from main import engine_lifespan

    with engine_lifespan() as service:
        insights = service.compute_insights_for_snapshot(snapshot)
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from config import Settings, get_settings
from shared.infrastructure.logging import get_logger, setup_logging
from sla_insights.application import SLAInsightsService
from sla_insights.infrastructure import SLAConfigManager

logger = get_logger(__name__)


@contextmanager
def engine_lifespan(settings: Optional[Settings] = None) -> Iterator[SLAInsightsService]:
    """
    Engine lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load SLA thresholds
    3. Build the insights service
    4. Start watching the threshold file (when enabled)

    SHUTDOWN:
    1. Stop the threshold file watcher
    """
    settings = settings or get_settings()

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting SLA insights engine", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "business_timezone": settings.business_timezone
    })

    logger.info("Loading SLA thresholds")
    config_manager = SLAConfigManager()
    config_manager.load(settings.sla_config_path)
    service = SLAInsightsService.from_settings(settings, config_manager)

    try:
        if settings.watch_sla_config:
            config_manager.start_watching()
        logger.info("SLA insights engine started")
        yield service
    finally:
        # === SHUTDOWN ===
        logger.info("Shutting down SLA insights engine")
        config_manager.stop_watching()
        logger.info("SLA insights engine shutdown complete")
