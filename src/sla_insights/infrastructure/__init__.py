"""
SLA Insights Infrastructure Layer
==================================

Infrastructure implementations for SLA insights:
- External: YAML threshold loading with watchdog hot reload
"""

from sla_insights.infrastructure.external import ConfigFileHandler, SLAConfigManager

__all__ = [
    "ConfigFileHandler",
    "SLAConfigManager",
]
