"""
SLA Insights Module
===================

Bounded Context for referral SLA durations and outreach recommendations.

Responsibilities:
- Measure milestone durations in business minutes (Mountain Time, 8-17,
  weekdays, US federal holidays excluded)
- Resolve milestone instants from audit history and deal records
- Recommend outreach actions per workflow variant
- Summarize the referral's aggregate SLA risk
- Hot-reload SLA thresholds from YAML via watchdog
"""

__version__ = "1.0.0"
