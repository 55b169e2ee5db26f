"""
SLA Insights Application Layer
===============================

Application layer for the SLA insights module.

Contains:
- Services: Orchestrate the domain services for one evaluation
- DTOs: Snapshot parsing and output serialization

This layer depends on the domain layer and provider interfaces,
but not on concrete infrastructure implementations.
"""

from sla_insights.application.dto import (
    AuditEntryDTO,
    CarryForwardDTO,
    CaseSnapshotDTO,
    DealDTO,
    DurationResponse,
    NoteDTO,
    RecommendationResponse,
    RiskSummaryResponse,
    SlaInsightsResponse,
    parse_timestamp,
)
from sla_insights.application.services import (
    ISLAConfigProvider,
    SLAInsightsService,
    StaticConfigProvider,
)

__all__ = [
    # DTOs
    "AuditEntryDTO",
    "CarryForwardDTO",
    "CaseSnapshotDTO",
    "DealDTO",
    "DurationResponse",
    "NoteDTO",
    "RecommendationResponse",
    "RiskSummaryResponse",
    "SlaInsightsResponse",
    "parse_timestamp",
    # Services
    "SLAInsightsService",
    # Provider Interfaces
    "ISLAConfigProvider",
    "StaticConfigProvider",
]
