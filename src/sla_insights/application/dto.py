"""
SLA Insights Application DTOs
==============================

Data Transfer Objects for the SLA insights engine boundary.

These Pydantic models handle parsing of referral snapshots handed over by
the surrounding system and serialization of the engine's outputs.
Snapshot parsing is tolerant: unparseable timestamps become None instead
of failing the whole snapshot.
"""

from datetime import date, datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from config import CaseStatus, Origin
from sla_insights.domain import (
    AuditEntry,
    Deal,
    KnownDuration,
    Note,
    PendingWithHistory,
    Recommendation,
    ReferralCase,
    SlaCarryForward,
    SlaDuration,
    SlaInsights,
)


# ========== Type Aliases for Literals ==========
PriorityStr = Literal["urgent", "high", "medium", "low"]
CategoryStr = Literal["assignment", "communication", "pipeline", "finance", "ops"]
RiskLevelStr = Literal["on_track", "watch", "at_risk"]
DurationStateStr = Literal["known", "pending_with_history", "pending"]

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp leniently.

    Returns None for missing or unparseable values; never raises.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, (str, int, float)):
        return None
    try:
        return _DATETIME.validate_python(value)
    except ValidationError:
        return None


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


# ========== Snapshot DTOs ==========

class AuditEntryDTO(BaseModel):
    """One audit log entry of a referral."""
    field: str = Field(default="", description="Changed field name")
    new_value: Optional[str] = Field(None, description="Value after the change")
    timestamp: Optional[datetime] = Field(None, description="When the change happened")

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("field", mode="before")
    @classmethod
    def validate_field(cls, v: Any) -> str:
        return _as_optional_str(v) or ""

    @field_validator("new_value", mode="before")
    @classmethod
    def validate_new_value(cls, v: Any) -> Optional[str]:
        return _as_optional_str(v)


class DealDTO(BaseModel):
    """One deal (payment record) attached to a referral."""
    status: Optional[str] = Field(None, description="Deal lifecycle status")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = Field(None, description="When the referral fee was received")

    @field_validator("created_at", "updated_at", "paid_at", mode="before")
    @classmethod
    def validate_timestamps(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Optional[str]:
        return _as_optional_str(v)


class NoteDTO(BaseModel):
    """A note on a referral; only its timestamp matters here."""
    created_at: Optional[datetime] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)


class CarryForwardDTO(BaseModel):
    """Stored minute values retained across a deal reset."""
    contract_to_close_minutes: Optional[int] = None
    closed_to_paid_minutes: Optional[int] = None
    previous_contract_to_close_minutes: Optional[int] = None
    previous_closed_to_paid_minutes: Optional[int] = None


class CaseSnapshotDTO(BaseModel):
    """Referral snapshot handed to the engine."""
    id: str = Field(..., min_length=1, description="Referral ID")
    created_at: Optional[datetime] = Field(None, description="Referral creation timestamp")
    status: str = Field(default=CaseStatus.NEW_LEAD, description="Pipeline status")
    status_last_updated: Optional[datetime] = Field(None, description="Last status change")
    origin: str = Field(default=Origin.MC, description="Workflow variant that created the referral")
    has_assigned_agent: bool = Field(default=False, description="Partner agent assigned")
    has_lender: bool = Field(default=False, description="Mortgage consultant assigned")
    days_in_status: Optional[int] = Field(None, ge=0, description="Stored status age override")
    notes: List[NoteDTO] = Field(default_factory=list)
    deals: List[DealDTO] = Field(default_factory=list)
    audit: List[AuditEntryDTO] = Field(default_factory=list)
    sla: Optional[CarryForwardDTO] = Field(None, description="Stored carry-forward values")

    @field_validator("created_at", "status_last_updated", mode="before")
    @classmethod
    def validate_timestamps(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> str:
        return _as_optional_str(v) or CaseStatus.NEW_LEAD

    @field_validator("origin", mode="before")
    @classmethod
    def validate_origin(cls, v: Any) -> str:
        return _as_optional_str(v) or Origin.MC

    def to_domain(self, fallback_created_at: Optional[datetime] = None) -> ReferralCase:
        """
        Convert to a domain ReferralCase.

        Args:
            fallback_created_at: Creation instant to use when the snapshot has
                none (defaults to the current time)
        """
        created_at = self.created_at or fallback_created_at or datetime.now(timezone.utc)
        carry_forward = SlaCarryForward(**self.sla.model_dump()) if self.sla else SlaCarryForward()

        return ReferralCase(
            id=self.id,
            created_at=created_at,
            status=self.status,
            origin=self.origin,
            status_last_updated=self.status_last_updated,
            has_assigned_agent=self.has_assigned_agent,
            has_lender=self.has_lender,
            notes=tuple(Note(created_at=note.created_at) for note in self.notes),
            deals=tuple(
                Deal(
                    status=deal.status,
                    created_at=deal.created_at,
                    updated_at=deal.updated_at,
                    paid_at=deal.paid_at
                )
                for deal in self.deals
            ),
            audit=tuple(
                AuditEntry(field=entry.field, new_value=entry.new_value, timestamp=entry.timestamp)
                for entry in self.audit
            ),
            carry_forward=carry_forward,
            days_in_status=self.days_in_status
        )


# ========== Response DTOs ==========

class DurationResponse(BaseModel):
    """One milestone duration for the case detail view."""
    key: str
    label: str
    minutes: Optional[int] = Field(None, description="Business minutes; null while pending")
    formatted: str
    state: DurationStateStr
    previous_minutes: Optional[int] = Field(None, description="Carry-forward value shown as history")

    @classmethod
    def from_domain(cls, duration: SlaDuration) -> "DurationResponse":
        value = duration.value
        if isinstance(value, KnownDuration):
            state, previous = "known", None
        elif isinstance(value, PendingWithHistory):
            state, previous = "pending_with_history", value.previous_minutes
        else:
            state, previous = "pending", None

        return cls(
            key=duration.key,
            label=duration.label,
            minutes=duration.minutes,
            formatted=duration.formatted,
            state=state,
            previous_minutes=previous
        )


class RecommendationResponse(BaseModel):
    """One outreach recommendation for the operator task list."""
    id: str
    title: str
    message: str
    priority: PriorityStr
    category: CategoryStr
    due_at: Optional[datetime] = None
    supporting_metric: Optional[str] = None

    @classmethod
    def from_domain(cls, recommendation: Recommendation) -> "RecommendationResponse":
        return cls(
            id=recommendation.id,
            title=recommendation.title,
            message=recommendation.message,
            priority=recommendation.priority,
            category=recommendation.category,
            due_at=recommendation.due_at,
            supporting_metric=recommendation.supporting_metric
        )


class RiskSummaryResponse(BaseModel):
    """Aggregate risk badge."""
    level: RiskLevelStr
    headline: str
    detail: str


class SlaInsightsResponse(BaseModel):
    """Everything one evaluation returns for a referral."""
    case_id: str
    evaluated_at: datetime
    durations: List[DurationResponse] = Field(default_factory=list)
    recommendations: List[RecommendationResponse] = Field(default_factory=list)
    risk_summary: RiskSummaryResponse

    @classmethod
    def from_domain(cls, insights: SlaInsights) -> "SlaInsightsResponse":
        """Create from a domain SlaInsights."""
        return cls(
            case_id=insights.case_id,
            evaluated_at=insights.evaluated_at,
            durations=[DurationResponse.from_domain(item) for item in insights.durations],
            recommendations=[
                RecommendationResponse.from_domain(item) for item in insights.recommendations
            ],
            risk_summary=RiskSummaryResponse(
                level=insights.risk_summary.level,
                headline=insights.risk_summary.headline,
                detail=insights.risk_summary.detail
            )
        )
