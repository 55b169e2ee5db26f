"""
SLA Insights Value Objects
===========================

Immutable value objects for the SLA insights domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import DomainException


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an instant to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_minutes(minutes: int) -> str:
    """
    Render a minute count compactly.

    Example:
        45 -> "45m", 120 -> "2h", 135 -> "2h 15m"
    """
    hours, remaining = divmod(minutes, 60)
    if hours == 0:
        return f"{remaining}m"
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}m"


# ========== Duration variants ==========

@dataclass(frozen=True)
class KnownDuration:
    """A milestone interval that has been reached."""
    minutes: int

    def __post_init__(self):
        if self.minutes < 0:
            raise DomainException(
                "Known durations cannot be negative",
                {"minutes": self.minutes}
            )

    @property
    def formatted(self) -> str:
        return format_minutes(self.minutes)


@dataclass(frozen=True)
class PendingWithHistory:
    """Not reached in the current cycle; a prior cycle produced a value."""
    previous_minutes: int

    @property
    def formatted(self) -> str:
        return f"Pending (prev {format_minutes(self.previous_minutes)})"


@dataclass(frozen=True)
class PendingNoHistory:
    """Not reached and nothing to show from earlier cycles."""

    @property
    def formatted(self) -> str:
        return "Pending"


DurationValue = Union[KnownDuration, PendingWithHistory, PendingNoHistory]


def duration_value(
    minutes: Optional[int],
    previous_minutes: Optional[int] = None
) -> DurationValue:
    """Pick the variant for a nullable minute count and optional history."""
    if minutes is not None:
        return KnownDuration(minutes)
    if previous_minutes is not None:
        return PendingWithHistory(previous_minutes)
    return PendingNoHistory()


# ========== Thresholds ==========

class SLAThresholds(BaseModel):
    """
    SLA thresholds loaded from YAML.

    Defaults are the production values; a YAML file only needs to list the
    keys it overrides. This is a value object - immutable once loaded.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    # Standard (mc/admin originated) workflow
    minutes_to_assignment: int = Field(
        default=120, ge=1, description="Agent assignment SLA from creation"
    )
    hours_to_first_conversation: int = Field(
        default=24, ge=1, description="Hours allowed in Paired before a conversation"
    )
    days_without_touch_point: int = Field(
        default=3, ge=1, description="Days in an active stage without movement"
    )
    days_to_under_contract: int = Field(
        default=14, ge=1, description="Days house-hunting before a contract"
    )
    days_to_close: int = Field(
        default=45, ge=1, description="Days under contract before closing"
    )
    days_to_payment_after_close: int = Field(
        default=10, ge=1, description="Days after closing before payment"
    )
    hours_without_note: int = Field(
        default=48, ge=1, description="Hours since the last logged note"
    )
    hours_to_termination_reason: int = Field(
        default=24, ge=1, description="Hours to document why a referral ended"
    )

    # Self-originated (agent) workflow
    hours_to_lender_assignment: int = Field(
        default=1, ge=1, description="Mortgage consultant assignment SLA"
    )
    hours_to_borrower_intro: int = Field(
        default=4, ge=1, description="Hours for the consultant to reach the borrower"
    )
    hours_in_communication_stall: int = Field(
        default=72, ge=1, description="Hours in communication before planning next steps"
    )
