"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="referral-sla-engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Business Calendar ==========
    business_timezone: str = Field(
        default="America/Denver",
        description="IANA timezone the business calendar is pinned to"
    )
    business_start_hour: int = Field(
        default=8,
        description="Hour the daily business window opens",
        ge=0,
        le=23
    )
    business_end_hour: int = Field(
        default=17,
        description="Hour the daily business window closes",
        ge=1,
        le=24
    )

    # ========== SLA Thresholds ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to SLA threshold YAML file"
    )
    watch_sla_config: bool = Field(
        default=False,
        description="Hot-reload the SLA threshold file on change"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("business_timezone")
    @classmethod
    def validate_business_timezone(cls, v: str) -> str:
        """Ensure the timezone resolves to a tz database entry."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown business_timezone: {v}") from e
        return v

    @field_validator("business_end_hour")
    @classmethod
    def validate_business_window(cls, v: int, info) -> int:
        """Ensure the business window closes after it opens."""
        start = info.data.get("business_start_hour")
        if start is not None and v <= start:
            raise ValueError("business_end_hour must be after business_start_hour")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== Constants ==========

class CaseStatus(str):
    """Referral pipeline statuses, in pipeline order."""
    NEW_LEAD = "New Lead"
    PAIRED = "Paired"
    IN_COMMUNICATION = "In Communication"
    SHOWING_HOMES = "Showing Homes"
    UNDER_CONTRACT = "Under Contract"
    PAST_INSPECTION = "Past Inspection"
    PAST_APPRAISAL = "Past Appraisal"
    CLEAR_TO_CLOSE = "Clear to Close"
    CLOSED = "Closed"
    PAYMENT_SENT = "Payment Sent"
    TERMINATED = "Terminated"
    LOST = "Lost"


class DealStatus(str):
    """Deal lifecycle statuses, in lifecycle order."""
    UNDER_CONTRACT = "under_contract"
    PAST_INSPECTION = "past_inspection"
    PAST_APPRAISAL = "past_appraisal"
    CLEAR_TO_CLOSE = "clear_to_close"
    CLOSED = "closed"
    PAYMENT_SENT = "payment_sent"
    PAID = "paid"
    TERMINATED = "terminated"


class Origin(str):
    """Workflow variant that created the referral."""
    AGENT = "agent"     # Self-originated, no receiving-side handoff
    MC = "mc"
    ADMIN = "admin"


class RecommendationPriority(str):
    """Recommendation priority levels."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationCategory(str):
    """Recommendation categories."""
    ASSIGNMENT = "assignment"
    COMMUNICATION = "communication"
    PIPELINE = "pipeline"
    FINANCE = "finance"
    OPS = "ops"


class RiskLevel(str):
    """Aggregate risk levels."""
    ON_TRACK = "on_track"
    WATCH = "watch"
    AT_RISK = "at_risk"


# ========== Lists for validation ==========

VALID_CASE_STATUSES = [
    CaseStatus.NEW_LEAD, CaseStatus.PAIRED, CaseStatus.IN_COMMUNICATION,
    CaseStatus.SHOWING_HOMES, CaseStatus.UNDER_CONTRACT,
    CaseStatus.PAST_INSPECTION, CaseStatus.PAST_APPRAISAL,
    CaseStatus.CLEAR_TO_CLOSE, CaseStatus.CLOSED, CaseStatus.PAYMENT_SENT,
    CaseStatus.TERMINATED, CaseStatus.LOST
]
VALID_DEAL_STATUSES = [
    DealStatus.UNDER_CONTRACT, DealStatus.PAST_INSPECTION,
    DealStatus.PAST_APPRAISAL, DealStatus.CLEAR_TO_CLOSE, DealStatus.CLOSED,
    DealStatus.PAYMENT_SENT, DealStatus.PAID, DealStatus.TERMINATED
]
# Ordered most to least pressing
VALID_PRIORITIES = [
    RecommendationPriority.URGENT, RecommendationPriority.HIGH,
    RecommendationPriority.MEDIUM, RecommendationPriority.LOW
]


# ========== Status groupings ==========

# Statuses before any contract exists; deal milestones are stale here
PRE_CONTRACT_STATUSES = frozenset({
    CaseStatus.NEW_LEAD, CaseStatus.PAIRED,
    CaseStatus.IN_COMMUNICATION, CaseStatus.SHOWING_HOMES
})

CONTRACTING_STATUSES = frozenset({
    CaseStatus.UNDER_CONTRACT, CaseStatus.PAST_INSPECTION,
    CaseStatus.PAST_APPRAISAL, CaseStatus.CLEAR_TO_CLOSE,
    CaseStatus.CLOSED, CaseStatus.PAYMENT_SENT
})

# Deal statuses that prove a contract was reached
POST_CONTRACT_DEAL_STATUSES = frozenset({
    DealStatus.UNDER_CONTRACT, DealStatus.PAST_INSPECTION,
    DealStatus.PAST_APPRAISAL, DealStatus.CLEAR_TO_CLOSE,
    DealStatus.CLOSED, DealStatus.PAYMENT_SENT, DealStatus.PAID
})

CLOSED_DEAL_STATUSES = frozenset({
    DealStatus.CLOSED, DealStatus.PAYMENT_SENT, DealStatus.PAID
})
