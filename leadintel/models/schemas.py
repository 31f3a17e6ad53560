"""
Pydantic request/response models for the Lead Intelligence backend.

This module holds the structured-output contract returned by the analysis
endpoint (AnalysisResult and its three sections), the profile/quota record,
the client-local history item, and the small request/response bodies of the
HTTP surface.

Field names use camelCase so the JSON produced by the generative model, the
HTTP responses and the stored history blob all share one shape.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, ClassVar, List, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    model_validator,
)

from leadintel.models.enums import ErrorKind, Tier1Status, Tier2Status, UserRole


# =============================================================================
# Structured-output contract
# =============================================================================


class _TierSignals(BaseModel):
    """
    Common checks of a signal tier: a status, the extracted items and a flag.

    `hasSignals` must agree with `items`, and `status` must agree with
    `hasSignals`. Results that disagree are rejected, never repaired.
    """
    model_config = ConfigDict(frozen=True)

    # Status value used when the tier carries at least one signal.
    SIGNAL_STATUS: ClassVar[str] = ""

    @model_validator(mode="after")
    def _check_signal_flags(self) -> "_TierSignals":
        has_items = len(self.items) > 0
        if self.hasSignals != has_items:
            raise ValueError(
                f"hasSignals={self.hasSignals} contradicts {len(self.items)} item(s)"
            )
        if (self.status == self.SIGNAL_STATUS) != self.hasSignals:
            raise ValueError(
                f"status '{self.status.value}' contradicts hasSignals={self.hasSignals}"
            )
        return self


class Tier1Signals(_TierSignals):
    """Immediate executive search triggers (last 12 months)."""
    SIGNAL_STATUS: ClassVar[str] = Tier1Status.URGENT.value

    status: Tier1Status = Field(
        ...,
        description="'Urgent/High-Priority' or 'No relevant signals identified'"
    )
    items: List[StrictStr] = Field(
        ...,
        description="Ordered free-text trigger descriptions, empty when no signal"
    )
    hasSignals: StrictBool = Field(..., description="True iff items is non-empty")


class Tier2Signals(_TierSignals):
    """Strategic growth and future-role signals (last 12 months)."""
    SIGNAL_STATUS: ClassVar[str] = Tier2Status.FUTURE_OPPORTUNITY.value

    status: Tier2Status = Field(
        ...,
        description="'Future Opportunity' or 'No relevant signals identified'"
    )
    items: List[StrictStr] = Field(
        ...,
        description="Ordered free-text opportunity descriptions, empty when no signal"
    )
    hasSignals: StrictBool = Field(..., description="True iff items is non-empty")


class Insight(BaseModel):
    """Synthesized single-paragraph pitch angle."""
    model_config = ConfigDict(frozen=True)

    content: StrictStr = Field(
        ...,
        description="Pitch angle, or an 'insufficient data' filler message"
    )
    hasSignals: StrictBool = Field(
        ...,
        description="Whether content is a meaningful pitch rather than filler"
    )

    @model_validator(mode="after")
    def _check_content(self) -> "Insight":
        if self.hasSignals and not self.content.strip():
            raise ValueError("insight.hasSignals is true but content is empty")
        return self


class AnalysisResult(BaseModel):
    """
    Three-part intelligence report produced once per successful analysis.

    Immutable after construction. Every section is required and every
    sub-field within a section is required.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "tier1": {
                    "status": "Urgent/High-Priority",
                    "items": ["CFO departed in March; external search underway"],
                    "hasSignals": True,
                },
                "tier2": {
                    "status": "No relevant signals identified",
                    "items": [],
                    "hasSignals": False,
                },
                "insight": {
                    "content": "Acme needs a permanent CFO to steady investor confidence.",
                    "hasSignals": True,
                },
            }
        }
    )

    tier1: Tier1Signals
    tier2: Tier2Signals
    insight: Insight


# =============================================================================
# Quota / profile models
# =============================================================================


class QuotaRecord(BaseModel):
    """
    Per-principal usage ledger row from the `profiles` table.

    Admission condition for a new analysis: usageCount < usageLimit.
    """
    model_config = ConfigDict(frozen=True)

    userId: str = Field(..., min_length=1, description="Stable principal identifier")
    usageCount: int = Field(..., ge=0, description="Analyses consumed so far")
    usageLimit: int = Field(..., gt=0, description="Administratively set allowance")
    role: UserRole = Field(default=UserRole.USER)
    email: Optional[str] = Field(default=None)

    @property
    def remaining(self) -> int:
        return max(self.usageLimit - self.usageCount, 0)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "QuotaRecord":
        """Build a QuotaRecord from an asyncpg row of the profiles table."""
        return cls(
            userId=str(record["id"]),
            usageCount=record["usage_count"],
            usageLimit=record["usage_limit"],
            role=record.get("role") or UserRole.USER,
            email=record.get("email"),
        )


class QuotaSummary(BaseModel):
    """Response body of GET /me/quota."""
    usageCount: int
    usageLimit: int
    remaining: int
    role: UserRole


class SetLimitRequest(BaseModel):
    """Request body of PUT /admin/profiles/{user_id}/limit."""
    usageLimit: int = Field(..., gt=0, description="New allowance, must be positive")


class ProfileListResponse(BaseModel):
    """Response body of GET /admin/profiles."""
    profiles: List[QuotaRecord]
    totalUsers: int
    totalUsage: int


# =============================================================================
# HTTP request / response bodies
# =============================================================================


class AnalyzeRequest(BaseModel):
    """
    Request body of POST /analyze.

    `text` is optional at the schema level so that missing or blank text is
    reported through the invalid_input error kind instead of a 422.
    """
    text: Optional[str] = Field(
        default=None,
        description="Merged company content to analyze"
    )


class HealthResponse(BaseModel):
    """Response body of GET /analyze (health check)."""
    status: str = "online"
    timestamp: datetime
    model: str


class ErrorResponse(BaseModel):
    """Body of every failure response."""
    error: str
    kind: ErrorKind


# =============================================================================
# Client-local history
# =============================================================================


class HistoryItem(BaseModel):
    """
    One stored analysis session on the caller side.

    `id` is a caller-generated session id; `timestamp` is epoch milliseconds.
    """
    model_config = ConfigDict(frozen=True)

    id: StrictStr
    timestamp: StrictInt
    text: StrictStr
    result: AnalysisResult
