"""Pydantic v2 schemas for API responses.

Suggestion and score payloads are consumed by the admin UI, which expects
camelCase keys; the models accept either spelling and emit camelCase.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class RequestSummary(BaseModel):
    """The request being matched, echoed back with its original field names."""

    id: str
    service_type: str
    property_location: str | None = None
    zip_code: str | None = None
    urgency: str


class MatchFactorOut(CamelModel):
    name: str
    score: float = Field(ge=0, le=100)
    weight: float = Field(ge=0, le=1)
    weighted: float
    reason: str
    icon: str
    has_data: bool


class MatchWarningOut(CamelModel):
    message: str
    severity: str
    factor: str


class PerformanceSummaryOut(CamelModel):
    score: int = Field(ge=0, le=100)
    tier: str
    tier_label: str
    review_count: int
    confidence: float


class MatchScoreOut(CamelModel):
    vendor_id: str
    total_score: int = Field(ge=0, le=100)
    confidence: str
    factors: list[MatchFactorOut]
    warnings: list[MatchWarningOut]
    recommended: bool
    rank: int | None = None
    tier: str
    performance: PerformanceSummaryOut


class SuggestedVendorOut(CamelModel):
    id: str
    business_name: str
    services: list[str]
    service_areas: list[str]
    pending_jobs_count: int | None = None
    avg_response_time_hours: float | None = None
    emergency_services: bool
    match_score: MatchScoreOut


class SuggestionsMetaOut(CamelModel):
    total_eligible: int
    total_recommended: int
    average_score: int
    scoring_version: str


class SuggestionsResponse(CamelModel):
    request: RequestSummary
    suggestions: list[SuggestedVendorOut]
    other_vendors: list[SuggestedVendorOut]
    meta: SuggestionsMetaOut


# ---------------------------------------------------------------------------
# Admin scores
# ---------------------------------------------------------------------------


class ScoreBreakdownOut(CamelModel):
    review_score: float
    completion_score: float
    acceptance_score: float
    volume_bonus: float
    recency_bonus: float
    penalties: float
    weighted_sum: float
    dampened_score: float
    raw_score: float
    review_count: int
    confidence: float
    vetting_score: float | None = None
    avg_response_time_hours: float | None = None


class VendorScoreOut(CamelModel):
    vendor_id: str
    business_name: str
    score: int = Field(ge=0, le=100)
    tier: str
    tier_label: str
    breakdown: ScoreBreakdownOut
    calculated_at: datetime | None = None


class ScoresSummaryOut(CamelModel):
    total: int
    with_reviews: int
    average_score: int
    tier_distribution: dict[str, int]


class AdminScoresResponse(CamelModel):
    vendors: list[VendorScoreOut]
    summary: ScoresSummaryOut


class VettingScoreOut(CamelModel):
    vendor_id: str
    licensed_points: int
    insured_points: int
    years_points: int
    admin_adjustment: float
    total_score: float = Field(ge=0, le=45)
    tier: str
    tier_label: str
    display: str
