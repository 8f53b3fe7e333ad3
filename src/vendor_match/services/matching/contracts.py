"""Typed dataclasses for match-engine I/O contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vendor_match.domain.enums import (
    FactorIcon,
    MatchConfidence,
    ScoreTier,
    Urgency,
    WarningSeverity,
)
from vendor_match.services.performance_scorer import ScoreResult, VendorMetrics


@dataclass(frozen=True)
class MatchingContext:
    """Everything about one service request that the scorers look at."""
    request_id: str
    service_type: str
    urgency: Urgency = Urgency.MEDIUM
    zip_code: Optional[str] = None
    property_location: str = ""
    budget_range: Optional[str] = None
    service_details: Optional[dict[str, str]] = None

    @property
    def is_emergency(self) -> bool:
        return self.urgency is Urgency.EMERGENCY

    @property
    def is_urgent(self) -> bool:
        return self.urgency in (Urgency.HIGH, Urgency.EMERGENCY)


@dataclass(frozen=True)
class ServiceHours:
    weekdays: bool = True
    weekends: bool = False
    is_24_7: bool = False


@dataclass(frozen=True)
class VendorMatchData:
    """Vendor record enriched with history and workload for one scoring pass."""
    vendor_id: str
    business_name: str = ""
    services: tuple[str, ...] = ()
    service_areas: tuple[str, ...] = ()
    metrics: Optional[VendorMetrics] = None
    pending_jobs_count: Optional[int] = 0
    avg_response_time_hours: Optional[float] = None
    emergency_services: bool = False
    service_hours: ServiceHours = field(default_factory=ServiceHours)
    service_specialties: Optional[dict[str, list[str]]] = None
    job_size_ranges: tuple[str, ...] = ()

    def metrics_or_empty(self) -> VendorMetrics:
        return self.metrics if self.metrics is not None else VendorMetrics(vendor_id=self.vendor_id)


@dataclass(frozen=True)
class MatchFactor:
    name: str
    score: float  # 0-100
    weight: float  # 0-1
    reason: str
    icon: FactorIcon = FactorIcon.INFO
    has_data: bool = True  # False when the score is a neutral default

    @property
    def weighted(self) -> float:
        return self.score * self.weight


@dataclass(frozen=True)
class MatchWarning:
    message: str
    severity: WarningSeverity
    factor: str


@dataclass(frozen=True)
class FactorResult:
    """A factor plus whatever warnings it raised."""
    factor: MatchFactor
    warnings: tuple[MatchWarning, ...] = ()


@dataclass
class MatchScore:
    vendor_id: str
    total_score: int
    confidence: MatchConfidence
    factors: list[MatchFactor]
    warnings: list[MatchWarning]
    recommended: bool
    performance: ScoreResult
    tier: ScoreTier
    rank: Optional[int] = None

    @property
    def has_high_severity_warning(self) -> bool:
        return any(w.severity is WarningSeverity.HIGH for w in self.warnings)


@dataclass
class VendorWithMatchScore:
    vendor: VendorMatchData
    match_score: MatchScore


@dataclass(frozen=True)
class SuggestionsMeta:
    total_eligible: int = 0
    total_recommended: int = 0
    average_score: int = 0
    scoring_version: str = ""


@dataclass
class SuggestionsResult:
    suggestions: list[VendorWithMatchScore] = field(default_factory=list)
    other_vendors: list[VendorWithMatchScore] = field(default_factory=list)
    meta: SuggestionsMeta = field(default_factory=SuggestionsMeta)
