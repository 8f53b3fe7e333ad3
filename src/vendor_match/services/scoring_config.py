"""Immutable scoring configuration.

Every weight, threshold and curve parameter used by the vetting, performance
and match scorers lives here as a tree of frozen pydantic models.  A
``ScoringConfig`` is validated once when it is built (weights must sum to
1.0, tier thresholds must descend, values must have the right types) and is
never mutated afterwards, so the scorers can share one instance across
concurrent requests.

Overrides can be supplied as a JSON file whose top-level keys mirror the
section names below, e.g.::

    {"performance_weights": {"review": 0.6, "completion": 0.1}}
"""

from __future__ import annotations

import json
import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-6

# Neutral score used whenever a component has no usable data
NEUTRAL = 50.0


class ScoringConfigError(ValueError):
    """Raised when a scoring configuration violates its invariants."""


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)


class _WeightTable(_Section):
    """A section whose fields are weights that must sum to 1.0."""

    @model_validator(mode="after")
    def check_weight_sum(self):
        values = list(self.model_dump().values())
        if any(v < 0 or not math.isfinite(v) for v in values):
            raise ValueError("contains a negative or non-finite weight")
        total = sum(values)
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"weights sum to {total:.6f}, expected 1.0")
        return self


# ── Performance score ────────────────────────────────────────────────────────

class PerformanceWeights(_WeightTable):
    """Contribution of each performance component (must sum to 1.0)."""

    review: float = 0.50
    completion: float = 0.20
    acceptance: float = 0.15
    volume: float = 0.10
    recency: float = 0.05


class ReviewConfig(_Section):
    min_reviews_for_full_weight: int = Field(default=5, ge=1)
    recency_decay_days: int = Field(default=180, gt=0)  # reviews older than this get the floor weight
    recency_min_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    one_star_threshold: float = 1.5  # effective ratings at or below count as 1-star


class CompletionConfig(_Section):
    min_jobs_for_rate: int = 3


class AcceptanceConfig(_Section):
    target_rate: float = Field(default=0.7, gt=0.0)  # some declines are expected from busy vendors
    min_matches_for_rate: int = 3


class VolumeConfig(_Section):
    max_bonus_jobs: int = Field(default=20, ge=1)


class RecencyConfig(_Section):
    full_bonus_days: int = 30
    zero_bonus_days: int = 180

    @model_validator(mode="after")
    def check_window(self):
        if self.zero_bonus_days <= self.full_bonus_days:
            raise ValueError("zero_bonus_days must exceed full_bonus_days")
        return self


class PenaltyConfig(_Section):
    no_show_penalty: float = 10.0
    max_no_show_penalty: float = 30.0
    decline_after_accept_penalty: float = 5.0
    max_decline_after_accept_penalty: float = 15.0
    one_star_penalty: float = 5.0


class ScoreBounds(_Section):
    min: float = 0.0
    max: float = 100.0
    default: float = NEUTRAL


class TierThresholds(_Section):
    """Lower bounds for each performance tier, checked in descending order."""

    excellent: float = 85.0
    good: float = 65.0
    average: float = 45.0
    below_average: float = 30.0


# ── Vetting score ────────────────────────────────────────────────────────────

class VettingConfig(_Section):
    licensed_points: int = 15
    insured_points: int = 10
    years_in_business_max: int = 10
    years_for_max_points: float = Field(default=5.0, gt=0.0)
    admin_adjustment_range: float = 10.0
    max_total_score: float = 45.0

    # Lower bounds of the vetting tiers on the 0-45 scale
    strong_tier: float = 35.0
    good_tier: float = 30.0
    acceptable_tier: float = 25.0
    conditional_tier: float = 15.0

    @model_validator(mode="after")
    def check_tiers(self):
        if not (
            self.max_total_score >= self.strong_tier > self.good_tier
            > self.acceptable_tier > self.conditional_tier >= 0
        ):
            raise ValueError("vetting tier thresholds must be strictly descending within [0, max_total_score]")
        return self


# ── Match score ──────────────────────────────────────────────────────────────

class MatchWeights(_WeightTable):
    """Contribution of each match factor (must sum to 1.0)."""

    service_match: float = 0.25
    location_match: float = 0.20
    performance: float = 0.15
    response_time: float = 0.10
    availability: float = 0.10
    specialty_match: float = 0.10
    capacity: float = 0.05
    price_fit: float = 0.05


# High / emergency requests lean on responsiveness at the expense of the
# long-run quality signal.
URGENT_MATCH_WEIGHTS = MatchWeights(
    service_match=0.25,
    location_match=0.20,
    performance=0.10,
    response_time=0.20,
    availability=0.10,
    specialty_match=0.05,
    capacity=0.05,
    price_fit=0.05,
)


class MatchThresholds(_Section):
    max_recommendations: int = 3
    high_confidence_data_ratio: float = 0.75
    medium_confidence_data_ratio: float = 0.5
    low_performance_warning: float = 30.0


class LocationMatchConfig(_Section):
    exact_zip_score: float = 100.0
    prefix4_score: float = 85.0
    prefix3_score: float = 70.0
    state_score: float = 40.0
    no_match_score: float = 0.0
    no_location_score: float = NEUTRAL
    no_areas_score: float = 40.0


class ResponseTimeMatchConfig(_Section):
    excellent_hours: float = 4.0
    excellent_score: float = 100.0
    good_hours: float = 12.0
    good_score: float = 75.0
    average_hours: float = 24.0
    average_score: float = 50.0
    poor_hours: float = 48.0
    poor_score: float = 25.0
    very_slow_score: float = 0.0
    no_data_score: float = NEUTRAL
    urgent_slow_warning_hours: float = 24.0


class CapacityConfig(_Section):
    # (max pending jobs, score) tiers; anything above the last bound is overloaded
    tiers: tuple[tuple[int, float], ...] = ((2, 100.0), (4, 70.0), (6, 40.0))
    overloaded_score: float = 20.0
    no_data_score: float = 60.0
    busy_warning_jobs: int = 5
    overloaded_warning_jobs: int = 7

    @model_validator(mode="after")
    def check_order(self):
        bounds = [b for b, _ in self.tiers]
        if bounds != sorted(bounds):
            raise ValueError("tiers must be ordered by pending-job bound")
        return self


class AvailabilityConfig(_Section):
    emergency_match_score: float = 100.0
    emergency_no_match_score: float = 20.0
    standard_score: float = 60.0
    full_availability_bonus: float = 20.0
    weekend_bonus: float = 15.0


class SpecialtyMatchConfig(_Section):
    has_specialty_score: float = 100.0
    no_specialty_required_score: float = 60.0
    missing_specialty_score: float = 30.0
    specialty_fields: tuple[str, ...] = (
        "Equipment Type",
        "Appliance Type",
        "Roof Type",
        "Service Needed",
        "Pest Type",
        "Issue Type",
    )


class PriceFitConfig(_Section):
    good_fit_score: float = 100.0
    partial_fit_score: float = 60.0
    poor_fit_score: float = 30.0
    no_data_score: float = 60.0


# ── Aggregate ────────────────────────────────────────────────────────────────

class ScoringConfig(_Section):
    """Every table the scorers need, validated on construction."""

    performance_weights: PerformanceWeights = Field(default_factory=PerformanceWeights)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    acceptance: AcceptanceConfig = Field(default_factory=AcceptanceConfig)
    volume: VolumeConfig = Field(default_factory=VolumeConfig)
    recency: RecencyConfig = Field(default_factory=RecencyConfig)
    penalties: PenaltyConfig = Field(default_factory=PenaltyConfig)
    bounds: ScoreBounds = Field(default_factory=ScoreBounds)
    tiers: TierThresholds = Field(default_factory=TierThresholds)
    vetting: VettingConfig = Field(default_factory=VettingConfig)
    match_weights: MatchWeights = Field(default_factory=MatchWeights)
    urgent_match_weights: MatchWeights = URGENT_MATCH_WEIGHTS
    match_thresholds: MatchThresholds = Field(default_factory=MatchThresholds)
    location: LocationMatchConfig = Field(default_factory=LocationMatchConfig)
    response_time: ResponseTimeMatchConfig = Field(default_factory=ResponseTimeMatchConfig)
    capacity: CapacityConfig = Field(default_factory=CapacityConfig)
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    specialty: SpecialtyMatchConfig = Field(default_factory=SpecialtyMatchConfig)
    price_fit: PriceFitConfig = Field(default_factory=PriceFitConfig)
    scoring_version: str = "1.0.0"

    @model_validator(mode="after")
    def check_tiers(self):
        t = self.tiers
        if not (t.excellent > t.good > t.average > t.below_average >= self.bounds.min):
            raise ValueError("tier thresholds must be strictly descending")
        return self

    def weights_for(self, urgent: bool) -> MatchWeights:
        return self.urgent_match_weights if urgent else self.match_weights


def weight_total(weights: _WeightTable) -> float:
    """Sum of every field of a weights table."""
    return sum(weights.model_dump().values())


# ── Loading ──────────────────────────────────────────────────────────────────

def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        path = ".".join(str(part) for part in ("scoring", *error["loc"]))
        if error["type"] == "extra_forbidden":
            problems.append(f"unknown scoring setting '{path}'")
        else:
            problems.append(f"{path}: {error['msg']}")
    return "; ".join(problems)


def config_from_mapping(overrides: dict[str, Any]) -> ScoringConfig:
    """Build a validated ``ScoringConfig`` from a (partial) override mapping.

    Overrides are merged section by section onto the defaults, so a partial
    ``urgent_match_weights`` keeps the urgent profile for every key it omits.
    """
    if not isinstance(overrides, dict):
        raise ScoringConfigError("scoring config must be an object")
    try:
        merged = json.dumps(_deep_merge(DEFAULT_SCORING_CONFIG.model_dump(), overrides))
    except (TypeError, ValueError) as exc:
        raise ScoringConfigError(f"scoring overrides are not JSON-compatible: {exc}") from exc

    # JSON mode: strict types, objects for sections, arrays for tuples
    try:
        return ScoringConfig.model_validate_json(merged)
    except ValidationError as exc:
        raise ScoringConfigError(_describe(exc)) from exc


def load_scoring_config(path: Optional[str | Path] = None) -> ScoringConfig:
    """Load the scoring configuration, applying a JSON override file if given.

    Raises ``ScoringConfigError`` when the file is unreadable or the merged
    configuration is invalid.
    """
    if not path:
        return DEFAULT_SCORING_CONFIG

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ScoringConfigError(f"cannot read scoring config {path}: {exc}") from exc

    config = config_from_mapping(raw)
    logger.info("Loaded scoring overrides from %s (version %s)", path, config.scoring_version)
    return config


DEFAULT_SCORING_CONFIG = ScoringConfig()


@lru_cache
def get_scoring_config() -> ScoringConfig:
    """Return the process-wide scoring configuration (built once)."""
    from vendor_match.app.config import get_settings

    settings = get_settings()
    config = load_scoring_config(settings.scoring_config_path or None)
    if settings.scoring_version and settings.scoring_version != config.scoring_version:
        config = config.model_copy(update={"scoring_version": settings.scoring_version})
    return config
