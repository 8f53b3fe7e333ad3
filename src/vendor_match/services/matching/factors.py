"""Individual match factors.

Pure-function module — NO database access, NO wall clock.

Each scorer looks at one aspect of a vendor/request pair and returns a
``FactorResult``: the 0-100 factor score, its weight, a short human reason
and any warnings the admin should see.  Scorers that had to fall back to a
neutral default mark the factor ``has_data=False`` so the engine can judge
how much real evidence backs the total.
"""

from __future__ import annotations

import math
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from vendor_match.domain.enums import FactorIcon, ScoreTier, WarningSeverity
from vendor_match.services.matching.contracts import (
    FactorResult,
    MatchFactor,
    MatchingContext,
    MatchWarning,
    VendorMatchData,
)
from vendor_match.services.matching.service_areas import (
    AreaMatchType,
    best_area_match,
    describe_area,
    parse_service_areas,
)
from vendor_match.services.performance_scorer import ScoreResult
from vendor_match.services.score_tiers import get_score_tier, tier_label
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

# ── Factor names ─────────────────────────────────────────────────────────────

SERVICE_MATCH = "Service Match"
LOCATION = "Location"
PERFORMANCE = "Performance"
RESPONSE_TIME = "Response Time"
AVAILABILITY = "Availability"
SPECIALTY = "Specialty"
CAPACITY = "Capacity"
PRICE_FIT = "Price Fit"

# Dollar ranges (min, max) for request budgets and vendor job sizes
BUDGET_RANGE_VALUES: Mapping[str, tuple[float, float]] = MappingProxyType(
    {
        "under_500": (0, 500),
        "500_1000": (500, 1000),
        "1000_2500": (1000, 2500),
        "2500_5000": (2500, 5000),
        "5000_10000": (5000, 10000),
        "10000_25000": (10000, 25000),
        "25000_50000": (25000, 50000),
        "50000_100000": (50000, 100000),
        "over_100000": (100000, math.inf),
    }
)

JOB_SIZE_VALUES: Mapping[str, tuple[float, float]] = MappingProxyType(
    {
        "under_500": (0, 500),
        "500_1k": (500, 1000),
        "1k_5k": (1000, 5000),
        "5k_10k": (5000, 10000),
        "10k_25k": (10000, 25000),
        "25k_plus": (25000, math.inf),
    }
)

_UNKNOWN_BUDGETS = frozenset({"", "not_sure"})


def _result(factor: MatchFactor, *warnings: MatchWarning) -> FactorResult:
    return FactorResult(factor=factor, warnings=tuple(warnings))


def _service_label(service_type: str) -> str:
    return service_type.replace("_", " ").strip().title() or "this service"


# ── Service ──────────────────────────────────────────────────────────────────

def score_service_match(
    vendor: VendorMatchData,
    context: MatchingContext,
    weight: float,
) -> FactorResult:
    if context.service_type in vendor.services:
        return _result(
            MatchFactor(
                SERVICE_MATCH, 100.0, weight,
                f"Offers {_service_label(context.service_type)}", FactorIcon.CHECK,
            )
        )

    return _result(
        MatchFactor(SERVICE_MATCH, 0.0, weight, "Does not offer this service", FactorIcon.WARNING),
        MatchWarning("Vendor does not offer this service type", WarningSeverity.HIGH, SERVICE_MATCH),
    )


# ── Location ─────────────────────────────────────────────────────────────────

def score_location(
    vendor: VendorMatchData,
    context: MatchingContext,
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    """Best overlap between the request zip and the vendor's service areas.

    Precedence is exact > 4-digit prefix > 3-digit prefix > state.
    """
    cfg = config.location
    zip_code = context.zip_code
    if not zip_code:
        return _result(
            MatchFactor(LOCATION, cfg.no_location_score, weight, "Location not specified", has_data=False)
        )

    areas = parse_service_areas(vendor.service_areas)
    if not areas:
        return _result(
            MatchFactor(LOCATION, cfg.no_areas_score, weight, "Service areas not specified", has_data=False)
        )

    match = best_area_match(zip_code, areas)
    if match.match_type is AreaMatchType.EXACT:
        return _result(
            MatchFactor(LOCATION, cfg.exact_zip_score, weight, f"Serves zip {zip_code}", FactorIcon.CHECK)
        )
    if match.match_type is AreaMatchType.PREFIX4:
        return _result(
            MatchFactor(
                LOCATION, cfg.prefix4_score, weight,
                f"Serves {describe_area(match.area)} area (prefix match)", FactorIcon.CHECK,
            )
        )
    if match.match_type is AreaMatchType.PREFIX3:
        return _result(
            MatchFactor(
                LOCATION, cfg.prefix3_score, weight,
                f"Serves {describe_area(match.area)} area (prefix match)", FactorIcon.CHECK,
            )
        )
    if match.match_type is AreaMatchType.STATE:
        return _result(
            MatchFactor(
                LOCATION, cfg.state_score, weight,
                f"Serves {describe_area(match.area)} statewide (covers {zip_code})", FactorIcon.INFO,
            )
        )

    return _result(
        MatchFactor(LOCATION, cfg.no_match_score, weight, f"Does not serve {zip_code}", FactorIcon.WARNING),
        MatchWarning("Vendor does not list this area", WarningSeverity.MEDIUM, LOCATION),
    )


# ── Performance ──────────────────────────────────────────────────────────────

def score_performance(
    performance: ScoreResult,
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    score = float(performance.score)
    if not performance.has_reviews:
        return _result(
            MatchFactor(PERFORMANCE, score, weight, "New vendor (no reviews yet)", has_data=False),
            MatchWarning("No reviews yet (low confidence)", WarningSeverity.MEDIUM, PERFORMANCE),
        )

    tier = get_score_tier(score, has_reviews=True, config=config)
    reason = f"{tier_label(tier)} rating ({performance.score}/100)"
    if tier in (ScoreTier.EXCELLENT, ScoreTier.GOOD):
        icon = FactorIcon.STAR
    elif tier is ScoreTier.AVERAGE:
        icon = FactorIcon.INFO
    else:
        icon = FactorIcon.WARNING

    factor = MatchFactor(PERFORMANCE, score, weight, reason, icon)
    if score < config.match_thresholds.low_performance_warning:
        return _result(factor, MatchWarning("Low performance rating", WarningSeverity.MEDIUM, PERFORMANCE))
    return _result(factor)


# ── Response time ────────────────────────────────────────────────────────────

def score_response_time(
    avg_response_hours: Optional[float],
    context: MatchingContext,
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    cfg = config.response_time
    if avg_response_hours is None:
        return _result(
            MatchFactor(RESPONSE_TIME, cfg.no_data_score, weight, "No response data yet", has_data=False)
        )

    hours = avg_response_hours
    if hours <= cfg.excellent_hours:
        score, icon = cfg.excellent_score, FactorIcon.STAR
    elif hours <= cfg.good_hours:
        score, icon = cfg.good_score, FactorIcon.CHECK
    elif hours <= cfg.average_hours:
        score, icon = cfg.average_score, FactorIcon.INFO
    elif hours <= cfg.poor_hours:
        score, icon = cfg.poor_score, FactorIcon.WARNING
    else:
        score, icon = cfg.very_slow_score, FactorIcon.WARNING

    factor = MatchFactor(RESPONSE_TIME, score, weight, f"Average response time: {hours:.1f}h", icon)
    if context.is_urgent and hours > cfg.urgent_slow_warning_hours:
        return _result(
            factor,
            MatchWarning(
                f"Slow to respond for an urgent request ({hours:.0f}h average)",
                WarningSeverity.MEDIUM,
                RESPONSE_TIME,
            ),
        )
    return _result(factor)


# ── Capacity ─────────────────────────────────────────────────────────────────

def score_capacity(
    pending_jobs: Optional[int],
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    cfg = config.capacity
    if pending_jobs is None:
        return _result(
            MatchFactor(CAPACITY, cfg.no_data_score, weight, "Availability unknown", FactorIcon.INFO, has_data=False)
        )

    pending = max(0, pending_jobs)

    score = cfg.overloaded_score
    for max_jobs, tier_score in cfg.tiers:
        if pending <= max_jobs:
            score = tier_score
            break

    if pending == 0:
        reason = "Fully available"
    else:
        reason = f"{pending} pending job{'s' if pending != 1 else ''}"

    if pending >= cfg.overloaded_warning_jobs:
        severity = WarningSeverity.HIGH
    elif pending >= cfg.busy_warning_jobs:
        severity = WarningSeverity.MEDIUM
    else:
        return _result(MatchFactor(CAPACITY, score, weight, reason, FactorIcon.CHECK))

    return _result(
        MatchFactor(CAPACITY, score, weight, reason, FactorIcon.WARNING),
        MatchWarning(f"Currently has {pending} pending jobs", severity, CAPACITY),
    )


# ── Availability ─────────────────────────────────────────────────────────────

def score_availability(
    vendor: VendorMatchData,
    context: MatchingContext,
    weight: float,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    cfg = config.availability
    hours = vendor.service_hours

    if context.is_emergency:
        if vendor.emergency_services:
            return _result(
                MatchFactor(
                    AVAILABILITY, cfg.emergency_match_score, weight,
                    "Emergency services available", FactorIcon.CHECK,
                )
            )
        return _result(
            MatchFactor(
                AVAILABILITY, cfg.emergency_no_match_score, weight,
                "No emergency services", FactorIcon.WARNING,
            ),
            MatchWarning("Vendor does not offer emergency services", WarningSeverity.HIGH, AVAILABILITY),
        )

    score = cfg.standard_score
    reason, icon = "Standard availability", FactorIcon.INFO
    if hours.is_24_7:
        score += cfg.full_availability_bonus
        reason, icon = "24/7 availability", FactorIcon.STAR
    elif now.weekday() >= 5 and hours.weekends:
        score += cfg.weekend_bonus
        reason, icon = "Weekend availability", FactorIcon.CHECK
    elif hours.weekdays:
        reason, icon = "Weekday availability", FactorIcon.CHECK

    return _result(MatchFactor(AVAILABILITY, min(score, 100.0), weight, reason, icon))


# ── Specialty ────────────────────────────────────────────────────────────────

def requested_specialties(
    service_details: Optional[Mapping[str, str]],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[str]:
    """Lower-cased specialty values picked out of a request's detail form."""
    if not service_details:
        return []
    found: list[str] = []
    for field_name in config.specialty.specialty_fields:
        value = service_details.get(field_name)
        if isinstance(value, str) and value.strip() and value.strip() != "Other":
            found.append(value.strip().lower())
    return found


def _matched_specialty(offered: list[str], requested: list[str]) -> Optional[str]:
    normalised = [s.lower() for s in offered if isinstance(s, str) and s]
    for want in requested:
        for have in normalised:
            # Loose containment so "tankless" matches "tankless water heater"
            if have in want or want in have:
                return have
    return None


def score_specialty(
    vendor: VendorMatchData,
    context: MatchingContext,
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    cfg = config.specialty
    wanted = requested_specialties(context.service_details, config)
    if not wanted:
        return _result(
            MatchFactor(
                SPECIALTY, cfg.no_specialty_required_score, weight,
                "No specific specialty required", has_data=False,
            )
        )

    offered = (vendor.service_specialties or {}).get(context.service_type) or []
    matched = _matched_specialty(list(offered), wanted)
    if matched:
        return _result(
            MatchFactor(SPECIALTY, cfg.has_specialty_score, weight, f"Has {matched} expertise", FactorIcon.CHECK)
        )

    return _result(
        MatchFactor(SPECIALTY, cfg.missing_specialty_score, weight, f"May not specialize in {wanted[0]}")
    )


# ── Price fit ────────────────────────────────────────────────────────────────

def vendor_price_range(job_size_ranges) -> Optional[tuple[float, float]]:
    """Union of a vendor's job-size buckets, or None when none are known."""
    known = [JOB_SIZE_VALUES[r] for r in job_size_ranges or () if r in JOB_SIZE_VALUES]
    if not known:
        return None
    return min(lo for lo, _ in known), max(hi for _, hi in known)


def range_overlap(first: tuple[float, float], second: tuple[float, float]) -> str:
    """Return ``"full"`` when one range contains the other, ``"partial"`` or ``"none"``."""
    (a_lo, a_hi), (b_lo, b_hi) = first, second
    if (a_lo >= b_lo and a_hi <= b_hi) or (b_lo >= a_lo and b_hi <= a_hi):
        return "full"
    if a_lo <= b_hi and b_lo <= a_hi:
        return "partial"
    return "none"


def score_price_fit(
    vendor: VendorMatchData,
    context: MatchingContext,
    weight: float,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> FactorResult:
    cfg = config.price_fit
    budget_key = (context.budget_range or "").strip()
    if budget_key in _UNKNOWN_BUDGETS:
        return _result(MatchFactor(PRICE_FIT, cfg.no_data_score, weight, "Budget not specified", has_data=False))

    budget = BUDGET_RANGE_VALUES.get(budget_key)
    if budget is None:
        return _result(MatchFactor(PRICE_FIT, cfg.no_data_score, weight, "Unrecognised budget range", has_data=False))

    vendor_range = vendor_price_range(vendor.job_size_ranges)
    if vendor_range is None:
        return _result(MatchFactor(PRICE_FIT, cfg.no_data_score, weight, "Vendor pricing unknown", has_data=False))

    overlap = range_overlap(budget, vendor_range)
    if overlap == "full":
        return _result(MatchFactor(PRICE_FIT, cfg.good_fit_score, weight, "Budget matches vendor range", FactorIcon.CHECK))
    if overlap == "partial":
        return _result(MatchFactor(PRICE_FIT, cfg.partial_fit_score, weight, "Budget partially matches"))
    return _result(
        MatchFactor(PRICE_FIT, cfg.poor_fit_score, weight, "Budget may not match vendor range", FactorIcon.WARNING)
    )
