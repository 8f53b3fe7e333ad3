"""Vendor/request match scoring engine.

Pure-function module — NO database access, NO wall clock.

Combines eight weighted factors into a 0-100 match score per vendor:

    - Service Match  (25%)  — vendor offers the requested service
    - Location       (20%)  — service-area overlap with the request zip
    - Performance    (15%)  — historical performance score
    - Response Time  (10%)  — average time to respond to intros
    - Availability   (10%)  — emergency / 24-7 / weekend coverage
    - Specialty      (10%)  — requested specialty vs vendor specialties
    - Capacity        (5%)  — current pending workload
    - Price Fit       (5%)  — request budget vs vendor job sizes

High and emergency requests use a second weight table that trades
performance and specialty for response time.  The pool is then ranked and
split into recommended suggestions and everyone else.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Iterable, Optional

from vendor_match.domain.enums import MatchConfidence, Urgency
from vendor_match.services.matching.contracts import (
    FactorResult,
    MatchFactor,
    MatchingContext,
    MatchScore,
    MatchWarning,
    SuggestionsMeta,
    SuggestionsResult,
    VendorMatchData,
    VendorWithMatchScore,
)
from vendor_match.services.matching.factors import (
    score_availability,
    score_capacity,
    score_location,
    score_performance,
    score_price_fit,
    score_response_time,
    score_service_match,
    score_specialty,
)
from vendor_match.services.matching.service_areas import extract_zip_code, normalise_zip
from vendor_match.services.performance_scorer import (
    ScoreResult,
    calculate_vendor_score,
    clamp,
    round_half_up,
)
from vendor_match.services.score_tiers import get_score_tier, is_recommendable_tier
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)


# ── Context ──────────────────────────────────────────────────────────────────

def parse_urgency(value: Any) -> Urgency:
    """Map a stored urgency string onto ``Urgency`` (unknown → medium)."""
    if isinstance(value, Urgency):
        return value
    try:
        return Urgency(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown urgency %r, treating as medium", value)
        return Urgency.MEDIUM


def create_matching_context(request: Any) -> MatchingContext:
    """Build a ``MatchingContext`` from a service-request row.

    The zip falls back to the first 5-digit number in ``property_location``.
    """
    property_location = getattr(request, "property_location", None) or ""
    zip_code = normalise_zip(getattr(request, "zip_code", None)) or extract_zip_code(property_location)

    details = getattr(request, "service_details", None)
    if not isinstance(details, dict):
        details = None

    return MatchingContext(
        request_id=str(request.id),
        service_type=request.service_type or "",
        urgency=parse_urgency(getattr(request, "urgency", None)),
        zip_code=zip_code,
        property_location=property_location,
        budget_range=getattr(request, "budget_range", None),
        service_details=details,
    )


# ── Helpers ──────────────────────────────────────────────────────────────────

def _response_hours(vendor: VendorMatchData, performance: ScoreResult) -> Optional[float]:
    hours = vendor.avg_response_time_hours
    if hours is None:
        hours = performance.breakdown.avg_response_time_hours
    if hours is None:
        return None
    try:
        hours = float(hours)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(hours) or hours < 0:
        return None
    return hours


def determine_confidence(
    factors: list[MatchFactor],
    has_reviews: bool,
    has_response_data: bool,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> MatchConfidence:
    """How much real data stands behind a match score.

    A vendor with neither reviews nor response history is always ``low``;
    otherwise the share of factors computed from real data decides.
    """
    if not has_reviews and not has_response_data:
        return MatchConfidence.LOW
    if not factors:
        return MatchConfidence.LOW

    ratio = sum(1 for f in factors if f.has_data) / len(factors)
    t = config.match_thresholds
    if ratio >= t.high_confidence_data_ratio:
        return MatchConfidence.HIGH
    if ratio >= t.medium_confidence_data_ratio:
        return MatchConfidence.MEDIUM
    return MatchConfidence.LOW


# ── Main scorer ──────────────────────────────────────────────────────────────

def calculate_match_score(
    vendor: VendorMatchData,
    context: MatchingContext,
    *,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> MatchScore:
    """Score one vendor against one request.

    Parameters
    ----------
    vendor
        Vendor profile plus history; missing metrics count as a brand-new
        vendor.
    context
        The request being matched.
    now
        Reference time for recency and weekend checks.
    config
        Weight and threshold tables.

    Returns
    -------
    MatchScore
        Unranked (``rank`` is None until ``calculate_match_scores``).
    """
    weights = config.weights_for(context.is_urgent)
    performance = calculate_vendor_score(vendor.metrics_or_empty(), now=now, config=config)
    response_hours = _response_hours(vendor, performance)

    results: list[FactorResult] = [
        score_service_match(vendor, context, weights.service_match),
        score_location(vendor, context, weights.location_match, config),
        score_performance(performance, weights.performance, config),
        score_response_time(response_hours, context, weights.response_time, config),
        score_availability(vendor, context, weights.availability, now, config),
        score_specialty(vendor, context, weights.specialty_match, config),
        score_capacity(vendor.pending_jobs_count, weights.capacity, config),
        score_price_fit(vendor, context, weights.price_fit, config),
    ]
    factors = [r.factor for r in results]
    warnings: list[MatchWarning] = [w for r in results for w in r.warnings]

    total = sum(f.weighted for f in factors)
    total_score = int(clamp(round_half_up(total), config.bounds.min, config.bounds.max))

    confidence = determine_confidence(
        factors,
        has_reviews=performance.has_reviews,
        has_response_data=response_hours is not None,
        config=config,
    )

    score = MatchScore(
        vendor_id=vendor.vendor_id,
        total_score=total_score,
        confidence=confidence,
        factors=factors,
        warnings=warnings,
        recommended=False,
        performance=performance,
        tier=get_score_tier(performance.score, performance.has_reviews, config),
    )
    score.recommended = (
        is_recommendable_tier(get_score_tier(total_score, has_reviews=True, config=config))
        and not score.has_high_severity_warning
    )

    logger.debug(
        "Vendor %s vs request %s: %d (%s, %d warnings)",
        vendor.vendor_id, context.request_id, total_score, confidence.value, len(warnings),
    )
    return score


def calculate_match_scores(
    vendors: Iterable[VendorMatchData],
    context: MatchingContext,
    *,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[VendorWithMatchScore]:
    """Score and rank a vendor pool.

    Sorted by total score descending with vendor id breaking ties.  Only
    the top ``max_recommendations`` recommended vendors keep the flag.
    """
    scored = [
        VendorWithMatchScore(vendor=v, match_score=calculate_match_score(v, context, now=now, config=config))
        for v in vendors
    ]
    scored.sort(key=lambda s: (-s.match_score.total_score, s.vendor.vendor_id))

    limit = config.match_thresholds.max_recommendations
    recommended = 0
    for position, item in enumerate(scored, start=1):
        item.match_score.rank = position
        if item.match_score.recommended:
            recommended += 1
            if recommended > limit:
                item.match_score.recommended = False

    return scored


def get_scoring_meta(
    scored: list[VendorWithMatchScore],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> SuggestionsMeta:
    total = len(scored)
    if total == 0:
        return SuggestionsMeta(scoring_version=config.scoring_version)

    return SuggestionsMeta(
        total_eligible=total,
        total_recommended=sum(1 for s in scored if s.match_score.recommended),
        average_score=round_half_up(sum(s.match_score.total_score for s in scored) / total),
        scoring_version=config.scoring_version,
    )


def build_suggestions(
    vendors: Iterable[VendorMatchData],
    context: MatchingContext,
    *,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> SuggestionsResult:
    """Rank a pool and split it into recommended suggestions and the rest."""
    scored = calculate_match_scores(vendors, context, now=now, config=config)
    result = SuggestionsResult(
        suggestions=[s for s in scored if s.match_score.recommended],
        other_vendors=[s for s in scored if not s.match_score.recommended],
        meta=get_scoring_meta(scored, config),
    )

    logger.info(
        "Request %s: %d eligible vendors, %d recommended (avg %d)",
        context.request_id, result.meta.total_eligible,
        result.meta.total_recommended, result.meta.average_score,
    )
    return result
