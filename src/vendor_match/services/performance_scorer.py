"""Deterministic vendor performance scorer.

Pure-function module — NO database access, NO wall clock.

Turns a vendor's historical metrics into a 0-100 quality score:

    - Review      (50%)  — recency-weighted mean of 1-5 star ratings
    - Completion  (20%)  — completed / accepted jobs
    - Acceptance  (15%)  — accepted / matched jobs, full marks at 70%
    - Volume      (10%)  — diminishing-returns bonus for completed jobs
    - Recency      (5%)  — bonus for recent activity

The weighted sum is pulled toward the neutral 50 in proportion to how few
reviews back it (a single 5-star review cannot look like twenty), then
behavioural penalties (no-shows, declines after accepting, 1-star reviews)
are subtracted and the result is clamped to [0, 100].

Callers pass ``now`` explicitly so that identical inputs always give
identical scores.  Malformed counters and ratings are clamped, never raised.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0
MIN_RATING = 1.0
MAX_RATING = 5.0


@dataclass(frozen=True)
class Review:
    rating: float
    created_at: datetime
    quality_rating: Optional[float] = None
    price_rating: Optional[float] = None
    timeline_rating: Optional[float] = None
    treatment_rating: Optional[float] = None


@dataclass(frozen=True)
class VendorMetrics:
    """Read-only snapshot of everything known about a vendor at scoring time."""

    vendor_id: str
    reviews: Sequence[Review] = ()
    total_matches: int = 0
    accepted_jobs: int = 0
    completed_jobs: int = 0
    no_shows: int = 0
    declines_after_accept: int = 0
    response_times: Sequence[float] = ()  # seconds
    vetting_score: Optional[float] = None  # 0-45
    last_activity_date: Optional[datetime] = None


@dataclass(frozen=True)
class ScoreBreakdown:
    # Component scores (0-100 each)
    review_score: float
    completion_score: float
    acceptance_score: float
    volume_bonus: float
    recency_bonus: float

    # Points subtracted after dampening
    penalties: float

    # Weighted sum, the same after dampening, and after penalties (unclamped)
    weighted_sum: float
    dampened_score: float
    raw_score: float

    review_count: int
    confidence: float  # 0-1

    # Informational only; not part of the score
    vetting_score: Optional[float] = None  # normalised to 0-100
    avg_response_time_hours: Optional[float] = None


@dataclass(frozen=True)
class ScoreResult:
    vendor_id: str
    score: int
    breakdown: ScoreBreakdown
    calculated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def has_reviews(self) -> bool:
        return self.breakdown.review_count > 0


# ── Helpers ──────────────────────────────────────────────────────────────────

def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _days_between(earlier: datetime, later: datetime) -> int:
    return (_as_utc(later) - _as_utc(earlier)).days


def _count(value) -> int:
    """Coerce a counter to a non-negative int (bad input becomes 0)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def _clamp_rating(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return max(MIN_RATING, min(MAX_RATING, number))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def effective_rating(review: Review) -> float:
    """Mean of the dimension ratings when present, else the overall rating."""
    dimensions = [
        r
        for r in (
            _clamp_rating(review.quality_rating),
            _clamp_rating(review.price_rating),
            _clamp_rating(review.timeline_rating),
            _clamp_rating(review.treatment_rating),
        )
        if r is not None
    ]
    if dimensions:
        return sum(dimensions) / len(dimensions)

    overall = _clamp_rating(review.rating)
    # Unreadable rating counts as a middling 3 stars
    return overall if overall is not None else 3.0


def rating_to_score(rating: float) -> float:
    """1 star = 0, 3 stars = 50, 5 stars = 100."""
    return clamp((rating - 1.0) * 25.0, 0.0, 100.0)


def review_recency_weight(days_old: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    cfg = config.review
    if days_old <= 0:
        return 1.0
    if days_old > cfg.recency_decay_days:
        return cfg.recency_min_weight
    decay = days_old / cfg.recency_decay_days
    return 1.0 - decay * (1.0 - cfg.recency_min_weight)


# ── Components ───────────────────────────────────────────────────────────────

def calculate_review_score(
    reviews: Iterable[Review],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """Recency-weighted mean review score (0-100); neutral when there are none."""
    weighted_sum = 0.0
    total_weight = 0.0
    for review in reviews:
        weight = review_recency_weight(_days_between(review.created_at, now), config)
        weighted_sum += rating_to_score(effective_rating(review)) * weight
        total_weight += weight

    if total_weight <= 0:
        return config.bounds.default
    return weighted_sum / total_weight


def calculate_completion_score(
    accepted_jobs: int,
    completed_jobs: int,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if accepted_jobs < config.completion.min_jobs_for_rate:
        return config.bounds.default
    rate = min(completed_jobs / accepted_jobs, 1.0)
    return rate * 100.0


def calculate_acceptance_score(
    total_matches: int,
    accepted_jobs: int,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    cfg = config.acceptance
    if total_matches < cfg.min_matches_for_rate:
        return config.bounds.default
    rate = accepted_jobs / total_matches
    if rate >= cfg.target_rate:
        return 100.0
    return (rate / cfg.target_rate) * 100.0


def calculate_volume_bonus(completed_jobs: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    cap = config.volume.max_bonus_jobs
    jobs = min(completed_jobs, cap)
    return 100.0 * math.log1p(jobs) / math.log1p(cap)


def calculate_recency_bonus(
    last_activity: Optional[datetime],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if last_activity is None:
        return 0.0

    cfg = config.recency
    days = _days_between(last_activity, now)
    if days <= cfg.full_bonus_days:
        return 100.0
    if days >= cfg.zero_bonus_days:
        return 0.0
    span = cfg.zero_bonus_days - cfg.full_bonus_days
    return max(0.0, 100.0 - (days - cfg.full_bonus_days) / span * 100.0)


def calculate_penalties(
    no_shows: int,
    declines_after_accept: int,
    reviews: Sequence[Review],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    cfg = config.penalties
    total = min(no_shows * cfg.no_show_penalty, cfg.max_no_show_penalty)
    total += min(
        declines_after_accept * cfg.decline_after_accept_penalty,
        cfg.max_decline_after_accept_penalty,
    )
    one_stars = sum(
        1 for r in reviews if effective_rating(r) <= config.review.one_star_threshold
    )
    total += one_stars * cfg.one_star_penalty
    return total


def average_response_hours(response_times: Iterable[float]) -> Optional[float]:
    """Mean response time in hours, ignoring negative or non-numeric samples."""
    samples: list[float] = []
    for value in response_times:
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(seconds) and seconds >= 0:
            samples.append(seconds)
    if not samples:
        return None
    return sum(samples) / len(samples) / _SECONDS_PER_HOUR


def normalise_vetting_score(vetting_score: Optional[float], config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> Optional[float]:
    if vetting_score is None:
        return None
    try:
        value = float(vetting_score)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return clamp(value / config.vetting.max_total_score * 100.0, 0.0, 100.0)


# ── Main scorer ──────────────────────────────────────────────────────────────

def calculate_vendor_score(
    metrics: VendorMetrics,
    *,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoreResult:
    """Compute a vendor's performance score with full breakdown.

    Parameters
    ----------
    metrics
        Aggregated vendor history.  Counters may be inconsistent: negative
        counters count as zero and ``accepted_jobs`` cannot exceed
        ``total_matches``.  Penalty counters are never clamped to
        ``total_matches``.
    now
        Reference time for every recency calculation.
    config
        Weight and threshold tables.

    Returns
    -------
    ScoreResult
        A fresh value with ``score`` in [0, 100].
    """
    reviews = tuple(metrics.reviews or ())
    total_matches = _count(metrics.total_matches)
    accepted = min(_count(metrics.accepted_jobs), total_matches)
    completed = _count(metrics.completed_jobs)
    no_shows = _count(metrics.no_shows)
    declines = _count(metrics.declines_after_accept)

    review_score = calculate_review_score(reviews, now, config)
    completion_score = calculate_completion_score(accepted, completed, config)
    acceptance_score = calculate_acceptance_score(total_matches, accepted, config)
    volume_bonus = calculate_volume_bonus(completed, config)
    recency_bonus = calculate_recency_bonus(metrics.last_activity_date, now, config)
    penalties = calculate_penalties(no_shows, declines, reviews, config)

    w = config.performance_weights
    weighted_sum = (
        review_score * w.review
        + completion_score * w.completion
        + acceptance_score * w.acceptance
        + volume_bonus * w.volume
        + recency_bonus * w.recency
    )

    review_count = len(reviews)
    confidence = min(review_count / config.review.min_reviews_for_full_weight, 1.0)

    default = config.bounds.default
    dampened = default + (weighted_sum - default) * confidence
    raw_score = dampened - penalties
    final = int(clamp(round_half_up(raw_score), config.bounds.min, config.bounds.max))

    logger.debug(
        "Vendor %s scored %d (weighted=%.2f confidence=%.2f penalties=%.1f)",
        metrics.vendor_id, final, weighted_sum, confidence, penalties,
    )

    return ScoreResult(
        vendor_id=metrics.vendor_id,
        score=final,
        breakdown=ScoreBreakdown(
            review_score=review_score,
            completion_score=completion_score,
            acceptance_score=acceptance_score,
            volume_bonus=volume_bonus,
            recency_bonus=recency_bonus,
            penalties=penalties,
            weighted_sum=weighted_sum,
            dampened_score=dampened,
            raw_score=raw_score,
            review_count=review_count,
            confidence=confidence,
            vetting_score=normalise_vetting_score(metrics.vetting_score, config),
            avg_response_time_hours=average_response_hours(metrics.response_times or ()),
        ),
        calculated_at=now,
    )


def calculate_multiple_vendor_scores(
    metrics_list: Iterable[VendorMetrics],
    *,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[ScoreResult]:
    return [calculate_vendor_score(m, now=now, config=config) for m in metrics_list]
