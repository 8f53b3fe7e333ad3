"""Performance score tiers (0-100 scale)."""

from __future__ import annotations

from vendor_match.domain.enums import ScoreTier
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

TIER_DISPLAY: dict[ScoreTier, tuple[str, str]] = {
    ScoreTier.EXCELLENT: ("Excellent", "#52c41a"),
    ScoreTier.GOOD: ("Good", "#73d13d"),
    ScoreTier.AVERAGE: ("Average", "#faad14"),
    ScoreTier.BELOW_AVERAGE: ("Below Average", "#ff7a45"),
    ScoreTier.POOR: ("Poor", "#ff4d4f"),
    ScoreTier.NEW: ("New Vendor", "#1890ff"),
}

RECOMMENDABLE_TIERS = frozenset({ScoreTier.EXCELLENT, ScoreTier.GOOD})


def get_score_tier(
    score: float,
    has_reviews: bool,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoreTier:
    """Map a score to its tier. Vendors without reviews are always ``new``."""
    if not has_reviews:
        return ScoreTier.NEW

    t = config.tiers
    if score >= t.excellent:
        return ScoreTier.EXCELLENT
    if score >= t.good:
        return ScoreTier.GOOD
    if score >= t.average:
        return ScoreTier.AVERAGE
    if score >= t.below_average:
        return ScoreTier.BELOW_AVERAGE
    return ScoreTier.POOR


def tier_label(tier: ScoreTier) -> str:
    return TIER_DISPLAY[tier][0]


def is_recommendable_tier(tier: ScoreTier) -> bool:
    return tier in RECOMMENDABLE_TIERS
