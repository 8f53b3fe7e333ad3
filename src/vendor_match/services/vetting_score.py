"""Vendor vetting score.

Pure-function module — NO database access.

Computes the one-time onboarding baseline (0-45 points) from objective
attributes plus an optional admin adjustment:

    - Licensed             15 pts
    - Insured              10 pts
    - Years in business  0-10 pts  (scaled, full points at 5 years)
    - Admin adjustment   +/-10 pts

The vetting tier is a display aid on the 0-45 scale only; it has nothing to
do with the 0-100 performance tiers in ``score_tiers``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from vendor_match.domain.enums import VettingTier
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig


@dataclass(frozen=True)
class VettingInput:
    licensed: bool
    insured: bool
    years_in_business: Optional[float] = None
    admin_adjustment: float = 0.0


@dataclass(frozen=True)
class VettingScoreBreakdown:
    licensed_points: int
    insured_points: int
    years_points: int
    admin_adjustment: float
    total_score: float
    tier: VettingTier

    @property
    def display(self) -> str:
        return vetting_score_display(self)


VETTING_TIER_DISPLAY: dict[VettingTier, tuple[str, str]] = {
    VettingTier.STRONG: ("Strong Vendor", "#52c41a"),
    VettingTier.GOOD: ("Good Vendor", "#73d13d"),
    VettingTier.ACCEPTABLE: ("Acceptable", "#faad14"),
    VettingTier.CONDITIONAL: ("Conditional", "#ff7a45"),
    VettingTier.DECLINED: ("Below Threshold", "#ff4d4f"),
}


def _finite_or_none(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def calculate_vetting_score(
    vetting: VettingInput,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> VettingScoreBreakdown:
    """Score a vendor's onboarding attributes. Never raises."""
    cfg = config.vetting

    licensed_points = cfg.licensed_points if vetting.licensed else 0
    insured_points = cfg.insured_points if vetting.insured else 0

    years_points = 0
    years = _finite_or_none(vetting.years_in_business)
    if years is not None and years > 0:
        ratio = min(years / cfg.years_for_max_points, 1.0)
        years_points = int(round(ratio * cfg.years_in_business_max))

    adjustment = _finite_or_none(vetting.admin_adjustment) or 0.0
    adjustment = max(-cfg.admin_adjustment_range, min(cfg.admin_adjustment_range, adjustment))

    raw_total = licensed_points + insured_points + years_points + adjustment
    total = max(0.0, min(cfg.max_total_score, raw_total))

    return VettingScoreBreakdown(
        licensed_points=licensed_points,
        insured_points=insured_points,
        years_points=years_points,
        admin_adjustment=adjustment,
        total_score=total,
        tier=get_vetting_tier(total, config),
    )


def get_vetting_tier(score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> VettingTier:
    cfg = config.vetting
    if score >= cfg.strong_tier:
        return VettingTier.STRONG
    if score >= cfg.good_tier:
        return VettingTier.GOOD
    if score >= cfg.acceptable_tier:
        return VettingTier.ACCEPTABLE
    if score >= cfg.conditional_tier:
        return VettingTier.CONDITIONAL
    return VettingTier.DECLINED


def _fmt_points(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def vetting_score_display(breakdown: VettingScoreBreakdown) -> str:
    """Human-readable list of the points a vendor earned, e.g. "Licensed: +15"."""
    parts: list[str] = []
    if breakdown.licensed_points > 0:
        parts.append(f"Licensed: +{breakdown.licensed_points}")
    if breakdown.insured_points > 0:
        parts.append(f"Insured: +{breakdown.insured_points}")
    if breakdown.years_points > 0:
        parts.append(f"Experience: +{breakdown.years_points}")
    if breakdown.admin_adjustment != 0:
        sign = "+" if breakdown.admin_adjustment > 0 else ""
        parts.append(f"Admin: {sign}{_fmt_points(breakdown.admin_adjustment)}")
    return ", ".join(parts) or "No factors"
