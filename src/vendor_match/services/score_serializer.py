"""Scoring results -> camelCase API payloads for the admin UI."""

from typing import Iterable

from vendor_match.domain.enums import ScoreTier
from vendor_match.domain.models import ServiceRequest, Vendor
from vendor_match.services.matching.contracts import (
    MatchScore,
    SuggestionsMeta,
    SuggestionsResult,
    VendorWithMatchScore,
)
from vendor_match.services.performance_scorer import ScoreResult, round_half_up
from vendor_match.services.score_tiers import get_score_tier, tier_label
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from vendor_match.services.vetting_score import VETTING_TIER_DISPLAY, VettingScoreBreakdown


def serialize_request_summary(request: ServiceRequest) -> dict:
    return {
        "id": request.id,
        "service_type": request.service_type,
        "property_location": request.property_location,
        "zip_code": request.zip_code,
        "urgency": request.urgency,
    }


def serialize_match_score(score: MatchScore) -> dict:
    performance = score.performance
    perf_tier = score.tier
    return {
        "vendorId": score.vendor_id,
        "totalScore": score.total_score,
        "confidence": score.confidence.value,
        "factors": [
            {
                "name": f.name,
                "score": f.score,
                "weight": f.weight,
                "weighted": round(f.weighted, 2),
                "reason": f.reason,
                "icon": f.icon.value,
                "hasData": f.has_data,
            }
            for f in score.factors
        ],
        "warnings": [
            {"message": w.message, "severity": w.severity.value, "factor": w.factor}
            for w in score.warnings
        ],
        "recommended": score.recommended,
        "rank": score.rank,
        "tier": score.tier.value,
        "performance": {
            "score": performance.score,
            "tier": perf_tier.value,
            "tierLabel": tier_label(perf_tier),
            "reviewCount": performance.breakdown.review_count,
            "confidence": round(performance.breakdown.confidence, 2),
        },
    }


def serialize_suggested_vendor(item: VendorWithMatchScore) -> dict:
    vendor = item.vendor
    hours = vendor.avg_response_time_hours
    return {
        "id": vendor.vendor_id,
        "businessName": vendor.business_name,
        "services": list(vendor.services),
        "serviceAreas": list(vendor.service_areas),
        "pendingJobsCount": vendor.pending_jobs_count,
        "avgResponseTimeHours": round(hours, 1) if hours is not None else None,
        "emergencyServices": vendor.emergency_services,
        "matchScore": serialize_match_score(item.match_score),
    }


def serialize_meta(meta: SuggestionsMeta) -> dict:
    return {
        "totalEligible": meta.total_eligible,
        "totalRecommended": meta.total_recommended,
        "averageScore": meta.average_score,
        "scoringVersion": meta.scoring_version,
    }


def serialize_suggestions(request: ServiceRequest, result: SuggestionsResult) -> dict:
    return {
        "request": serialize_request_summary(request),
        "suggestions": [serialize_suggested_vendor(s) for s in result.suggestions],
        "otherVendors": [serialize_suggested_vendor(s) for s in result.other_vendors],
        "meta": serialize_meta(result.meta),
    }


# ---------------------------------------------------------------------------
# Admin scores
# ---------------------------------------------------------------------------


def serialize_vendor_score(
    vendor: Vendor,
    result: ScoreResult,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> dict:
    tier = get_score_tier(result.score, result.has_reviews, config)
    b = result.breakdown
    return {
        "vendorId": result.vendor_id,
        "businessName": vendor.business_name,
        "score": result.score,
        "tier": tier.value,
        "tierLabel": tier_label(tier),
        "breakdown": {
            "reviewScore": round(b.review_score, 2),
            "completionScore": round(b.completion_score, 2),
            "acceptanceScore": round(b.acceptance_score, 2),
            "volumeBonus": round(b.volume_bonus, 2),
            "recencyBonus": round(b.recency_bonus, 2),
            "penalties": b.penalties,
            "weightedSum": round(b.weighted_sum, 2),
            "dampenedScore": round(b.dampened_score, 2),
            "rawScore": round(b.raw_score, 2),
            "reviewCount": b.review_count,
            "confidence": round(b.confidence, 2),
            "vettingScore": round(b.vetting_score, 1) if b.vetting_score is not None else None,
            "avgResponseTimeHours": (
                round(b.avg_response_time_hours, 1) if b.avg_response_time_hours is not None else None
            ),
        },
        "calculatedAt": result.calculated_at,
    }


def summarize_scores(results: Iterable[ScoreResult], config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> dict:
    """Pool summary: count, reviewed count, mean score and vendors per tier."""
    results = list(results)
    distribution = {tier.value: 0 for tier in ScoreTier}
    for r in results:
        distribution[get_score_tier(r.score, r.has_reviews, config).value] += 1

    average = round_half_up(sum(r.score for r in results) / len(results)) if results else 0
    return {
        "total": len(results),
        "withReviews": sum(1 for r in results if r.has_reviews),
        "averageScore": average,
        "tierDistribution": distribution,
    }


def serialize_vetting(vendor_id: str, breakdown: VettingScoreBreakdown) -> dict:
    tier = breakdown.tier
    return {
        "vendorId": vendor_id,
        "licensedPoints": breakdown.licensed_points,
        "insuredPoints": breakdown.insured_points,
        "yearsPoints": breakdown.years_points,
        "adminAdjustment": breakdown.admin_adjustment,
        "totalScore": breakdown.total_score,
        "tier": tier.value,
        "tierLabel": VETTING_TIER_DISPLAY[tier][0],
        "display": breakdown.display,
    }
