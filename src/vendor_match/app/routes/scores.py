"""Admin vendor score routes.

Scores are computed on demand from match history; nothing is persisted.
These routes are intended for the internal admin dashboard only and must be
protected by authentication in production.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_match.domain.schemas import AdminScoresResponse, VendorScoreOut, VettingScoreOut
from vendor_match.infra.database import get_db
from vendor_match.services.performance_scorer import calculate_multiple_vendor_scores, calculate_vendor_score
from vendor_match.services.score_serializer import (
    serialize_vendor_score,
    serialize_vetting,
    summarize_scores,
)
from vendor_match.services.scoring_config import get_scoring_config
from vendor_match.services.vendor_metrics_service import (
    build_vendor_metrics,
    get_active_vendors,
    get_matches_by_vendor,
    get_vendor,
    load_vendor_metrics,
    vetting_input_for,
)
from vendor_match.services.vetting_score import calculate_vetting_score

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/scores", response_model=AdminScoresResponse)
async def list_vendor_scores(db: AsyncSession = Depends(get_db)):
    """Performance score and tier for every active vendor, best first."""
    config = get_scoring_config()
    try:
        vendors = await get_active_vendors(db)
        matches = await get_matches_by_vendor(db, [v.id for v in vendors])
    except SQLAlchemyError:
        logger.exception("Failed to load vendor history for scoring")
        raise HTTPException(status_code=500, detail="Failed to fetch vendors")

    metrics = [
        build_vendor_metrics(
            v.id,
            matches.get(v.id, []),
            calculate_vetting_score(vetting_input_for(v), config).total_score,
        )
        for v in vendors
    ]
    results = calculate_multiple_vendor_scores(metrics, now=datetime.now(timezone.utc), config=config)

    by_id = {v.id: v for v in vendors}
    ordered = sorted(results, key=lambda r: (-r.score, r.vendor_id))
    logger.info("Scored %d active vendors", len(ordered))

    return {
        "vendors": [serialize_vendor_score(by_id[r.vendor_id], r, config) for r in ordered],
        "summary": summarize_scores(results, config),
    }


@router.get("/vendors/{vendor_id}/score", response_model=VendorScoreOut)
async def get_vendor_score(vendor_id: str, db: AsyncSession = Depends(get_db)):
    """Full performance breakdown for one vendor."""
    config = get_scoring_config()
    try:
        vendor = await get_vendor(db, vendor_id)
        if not vendor:
            raise HTTPException(status_code=404, detail="Vendor not found")
        metrics = await load_vendor_metrics(db, vendor, config)
    except SQLAlchemyError:
        logger.exception("Failed to load history for vendor %s", vendor_id)
        raise HTTPException(status_code=500, detail="Failed to fetch vendor history")

    result = calculate_vendor_score(metrics, now=datetime.now(timezone.utc), config=config)
    return serialize_vendor_score(vendor, result, config)


@router.get("/vendors/{vendor_id}/vetting", response_model=VettingScoreOut)
async def get_vendor_vetting(vendor_id: str, db: AsyncSession = Depends(get_db)):
    """Onboarding vetting score, tier and display string."""
    try:
        vendor = await get_vendor(db, vendor_id)
    except SQLAlchemyError:
        logger.exception("Failed to load vendor %s", vendor_id)
        raise HTTPException(status_code=500, detail="Failed to fetch vendor")
    if not vendor:
        raise HTTPException(status_code=404, detail="Vendor not found")

    breakdown = calculate_vetting_score(vetting_input_for(vendor), get_scoring_config())
    return serialize_vetting(vendor.id, breakdown)
