"""Load vendor history from the database and shape it for the scorers.

Everything async lives here so the scoring and matching modules stay pure:
routes fetch rows through these helpers, then hand plain dataclasses to
``performance_scorer`` and ``matching.engine``.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_match.domain.enums import PENDING_MATCH_STATUSES, MatchStatus, VendorStatus
from vendor_match.domain.models import RequestVendorMatch, Vendor
from vendor_match.services.matching.contracts import ServiceHours, VendorMatchData
from vendor_match.services.performance_scorer import Review, VendorMetrics
from vendor_match.services.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from vendor_match.services.vetting_score import VettingInput, calculate_vetting_score

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0


# ---------------------------------------------------------------------------
# Row → dataclass
# ---------------------------------------------------------------------------


def vetting_input_for(vendor: Vendor) -> VettingInput:
    return VettingInput(
        licensed=bool(vendor.licensed),
        insured=bool(vendor.insured),
        years_in_business=vendor.years_in_business,
        admin_adjustment=vendor.vetting_admin_adjustment or 0.0,
    )


def review_from_match(match: RequestVendorMatch) -> Optional[Review]:
    """Return the landlord review attached to a match, if one was left."""
    if match.review_rating is None:
        return None
    return Review(
        rating=match.review_rating,
        created_at=match.review_submitted_at or match.created_at,
        quality_rating=match.review_quality,
        price_rating=match.review_price,
        timeline_rating=match.review_timeline,
        treatment_rating=match.review_treatment,
    )


def _latest(values: Iterable[Optional[datetime]]) -> Optional[datetime]:
    present = [v for v in values if v is not None]
    return max(present) if present else None


def build_vendor_metrics(
    vendor_id: str,
    matches: Iterable[RequestVendorMatch],
    vetting_score: Optional[float] = None,
) -> VendorMetrics:
    """Aggregate a vendor's match rows into a ``VendorMetrics`` snapshot."""
    reviews: list[Review] = []
    response_times: list[float] = []
    activity: list[Optional[datetime]] = []
    total = accepted = completed = no_shows = declines = 0

    for match in matches:
        total += 1
        if match.vendor_accepted:
            accepted += 1
        if match.job_completed or match.status == MatchStatus.COMPLETED.value:
            completed += 1
        if match.declined_after_accept:
            declines += 1
        elif match.status == MatchStatus.NO_SHOW.value or (
            match.vendor_accepted and match.job_completed is False
        ):
            # Accepted but explicitly not completed counts as a no-show
            no_shows += 1
        if match.response_time_seconds is not None:
            response_times.append(float(match.response_time_seconds))

        review = review_from_match(match)
        if review is not None:
            reviews.append(review)

        activity.extend((match.vendor_responded_at, match.completed_at))

    return VendorMetrics(
        vendor_id=vendor_id,
        reviews=tuple(reviews),
        total_matches=total,
        accepted_jobs=accepted,
        completed_jobs=completed,
        no_shows=no_shows,
        declines_after_accept=declines,
        response_times=tuple(response_times),
        vetting_score=vetting_score,
        last_activity_date=_latest(activity),
    )


def _service_hours(vendor: Vendor) -> ServiceHours:
    return ServiceHours(
        weekdays=bool(vendor.service_hours_weekdays),
        weekends=bool(vendor.service_hours_weekends),
        is_24_7=bool(vendor.service_hours_24_7),
    )


def build_vendor_match_data(
    vendor: Vendor,
    matches: Iterable[RequestVendorMatch],
    *,
    pending_jobs_count: Optional[int] = 0,
    avg_response_time_hours: Optional[float] = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> VendorMatchData:
    vetting = calculate_vetting_score(vetting_input_for(vendor), config)
    specialties = vendor.service_specialties if isinstance(vendor.service_specialties, dict) else None

    return VendorMatchData(
        vendor_id=vendor.id,
        business_name=vendor.business_name or "",
        services=tuple(vendor.services or ()),
        service_areas=tuple(vendor.service_areas or ()),
        metrics=build_vendor_metrics(vendor.id, matches, vetting.total_score),
        pending_jobs_count=pending_jobs_count,
        avg_response_time_hours=avg_response_time_hours,
        emergency_services=bool(vendor.emergency_services),
        service_hours=_service_hours(vendor),
        service_specialties=specialties,
        job_size_ranges=tuple(vendor.job_size_range or ()),
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_vendor(db: AsyncSession, vendor_id: str) -> Optional[Vendor]:
    result = await db.execute(select(Vendor).where(Vendor.id == vendor_id))
    return result.scalar_one_or_none()


async def get_active_vendors(db: AsyncSession) -> list[Vendor]:
    result = await db.execute(
        select(Vendor)
        .where(Vendor.status == VendorStatus.ACTIVE.value)
        .order_by(Vendor.id)
    )
    return list(result.scalars().all())


async def get_matches_by_vendor(
    db: AsyncSession,
    vendor_ids: list[str],
) -> dict[str, list[RequestVendorMatch]]:
    if not vendor_ids:
        return {}
    result = await db.execute(
        select(RequestVendorMatch).where(RequestVendorMatch.vendor_id.in_(vendor_ids))
    )
    grouped: dict[str, list[RequestVendorMatch]] = defaultdict(list)
    for match in result.scalars().all():
        grouped[match.vendor_id].append(match)
    return grouped


async def get_pending_job_counts(db: AsyncSession, vendor_ids: list[str]) -> dict[str, int]:
    """Open matches per vendor (pending, intro sent, accepted, in progress)."""
    if not vendor_ids:
        return {}
    result = await db.execute(
        select(RequestVendorMatch.vendor_id, func.count())
        .where(
            RequestVendorMatch.vendor_id.in_(vendor_ids),
            RequestVendorMatch.status.in_(sorted(PENDING_MATCH_STATUSES)),
        )
        .group_by(RequestVendorMatch.vendor_id)
    )
    return {vendor_id: int(count) for vendor_id, count in result.all()}


async def get_avg_response_hours(db: AsyncSession, vendor_ids: list[str]) -> dict[str, float]:
    """Mean recorded response time per vendor, in hours."""
    if not vendor_ids:
        return {}
    result = await db.execute(
        select(RequestVendorMatch.vendor_id, func.avg(RequestVendorMatch.response_time_seconds))
        .where(
            RequestVendorMatch.vendor_id.in_(vendor_ids),
            RequestVendorMatch.response_time_seconds.is_not(None),
        )
        .group_by(RequestVendorMatch.vendor_id)
    )
    return {
        vendor_id: float(avg_seconds) / _SECONDS_PER_HOUR
        for vendor_id, avg_seconds in result.all()
        if avg_seconds is not None
    }


async def load_vendor_pool(
    db: AsyncSession,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[VendorMatchData]:
    """Every active vendor, enriched with history and current workload."""
    vendors = await get_active_vendors(db)
    if not vendors:
        return []

    vendor_ids = [v.id for v in vendors]
    matches = await get_matches_by_vendor(db, vendor_ids)
    pending = await get_pending_job_counts(db, vendor_ids)
    response_hours = await get_avg_response_hours(db, vendor_ids)

    logger.debug("Loaded %d active vendors with %d match rows", len(vendors), sum(len(m) for m in matches.values()))

    return [
        build_vendor_match_data(
            vendor,
            matches.get(vendor.id, []),
            pending_jobs_count=pending.get(vendor.id, 0),
            avg_response_time_hours=response_hours.get(vendor.id),
            config=config,
        )
        for vendor in vendors
    ]


async def load_vendor_metrics(
    db: AsyncSession,
    vendor: Vendor,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> VendorMetrics:
    matches = await get_matches_by_vendor(db, [vendor.id])
    vetting = calculate_vetting_score(vetting_input_for(vendor), config)
    return build_vendor_metrics(vendor.id, matches.get(vendor.id, []), vetting.total_score)
