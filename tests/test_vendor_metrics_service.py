"""Tests for loading vendor history from the database."""

import pytest

from vendor_match.services.vendor_metrics_service import (
    build_vendor_match_data,
    build_vendor_metrics,
    get_avg_response_hours,
    get_matches_by_vendor,
    get_pending_job_counts,
    load_vendor_metrics,
    load_vendor_pool,
    review_from_match,
)


# ===========================================================================
# Tier 1: Row aggregation
# ===========================================================================


class TestBuildVendorMetrics:
    """Match rows fold into a VendorMetrics snapshot."""

    async def test_counts_outcomes(self, db_session, make_vendor, make_match):
        vendor = await make_vendor()
        await make_match(vendor, review_rating=5, response_time_seconds=1800)
        await make_match(vendor, status="no_show", job_completed=False)
        await make_match(vendor, status="declined", job_completed=False, declined_after_accept=True)
        await make_match(vendor, status="intro_sent", vendor_accepted=None, job_completed=None)

        grouped = await get_matches_by_vendor(db_session, [vendor.id])
        metrics = build_vendor_metrics(vendor.id, grouped[vendor.id])

        assert metrics.total_matches == 4
        assert metrics.accepted_jobs == 3
        assert metrics.completed_jobs == 1
        assert metrics.no_shows == 1
        assert metrics.declines_after_accept == 1
        assert len(metrics.reviews) == 1
        assert metrics.response_times == (1800.0,)
        assert metrics.last_activity_date is not None

    async def test_accepted_but_not_completed_is_no_show(self, db_session, make_vendor, make_match):
        vendor = await make_vendor()
        await make_match(vendor, status="cancelled", vendor_accepted=True, job_completed=False)

        grouped = await get_matches_by_vendor(db_session, [vendor.id])
        metrics = build_vendor_metrics(vendor.id, grouped[vendor.id])

        assert metrics.no_shows == 1
        assert metrics.declines_after_accept == 0

    async def test_no_show_counted_once_per_match(self, db_session, make_vendor, make_match):
        vendor = await make_vendor()
        # Both rules apply to this row
        await make_match(vendor, status="no_show", vendor_accepted=True, job_completed=False)
        # Still open, completion unknown
        await make_match(vendor, status="in_progress", vendor_accepted=True, job_completed=None)
        # Never accepted
        await make_match(vendor, status="cancelled", vendor_accepted=False, job_completed=False)

        metrics = await load_vendor_metrics(db_session, vendor)
        assert metrics.no_shows == 1

    async def test_review_dimensions_carried(self, make_vendor, make_match):
        vendor = await make_vendor()
        match = await make_match(vendor, review_rating=5, review_quality=2)
        review = review_from_match(match)
        assert review.rating == 5
        assert review.quality_rating == 2
        assert review.created_at == match.review_submitted_at

    async def test_no_review_when_unrated(self, make_vendor, make_match):
        vendor = await make_vendor()
        assert review_from_match(await make_match(vendor)) is None

    def test_empty_history(self):
        metrics = build_vendor_metrics("v-1", [])
        assert metrics.total_matches == 0
        assert metrics.reviews == ()
        assert metrics.last_activity_date is None


# ===========================================================================
# Tier 2: Aggregate queries
# ===========================================================================


class TestAggregateQueries:
    async def test_pending_job_counts(self, db_session, make_vendor, make_match):
        busy = await make_vendor(business_name="Busy")
        idle = await make_vendor(business_name="Idle")
        for status in ("pending", "intro_sent", "vendor_accepted", "in_progress", "completed", "cancelled"):
            await make_match(busy, status=status)
        await make_match(idle, status="completed")

        counts = await get_pending_job_counts(db_session, [busy.id, idle.id])
        assert counts == {busy.id: 4}

    async def test_avg_response_hours(self, db_session, make_vendor, make_match):
        vendor = await make_vendor()
        await make_match(vendor, response_time_seconds=3600)
        await make_match(vendor, response_time_seconds=7200)
        await make_match(vendor, response_time_seconds=None)

        hours = await get_avg_response_hours(db_session, [vendor.id])
        assert hours[vendor.id] == pytest.approx(1.5)

    async def test_empty_id_list(self, db_session):
        assert await get_pending_job_counts(db_session, []) == {}
        assert await get_avg_response_hours(db_session, []) == {}
        assert await get_matches_by_vendor(db_session, []) == {}

    async def test_matches_grouped_by_vendor(self, db_session, make_vendor, make_match):
        first = await make_vendor()
        second = await make_vendor()
        await make_match(first)
        await make_match(first)
        await make_match(second)

        grouped = await get_matches_by_vendor(db_session, [first.id, second.id])
        assert len(grouped[first.id]) == 2
        assert len(grouped[second.id]) == 1


# ===========================================================================
# Tier 3: Pool loading
# ===========================================================================


class TestLoadVendorPool:
    async def test_only_active_vendors(self, db_session, make_vendor):
        active = await make_vendor(vendor_id="a-vendor")
        await make_vendor(status="inactive")
        await make_vendor(status="pending_review")

        pool = await load_vendor_pool(db_session)
        assert [v.vendor_id for v in pool] == [active.id]

    async def test_pool_is_enriched(self, db_session, make_vendor, make_match):
        vendor = await make_vendor(
            services=["hvac"],
            service_areas=["prefix:191"],
            emergency_services=True,
            service_hours_24_7=True,
            service_specialties={"hvac": ["heat pumps"]},
            job_size_range=["1k_5k"],
        )
        await make_match(vendor, status="in_progress", job_completed=None, response_time_seconds=7200)
        await make_match(vendor, review_rating=4)

        [data] = await load_vendor_pool(db_session)
        assert data.services == ("hvac",)
        assert data.service_areas == ("prefix:191",)
        assert data.pending_jobs_count == 1
        assert data.avg_response_time_hours == pytest.approx(2.0)
        assert data.emergency_services
        assert data.service_hours.is_24_7
        assert data.service_specialties == {"hvac": ["heat pumps"]}
        assert data.job_size_ranges == ("1k_5k",)
        assert data.metrics.total_matches == 2
        assert len(data.metrics.reviews) == 1

    async def test_vetting_score_attached(self, db_session, make_vendor):
        vendor = await make_vendor(licensed=True, insured=True, years_in_business=5)
        metrics = await load_vendor_metrics(db_session, vendor)
        assert metrics.vetting_score == 35

    async def test_unknown_workload_passed_through(self, make_vendor):
        vendor = await make_vendor()
        data = build_vendor_match_data(vendor, [], pending_jobs_count=None)
        assert data.pending_jobs_count is None

    async def test_empty_database(self, db_session):
        assert await load_vendor_pool(db_session) == []
