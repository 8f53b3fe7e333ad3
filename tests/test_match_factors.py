"""Unit tests for the individual match factors."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from vendor_match.domain.enums import FactorIcon, Urgency, WarningSeverity
from vendor_match.services.matching.contracts import MatchingContext, ServiceHours, VendorMatchData
from vendor_match.services.matching.factors import (
    range_overlap,
    requested_specialties,
    score_availability,
    score_capacity,
    score_location,
    score_performance,
    score_price_fit,
    score_response_time,
    score_service_match,
    score_specialty,
    vendor_price_range,
)
from vendor_match.services.performance_scorer import Review, VendorMetrics, calculate_vendor_score
from vendor_match.services.scoring_config import config_from_mapping

WEEKDAY = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)  # Wednesday
SATURDAY = datetime(2026, 3, 7, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _vendor(**overrides):
    fields = {
        "vendor_id": "v-1",
        "business_name": "Acme Plumbing",
        "services": ("plumbing",),
        "service_areas": ("19103",),
    }
    fields.update(overrides)
    return VendorMatchData(**fields)


def _context(**overrides):
    fields = {
        "request_id": "r-1",
        "service_type": "plumbing",
        "zip_code": "19103",
        "urgency": Urgency.MEDIUM,
    }
    fields.update(overrides)
    return MatchingContext(**fields)


def _performance(ratings=(), vendor_id="v-1"):
    reviews = tuple(Review(rating=r, created_at=WEEKDAY) for r in ratings)
    return calculate_vendor_score(VendorMetrics(vendor_id=vendor_id, reviews=reviews), now=WEEKDAY)


# ═══════════════════════════════════════════════════════════════════════════
# Service / location
# ═══════════════════════════════════════════════════════════════════════════

class TestServiceMatch:
    def test_offered(self):
        result = score_service_match(_vendor(), _context(), 0.25)
        assert result.factor.score == 100
        assert result.factor.weighted == pytest.approx(25.0)
        assert "Plumbing" in result.factor.reason
        assert result.warnings == ()

    def test_not_offered_raises_high_warning(self):
        result = score_service_match(_vendor(services=("hvac",)), _context(), 0.25)
        assert result.factor.score == 0
        assert [w.severity for w in result.warnings] == [WarningSeverity.HIGH]


class TestLocation:
    @pytest.mark.parametrize("areas, score", [
        (("19103",), 100),
        (("prefix:19103",), 100),
        (("prefix:1910",), 85),
        (("prefix:191",), 70),
        (("state:PA",), 40),
        (("08001",), 0),
    ])
    def test_precedence_scores(self, areas, score):
        result = score_location(_vendor(service_areas=areas), _context(), 0.20)
        assert result.factor.score == score

    def test_prefix_match_is_partial_and_says_so(self):
        result = score_location(_vendor(service_areas=("prefix:191",)), _context(), 0.20)
        assert 0 < result.factor.score < 100
        assert "prefix" in result.factor.reason
        assert "191xx" in result.factor.reason

    def test_no_overlap_warns(self):
        result = score_location(_vendor(service_areas=("08001",)), _context(), 0.20)
        assert result.warnings[0].severity is WarningSeverity.MEDIUM
        assert "does not list this area" in result.warnings[0].message

    def test_no_zip_is_neutral(self):
        result = score_location(_vendor(), _context(zip_code=None), 0.20)
        assert result.factor.score == 50
        assert result.factor.reason == "Location not specified"
        assert not result.factor.has_data

    def test_no_areas(self):
        result = score_location(_vendor(service_areas=()), _context(), 0.20)
        assert result.factor.score == 40
        assert not result.factor.has_data

    def test_unparseable_areas_count_as_none(self):
        result = score_location(_vendor(service_areas=("everywhere",)), _context(), 0.20)
        assert result.factor.score == 40


# ═══════════════════════════════════════════════════════════════════════════
# Performance / response / capacity
# ═══════════════════════════════════════════════════════════════════════════

class TestPerformanceFactor:
    def test_new_vendor(self):
        result = score_performance(_performance(), 0.15)
        assert result.factor.score == 50
        assert not result.factor.has_data
        assert result.warnings[0].message == "No reviews yet (low confidence)"

    def test_reviewed_vendor_reason_has_tier(self):
        result = score_performance(_performance([5] * 5), 0.15)
        assert result.factor.score == 68
        assert result.factor.reason == "Good rating (68/100)"
        assert result.factor.icon is FactorIcon.STAR
        assert result.warnings == ()

    def test_low_performance_warns(self):
        result = score_performance(_performance([1] * 5), 0.15)
        assert result.factor.score < 30
        assert [w.message for w in result.warnings] == ["Low performance rating"]


class TestResponseTime:
    @pytest.mark.parametrize("hours, score", [
        (0.5, 100),
        (4, 100),
        (8, 75),
        (20, 50),
        (30, 25),
        (72, 0),
    ])
    def test_bands(self, hours, score):
        assert score_response_time(hours, _context(), 0.10).factor.score == score

    def test_reason(self):
        assert score_response_time(3.2, _context(), 0.10).factor.reason == "Average response time: 3.2h"

    def test_no_data(self):
        result = score_response_time(None, _context(), 0.10)
        assert result.factor.score == 50
        assert not result.factor.has_data

    def test_slow_vendor_warned_on_urgent_request(self):
        result = score_response_time(30, _context(urgency=Urgency.HIGH), 0.20)
        assert result.warnings[0].severity is WarningSeverity.MEDIUM

    def test_slow_vendor_not_warned_on_routine_request(self):
        assert score_response_time(30, _context(), 0.10).warnings == ()


class TestCapacity:
    @pytest.mark.parametrize("pending, score", [(0, 100), (2, 100), (3, 70), (4, 70), (5, 40), (6, 40), (7, 20), (15, 20)])
    def test_bands(self, pending, score):
        assert score_capacity(pending, 0.05).factor.score == score

    def test_busy_vendor_medium_warning(self):
        result = score_capacity(5, 0.05)
        assert result.warnings[0].severity is WarningSeverity.MEDIUM
        assert result.warnings[0].message == "Currently has 5 pending jobs"

    def test_overloaded_vendor_high_warning(self):
        assert score_capacity(8, 0.05).warnings[0].severity is WarningSeverity.HIGH

    def test_light_load_no_warning(self):
        result = score_capacity(1, 0.05)
        assert result.warnings == ()
        assert result.factor.reason == "1 pending job"

    def test_negative_count_treated_as_zero(self):
        assert score_capacity(-3, 0.05).factor.reason == "Fully available"

    def test_unknown_pending_count(self):
        result = score_capacity(None, 0.05)
        assert result.factor.score == 60
        assert result.factor.reason == "Availability unknown"
        assert result.factor.has_data is False
        assert result.factor.icon is FactorIcon.INFO
        assert result.factor.weighted == pytest.approx(3.0)
        assert result.warnings == ()

    def test_unknown_pending_score_configurable(self):
        config = config_from_mapping({"capacity": {"no_data_score": 50.0}})
        assert score_capacity(None, 0.05, config).factor.score == 50


# ═══════════════════════════════════════════════════════════════════════════
# Availability / specialty / price
# ═══════════════════════════════════════════════════════════════════════════

class TestAvailability:
    def test_emergency_with_emergency_service(self):
        result = score_availability(
            _vendor(emergency_services=True), _context(urgency=Urgency.EMERGENCY), 0.10, WEEKDAY
        )
        assert result.factor.score == 100

    def test_emergency_without_emergency_service(self):
        result = score_availability(_vendor(), _context(urgency=Urgency.EMERGENCY), 0.10, WEEKDAY)
        assert result.factor.score == 20
        assert result.warnings[0].severity is WarningSeverity.HIGH

    def test_standard(self):
        assert score_availability(_vendor(), _context(), 0.10, WEEKDAY).factor.score == 60

    def test_24_7_bonus(self):
        vendor = _vendor(service_hours=ServiceHours(is_24_7=True))
        assert score_availability(vendor, _context(), 0.10, WEEKDAY).factor.score == 80

    def test_weekend_bonus_only_on_weekends(self):
        vendor = _vendor(service_hours=ServiceHours(weekends=True))
        assert score_availability(vendor, _context(), 0.10, SATURDAY).factor.score == 75
        assert score_availability(vendor, _context(), 0.10, WEEKDAY).factor.score == 60


class TestSpecialty:
    def test_requested_specialties_skip_other(self):
        details = {"Equipment Type": "Heat Pump", "Issue Type": "Other", "Notes": "loud"}
        assert requested_specialties(details) == ["heat pump"]

    def test_none_requested(self):
        result = score_specialty(_vendor(), _context(), 0.10)
        assert result.factor.score == 60
        assert not result.factor.has_data

    def test_has_specialty(self):
        vendor = _vendor(service_specialties={"hvac": ["Heat Pump Repair"]})
        context = _context(service_type="hvac", service_details={"Equipment Type": "Heat Pump"})
        result = score_specialty(vendor, context, 0.10)
        assert result.factor.score == 100
        assert "heat pump repair" in result.factor.reason

    def test_missing_specialty(self):
        vendor = _vendor(service_specialties={"hvac": ["Boilers"]})
        context = _context(service_type="hvac", service_details={"Equipment Type": "Heat Pump"})
        result = score_specialty(vendor, context, 0.10)
        assert result.factor.score == 30
        assert result.factor.reason == "May not specialize in heat pump"


class TestPriceFit:
    def test_vendor_range_union(self):
        assert vendor_price_range(["1k_5k", "5k_10k", "bogus"]) == (1000, 10000)
        assert vendor_price_range([]) is None

    @pytest.mark.parametrize("first, second, overlap", [
        ((1000, 2500), (1000, 5000), "full"),
        ((500, 1000), (1000, 5000), "partial"),
        ((0, 500), (1000, 5000), "none"),
    ])
    def test_overlap(self, first, second, overlap):
        assert range_overlap(first, second) == overlap

    @pytest.mark.parametrize("budget, sizes, score", [
        ("1000_2500", ("1k_5k",), 100),
        ("500_1000", ("1k_5k",), 60),
        ("under_500", ("5k_10k",), 30),
        ("over_100000", ("25k_plus",), 100),
    ])
    def test_scores(self, budget, sizes, score):
        result = score_price_fit(_vendor(job_size_ranges=sizes), _context(budget_range=budget), 0.05)
        assert result.factor.score == score

    @pytest.mark.parametrize("budget, sizes", [
        (None, ("1k_5k",)),
        ("not_sure", ("1k_5k",)),
        ("a_lot", ("1k_5k",)),
        ("1000_2500", ()),
    ])
    def test_unknown_is_neutral(self, budget, sizes):
        result = score_price_fit(_vendor(job_size_ranges=sizes), _context(budget_range=budget), 0.05)
        assert result.factor.score == 60
        assert not result.factor.has_data
