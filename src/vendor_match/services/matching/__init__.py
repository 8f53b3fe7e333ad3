"""Vendor/request matching package.

Modules:
1. service_areas (zip / prefix / state parsing and precedence matching)
2. contracts (typed inputs and results)
3. factors (one scorer per match factor)
4. engine (per-vendor score, ranking and suggestion split)
"""

from .contracts import (
    MatchFactor,
    MatchingContext,
    MatchScore,
    MatchWarning,
    ServiceHours,
    SuggestionsMeta,
    SuggestionsResult,
    VendorMatchData,
    VendorWithMatchScore,
)
from .engine import (
    build_suggestions,
    calculate_match_score,
    calculate_match_scores,
    create_matching_context,
    determine_confidence,
    get_scoring_meta,
)
from .service_areas import parse_service_area, parse_service_areas

__all__ = [
    "MatchFactor",
    "MatchingContext",
    "MatchScore",
    "MatchWarning",
    "ServiceHours",
    "SuggestionsMeta",
    "SuggestionsResult",
    "VendorMatchData",
    "VendorWithMatchScore",
    "build_suggestions",
    "calculate_match_score",
    "calculate_match_scores",
    "create_matching_context",
    "determine_confidence",
    "get_scoring_meta",
    "parse_service_area",
    "parse_service_areas",
]
