"""Domain enumerations for vendor scoring and matching.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class ScoreTier(str, Enum):
    """Display tier derived from a 0-100 performance score."""

    NEW = "new"
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class VettingTier(str, Enum):
    """Display tier derived from the 0-45 onboarding vetting score."""

    STRONG = "strong"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    CONDITIONAL = "conditional"
    DECLINED = "declined"


class MatchConfidence(str, Enum):
    """How much real data backs a vendor's match score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WarningSeverity(str, Enum):
    """Severity of a match warning. HIGH blocks a recommendation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FactorIcon(str, Enum):
    """Icon hint shown next to a match factor in the admin UI."""

    CHECK = "check"
    WARNING = "warning"
    INFO = "info"
    STAR = "star"


class Urgency(str, Enum):
    """Urgency level selected by the property owner."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class VendorStatus(str, Enum):
    """Lifecycle status of a vendor account."""

    PENDING_REVIEW = "pending_review"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class MatchStatus(str, Enum):
    """Status of a request-vendor match."""

    PENDING = "pending"
    INTRO_SENT = "intro_sent"
    VENDOR_ACCEPTED = "vendor_accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DECLINED = "declined"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


# Matches in these states count against a vendor's current workload
PENDING_MATCH_STATUSES = frozenset(
    {
        MatchStatus.PENDING.value,
        MatchStatus.INTRO_SENT.value,
        MatchStatus.VENDOR_ACCEPTED.value,
        MatchStatus.IN_PROGRESS.value,
    }
)
