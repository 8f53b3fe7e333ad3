"""Vendor service-area parsing and postal-code matching.

Pure-function module — NO database access.

Vendors list the areas they serve as free-form strings.  Three encodings are
recognised:

    "19103"                    exact 5-digit zip
    "prefix:191" / "1910"      every zip starting with 3 or 4 digits
    "prefix:19103"             same as the exact zip
    "state:PA" / "PA"          every zip in a state

Each entry is parsed once into a tagged variant and matched with a fixed
precedence: exact > 4-digit prefix > 3-digit prefix > state.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

_ZIP_RE = re.compile(r"^\d{5}$")
_PREFIX_RE = re.compile(r"^\d{3,4}$")
_STATE_RE = re.compile(r"^[A-Za-z]{2}$")
_ZIP_IN_TEXT_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")

logger = logging.getLogger(__name__)


def _prefix_range(start: int, end: int) -> frozenset[str]:
    return frozenset(f"{n:03d}" for n in range(start, end + 1))


# 3-digit zip prefixes by state for the markets the platform serves.
# Built once at import and exposed read-only.
STATE_ZIP_PREFIXES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "PA": _prefix_range(150, 196),
        "NJ": _prefix_range(70, 89),
        "DE": _prefix_range(197, 199),
        "MD": _prefix_range(206, 212) | _prefix_range(214, 219),
        "NY": _prefix_range(100, 149) | frozenset({"005"}),
    }
)

STATE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "PA": "Pennsylvania",
        "NJ": "New Jersey",
        "DE": "Delaware",
        "MD": "Maryland",
        "NY": "New York",
    }
)


# ── Tagged variants ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExactArea:
    zip_code: str


@dataclass(frozen=True)
class PrefixArea:
    prefix: str  # 3 or 4 digits


@dataclass(frozen=True)
class StateArea:
    state: str  # upper-case 2-letter code


ServiceArea = Union[ExactArea, PrefixArea, StateArea]


class AreaMatchType(str, Enum):
    """Kinds of location overlap, best first."""

    EXACT = "exact"
    PREFIX4 = "prefix4"
    PREFIX3 = "prefix3"
    STATE = "state"
    NONE = "none"


_PRECEDENCE = {
    AreaMatchType.EXACT: 0,
    AreaMatchType.PREFIX4: 1,
    AreaMatchType.PREFIX3: 2,
    AreaMatchType.STATE: 3,
    AreaMatchType.NONE: 4,
}


@dataclass(frozen=True)
class AreaMatch:
    match_type: AreaMatchType
    area: Optional[ServiceArea] = None

    @property
    def matched(self) -> bool:
        return self.match_type is not AreaMatchType.NONE


NO_MATCH = AreaMatch(AreaMatchType.NONE)


# ── Parsing ──────────────────────────────────────────────────────────────────

def parse_service_area(raw: str) -> Optional[ServiceArea]:
    """Parse one service-area entry. Returns None for unrecognised entries."""
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    lowered = text.lower()

    if lowered.startswith("prefix:"):
        body = text[len("prefix:"):].strip()
        if _ZIP_RE.match(body):
            # A full-length prefix only ever matches that one zip
            return ExactArea(body)
        return PrefixArea(body) if _PREFIX_RE.match(body) else None

    if lowered.startswith("state:"):
        body = text[len("state:"):].strip()
        return StateArea(body.upper()) if _STATE_RE.match(body) else None

    if _ZIP_RE.match(text):
        return ExactArea(text)
    if _PREFIX_RE.match(text):
        return PrefixArea(text)
    if _STATE_RE.match(text):
        return StateArea(text.upper())
    return None


def parse_service_areas(entries: Optional[Iterable[str]]) -> list[ServiceArea]:
    areas: list[ServiceArea] = []
    for entry in entries or ():
        area = parse_service_area(entry)
        if area is None:
            logger.debug("Ignoring unrecognised service area %r", entry)
        else:
            areas.append(area)
    return areas


def extract_zip_code(location: Optional[str]) -> Optional[str]:
    """Pull the first 5-digit zip out of a free-form address."""
    if not location:
        return None
    found = _ZIP_IN_TEXT_RE.search(location)
    return found.group(1) if found else None


def normalise_zip(zip_code: Optional[str]) -> Optional[str]:
    if not zip_code:
        return None
    return extract_zip_code(str(zip_code).strip())


# ── Matching ─────────────────────────────────────────────────────────────────

def is_zip_in_state(zip_code: str, state: str) -> bool:
    prefixes = STATE_ZIP_PREFIXES.get(state.upper())
    return bool(prefixes) and zip_code[:3] in prefixes


def match_area(zip_code: str, area: ServiceArea) -> AreaMatchType:
    if isinstance(area, ExactArea):
        return AreaMatchType.EXACT if area.zip_code == zip_code else AreaMatchType.NONE
    if isinstance(area, PrefixArea):
        if not zip_code.startswith(area.prefix):
            return AreaMatchType.NONE
        return AreaMatchType.PREFIX4 if len(area.prefix) == 4 else AreaMatchType.PREFIX3
    if isinstance(area, StateArea):
        return AreaMatchType.STATE if is_zip_in_state(zip_code, area.state) else AreaMatchType.NONE
    return AreaMatchType.NONE


def best_area_match(zip_code: str, areas: Iterable[ServiceArea]) -> AreaMatch:
    """Return the highest-precedence overlap between *zip_code* and *areas*."""
    best = NO_MATCH
    for area in areas:
        match_type = match_area(zip_code, area)
        if _PRECEDENCE[match_type] < _PRECEDENCE[best.match_type]:
            best = AreaMatch(match_type, area)
            if match_type is AreaMatchType.EXACT:
                break
    return best


def describe_area(area: ServiceArea) -> str:
    """Short label for an area, e.g. ``191xx`` or ``Pennsylvania``."""
    if isinstance(area, ExactArea):
        return area.zip_code
    if isinstance(area, PrefixArea):
        return area.prefix + "x" * (5 - len(area.prefix))
    return STATE_NAMES.get(area.state, area.state)
