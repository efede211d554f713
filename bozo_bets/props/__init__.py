"""
Prop bet text matching and the weekly sportsbook prop catalog.

Provides:
- normalize_prop_text / extract_player_and_team: canonical prop text
- find_matching_prop: confidence-ranked lookup of stored props
- fetch_week_props: cache, quota and fallback aware refresh
"""

from .fanduel import (
    PropMatchResult,
    fetch_week_props,
    find_matching_prop,
    get_available_props,
    get_live_odds,
    prop_to_dict,
    search_props,
    upsert_props,
)
from .matcher import (
    PropParts,
    extract_player_and_team,
    find_team,
    generate_prop_suggestions,
    normalize_prop_text,
)

__all__ = [
    "PropMatchResult",
    "PropParts",
    "extract_player_and_team",
    "fetch_week_props",
    "find_matching_prop",
    "find_team",
    "generate_prop_suggestions",
    "get_available_props",
    "get_live_odds",
    "normalize_prop_text",
    "prop_to_dict",
    "search_props",
    "upsert_props",
]
