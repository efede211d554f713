"""
Catalog of sportsbook props for a week.

Matches user-entered prop text against stored FanduelProp rows and keeps
those rows fresh from the odds feed, falling back to what is stored when
the feed is unavailable or out of quota.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from bozo_bets.config.constants import TEAM_PROP_TYPES
from bozo_bets.data.sources.base import DataSourceError
from bozo_bets.database.models import BetStatus, FanduelProp
from bozo_bets.database.schemas import FanduelPropResponse
from bozo_bets.props.matcher import (
    find_team,
    extract_player_and_team,
    generate_prop_suggestions,
    normalize_prop_text,
)

log = logger.bind(component="props")

CONFIDENCE_EXACT = 1.0
CONFIDENCE_PLAYER_AND_PROP = 0.9
CONFIDENCE_PLAYER = 0.8
CONFIDENCE_PROP_TYPE = 0.7
CONFIDENCE_PARTIAL = 0.5


@dataclass
class PropMatchResult:
    """Best stored prop for a piece of free text."""

    found: bool
    prop: Optional[FanduelProp] = None
    confidence: float = 0.0
    suggestions: list[str] = field(default_factory=list)
    warning: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "found": self.found,
            "prop": prop_to_dict(self.prop) if self.prop is not None else None,
            "confidence": self.confidence,
            "suggestions": self.suggestions,
            "warning": self.warning,
        }


def prop_to_dict(prop: FanduelProp) -> dict[str, Any]:
    return FanduelPropResponse.model_validate(prop).model_dump(mode="json")


def _player_name(prop: FanduelProp) -> str:
    """Normalized player with any trailing team nickname removed."""
    name = normalize_prop_text(prop.player)
    team = find_team(normalize_prop_text(prop.team))
    if team and name.endswith(" " + team):
        name = name[: -len(team) - 1].strip()
    return name


def _prop_matches(candidate_prop: str, prop_type: str) -> bool:
    """Prop type equal, or the user text adds a line after it ("... over 250.5")."""
    return prop_type == candidate_prop or prop_type.startswith(candidate_prop + " ")


def find_matching_prop(
    db: Session, text: str, week: int, season: int
) -> PropMatchResult:
    """
    Match prop text to the week's open props.

    Strategies, strongest first:
    exact normalized text (1.0), team moneyline/spread/total (1.0),
    player and prop type (0.9), player alone when no prop is given (0.8),
    prop type (0.7), partial player name (0.5).
    """
    normalized = normalize_prop_text(text)
    player, team, prop_type = extract_player_and_team(text)

    candidates = db.scalars(
        select(FanduelProp)
        .where(
            FanduelProp.week == week,
            FanduelProp.season == season,
            FanduelProp.status == BetStatus.PENDING,
        )
        .order_by(FanduelProp.game_time, FanduelProp.id)
    ).all()

    for candidate in candidates:
        full = normalize_prop_text(f"{candidate.player} {candidate.team} {candidate.prop}")
        if full == normalized:
            return PropMatchResult(found=True, prop=candidate, confidence=CONFIDENCE_EXACT)

    if team and prop_type in TEAM_PROP_TYPES:
        for candidate in candidates:
            if (
                find_team(normalize_prop_text(candidate.team)) == team
                and normalize_prop_text(candidate.prop) == prop_type
            ):
                return PropMatchResult(
                    found=True, prop=candidate, confidence=CONFIDENCE_EXACT
                )

    best: Optional[FanduelProp] = None
    best_confidence = 0.0

    def consider(candidate: FanduelProp, confidence: float) -> None:
        nonlocal best, best_confidence
        if confidence > best_confidence:
            best, best_confidence = candidate, confidence

    for candidate in candidates:
        candidate_player = _player_name(candidate)
        candidate_prop = normalize_prop_text(candidate.prop)

        if player and prop_type:
            if candidate_player == player and _prop_matches(candidate_prop, prop_type):
                consider(candidate, CONFIDENCE_PLAYER_AND_PROP)
        elif player and candidate_player == player:
            consider(candidate, CONFIDENCE_PLAYER)

        if prop_type and _prop_matches(candidate_prop, prop_type):
            consider(candidate, CONFIDENCE_PROP_TYPE)

        if player and candidate_player and (
            player in candidate_player or candidate_player in player
        ):
            consider(candidate, CONFIDENCE_PARTIAL)

    if best is not None:
        return PropMatchResult(found=True, prop=best, confidence=best_confidence)

    return PropMatchResult(
        found=False,
        suggestions=generate_prop_suggestions(text),
        warning=(
            f'Unable to find matching prop for "{text}". '
            "Please check the spelling or try one of the suggestions below."
        ),
    )


def search_props(db: Session, query: str, week: int, season: int) -> list[FanduelProp]:
    """Case-insensitive substring search over open props."""
    pattern = f"%{query.strip().lower()}%"
    return list(
        db.scalars(
            select(FanduelProp)
            .where(
                FanduelProp.week == week,
                FanduelProp.season == season,
                FanduelProp.status == BetStatus.PENDING,
                or_(
                    func.lower(FanduelProp.player).like(pattern),
                    func.lower(FanduelProp.prop).like(pattern),
                    func.lower(FanduelProp.team).like(pattern),
                ),
            )
            .order_by(FanduelProp.game_time, FanduelProp.id)
        ).all()
    )


def get_available_props(db: Session, week: int, season: int) -> list[FanduelProp]:
    return list(
        db.scalars(
            select(FanduelProp)
            .where(FanduelProp.week == week, FanduelProp.season == season)
            .order_by(FanduelProp.game_time, FanduelProp.id)
        ).all()
    )


def get_live_odds(db: Session, fanduel_id: str) -> Optional[dict[str, int]]:
    prop = db.scalar(select(FanduelProp).where(FanduelProp.fanduel_id == fanduel_id))
    if prop is None:
        return None
    return {
        "odds": prop.odds,
        "over_odds": prop.over_odds if prop.over_odds is not None else prop.odds,
        "under_odds": prop.under_odds if prop.under_odds is not None else prop.odds,
    }


def upsert_props(db: Session, records: list[dict[str, Any]]) -> list[FanduelProp]:
    """Insert or refresh props keyed by fanduel_id."""
    unique = {record["fanduel_id"]: record for record in records}

    stored = []
    for record in unique.values():
        prop = db.scalar(
            select(FanduelProp).where(FanduelProp.fanduel_id == record["fanduel_id"])
        )
        if prop is None:
            prop = FanduelProp(fanduel_id=record["fanduel_id"])
            db.add(prop)
        for key in (
            "player",
            "team",
            "prop",
            "line",
            "odds",
            "over_odds",
            "under_odds",
            "bookmaker",
            "week",
            "season",
            "game_time",
        ):
            if key in record:
                setattr(prop, key, record[key])
        stored.append(prop)
    db.commit()
    return stored


def _cache_key(week: int, season: int) -> str:
    return f"props:{season}:{week}"


async def invalidate_week_props(cache, week: int, season: int) -> None:
    """Drop the cached prop list once stored props for the week change."""
    if cache is not None:
        await cache.delete(_cache_key(week, season))


async def fetch_week_props(
    db: Session,
    odds_client,
    week: int,
    season: int,
    cache=None,
    ttl_seconds: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Get the week's props, refreshing from the odds feed when allowed.

    Order: cache, then the feed (if the monthly quota permits), then the
    rows already stored.
    """
    if cache is not None:
        cached = await cache.get(_cache_key(week, season))
        if cached is not None:
            log.debug(f"Using cached props for week {week}, {season}")
            return cached

    usage = odds_client.can_make_request(db)
    if not usage.allowed:
        log.warning(f"Odds API unavailable ({usage.reason}); using stored props")
        return [prop_to_dict(p) for p in get_available_props(db, week, season)]

    try:
        records = await odds_client.fetch_nfl_odds(db, week, season)
    except DataSourceError as e:
        log.error(f"Failed to fetch props for week {week}: {e}; using stored props")
        return [prop_to_dict(p) for p in get_available_props(db, week, season)]

    upsert_props(db, records)
    props = [prop_to_dict(p) for p in get_available_props(db, week, season)]

    if cache is not None:
        await cache.set(_cache_key(week, season), props, ttl_seconds=ttl_seconds, data_type="props")

    log.info(f"Fetched {len(records)} props for week {week}, {season}")
    return props
