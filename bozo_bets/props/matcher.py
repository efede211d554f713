"""
Free-text prop normalization.

Turns what a user types ("J Allen buf pass yds o 250") into a canonical
form ("j allen bills passing yards over 250") that can be compared with
sportsbook prop descriptions.
"""
import re
from functools import lru_cache
from typing import NamedTuple

from bozo_bets.config.constants import (
    AMBIGUOUS_TEAM_ABBREVIATIONS,
    BETTING_TERMS,
    MAX_PROP_SUGGESTIONS,
    PROP_INDICATORS,
    TEAM_NAMES,
)


class PropParts(NamedTuple):
    """Player, team nickname and prop description split from prop text."""

    player: str
    team: str
    prop: str


def _build_replacer(table: dict[str, list[str]]) -> tuple[re.Pattern, dict[str, str]]:
    lookup = {}
    for standard, variations in table.items():
        for variation in variations:
            lookup[variation.lower()] = standard

    # Longest first so "pass yds" wins over "py"-style prefixes
    alternatives = sorted(lookup, key=len, reverse=True)
    pattern = re.compile(
        r"(?<![\w/])(" + "|".join(re.escape(a) for a in alternatives) + r")(?![\w/])"
    )
    return pattern, lookup


@lru_cache(maxsize=None)
def _term_replacer() -> tuple[re.Pattern, dict[str, str]]:
    return _build_replacer(BETTING_TERMS)


@lru_cache(maxsize=None)
def _team_replacer() -> tuple[re.Pattern, dict[str, str]]:
    return _build_replacer(
        {
            team: [v for v in variations if v not in AMBIGUOUS_TEAM_ABBREVIATIONS]
            for team, variations in TEAM_NAMES.items()
        }
    )


@lru_cache(maxsize=None)
def _capitalized_team_replacer() -> tuple[re.Pattern, dict[str, str]]:
    lookup = {
        variation.upper(): team
        for team, variations in TEAM_NAMES.items()
        for variation in variations
        if variation in AMBIGUOUS_TEAM_ABBREVIATIONS
    }
    pattern = re.compile(r"(?<![\w/])(" + "|".join(sorted(lookup)) + r")(?![\w/])")
    return pattern, lookup


def _replace(text: str, replacer: tuple[re.Pattern, dict[str, str]]) -> str:
    pattern, lookup = replacer
    return pattern.sub(lambda m: lookup[m.group(1)], text)


def normalize_prop_text(text: str) -> str:
    """
    Canonicalize betting shorthand and team names.

    Each table is applied in a single pass, so a replacement is never
    rewritten again by a later variation. Team abbreviations that are
    also words ("no", "was", "min") only count when written in capitals
    in mixed-case text.
    """
    if not text.isupper():
        text = _replace(text, _capitalized_team_replacer())
    normalized = " ".join(text.lower().split())
    normalized = _replace(normalized, _term_replacer())
    normalized = _replace(normalized, _team_replacer())
    return normalized


def find_team(normalized: str) -> str:
    for team in TEAM_NAMES:
        if re.search(rf"\b{re.escape(team)}\b", normalized):
            return team
    return ""


def extract_player_and_team(text: str) -> PropParts:
    """
    Split prop text into player, team and prop.

    With a team present, the player is what precedes it and the prop what
    follows. Otherwise the first prop indicator word ends the player name.
    """
    normalized = normalize_prop_text(text)
    team = find_team(normalized)

    if team:
        index = re.search(rf"\b{re.escape(team)}\b", normalized).start()
        return PropParts(
            player=normalized[:index].strip(),
            team=team,
            prop=normalized[index + len(team):].strip(),
        )

    words = normalized.split(" ")
    player_end = len(words)
    for i, word in enumerate(words):
        if word in PROP_INDICATORS:
            player_end = i
            break

    if player_end == 0:
        return PropParts(player="", team="", prop=normalized)
    return PropParts(
        player=" ".join(words[:player_end]),
        team="",
        prop=" ".join(words[player_end:]),
    )


def generate_prop_suggestions(text: str) -> list[str]:
    """Alternative spellings to offer when no prop matched."""
    normalized = normalize_prop_text(text)
    player, team, prop = extract_player_and_team(text)

    suggestions: list[str] = []

    def add(candidate: str) -> None:
        candidate = " ".join(candidate.split())
        if candidate and candidate not in suggestions:
            suggestions.append(candidate)

    if normalized != text.lower().strip():
        add(normalized)

    if team:
        for variation in TEAM_NAMES[team]:
            add(f"{player} {variation} {prop}")

    if player and prop:
        add(f"{player} {prop}")

    return suggestions[:MAX_PROP_SUGGESTIONS]
