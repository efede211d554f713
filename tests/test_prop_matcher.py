from datetime import datetime

import pytest

from bozo_bets.database.models import BetStatus, FanduelProp
from bozo_bets.props.fanduel import find_matching_prop, search_props
from bozo_bets.props.matcher import (
    extract_player_and_team,
    generate_prop_suggestions,
    normalize_prop_text,
)

from .conftest import SEASON


@pytest.mark.parametrize(
    "text, expected",
    [
        ("J Allen buf pass yds o 250", "j allen bills passing yards over 250"),
        ("KC  ML", "chiefs moneyline"),
        ("Kelce rec yds u 70.5", "kelce receiving yards under 70.5"),
        ("Eagles o/u 47.5", "eagles total 47.5"),
    ],
)
def test_normalize_prop_text(text, expected):
    assert normalize_prop_text(text) == expected


def test_normalize_does_not_touch_words_containing_shorthand():
    assert normalize_prop_text("Cooper Kupp receptions over 5.5") == (
        "cooper kupp receptions over 5.5"
    )


def test_word_like_abbreviations_need_capitals():
    assert normalize_prop_text("Josh Allen no touchdown") == "josh allen no touchdown"
    assert extract_player_and_team("Josh Allen no touchdown").team == ""
    assert normalize_prop_text("Kamara NO rush yds o 60.5") == (
        "kamara saints rushing yards over 60.5"
    )
    assert extract_player_and_team("Cousins MIN pass yds").team == "vikings"
    assert normalize_prop_text("JEFFERSON MIN REC YDS") == "jefferson min receiving yards"


def test_extract_player_and_team():
    assert extract_player_and_team("J Allen buf pass yds o 250") == (
        "j allen",
        "bills",
        "passing yards over 250",
    )
    assert extract_player_and_team("Josh Allen passing yards over 250.5") == (
        "josh allen",
        "",
        "passing yards over 250.5",
    )
    assert extract_player_and_team("over 250") == ("", "", "over 250")


def test_suggestions_for_team_props():
    suggestions = generate_prop_suggestions("Allen BUF pass yds")

    assert suggestions[0] == "allen bills passing yards"
    assert "allen buffalo passing yards" in suggestions
    assert len(suggestions) <= 5


@pytest.fixture
def props(db):
    rows = [
        FanduelProp(
            fanduel_id="fd-allen-py",
            player="Josh Allen",
            team="Buffalo Bills",
            prop="Passing Yards",
            line=250.5,
            odds=-110,
            week=2,
            season=SEASON,
            game_time=datetime(2025, 9, 14, 17, 0),
        ),
        FanduelProp(
            fanduel_id="fd-bills-ml",
            player="Buffalo Bills",
            team="Buffalo Bills",
            prop="Moneyline",
            odds=-200,
            week=2,
            season=SEASON,
            game_time=datetime(2025, 9, 14, 17, 0),
        ),
        FanduelProp(
            fanduel_id="fd-settled",
            player="Derrick Henry",
            team="Baltimore Ravens",
            prop="Rushing Yards",
            odds=-115,
            week=2,
            season=SEASON,
            status=BetStatus.HIT,
            game_time=datetime(2025, 9, 14, 17, 0),
        ),
    ]
    db.add_all(rows)
    db.commit()
    return rows


def test_match_player_and_prop(db, props):
    match = find_matching_prop(db, "Josh Allen BUF pass yds over 250.5", 2, SEASON)

    assert match.found
    assert match.prop.fanduel_id == "fd-allen-py"
    assert match.confidence == 0.9


def test_match_team_moneyline(db, props):
    match = find_matching_prop(db, "BUF ML", 2, SEASON)

    assert match.prop.fanduel_id == "fd-bills-ml"
    assert match.confidence == 1.0


def test_settled_props_are_not_matched(db, props):
    match = find_matching_prop(db, "Derrick Henry rush yds", 2, SEASON)

    assert not match.found


def test_no_match_offers_suggestions(db, props):
    match = find_matching_prop(db, "Patrick Mahomes rush yds", 2, SEASON)

    assert not match.found
    assert match.suggestions == ["patrick mahomes rushing yards"]
    assert match.warning.startswith('Unable to find matching prop for "Patrick Mahomes rush yds"')


def test_search_props(db, props):
    results = search_props(db, "allen", 2, SEASON)

    assert [prop.fanduel_id for prop in results] == ["fd-allen-py"]
