from datetime import date, datetime

import pytest

from bozo_bets.schedule.nfl_weeks import (
    can_submit_bet_for_week,
    format_nfl_week_date,
    get_available_weeks,
    get_current_nfl_week,
    get_nfl_week_info,
    get_season_kickoff,
    get_week_status_description,
)


def test_known_and_computed_kickoffs():
    assert get_season_kickoff(2025) == date(2025, 9, 4)
    # Thursday after Labor Day (Sep 6, 2032)
    assert get_season_kickoff(2032) == date(2032, 9, 9)


def test_week_window_boundaries():
    week1 = get_nfl_week_info(1, 2025, now=datetime(2025, 9, 2))
    week2 = get_nfl_week_info(2, 2025, now=datetime(2025, 9, 15, 23, 59))

    assert week1.start_date == datetime(2025, 9, 2)
    assert week1.is_active
    assert week2.start_date == datetime(2025, 9, 9)
    assert week2.end_date == datetime(2025, 9, 15)
    assert week2.is_active


def test_window_closes_when_next_opens():
    now = datetime(2025, 9, 16)

    assert get_nfl_week_info(2, 2025, now=now).is_past
    assert get_current_nfl_week(now=now).week == 3


def test_week_out_of_range():
    with pytest.raises(ValueError):
        get_nfl_week_info(19, 2025)


def test_current_week_before_kickoff_and_between_seasons():
    assert get_current_nfl_week(now=datetime(2025, 9, 1, 23, 0)) is None
    assert get_current_nfl_week(now=datetime(2026, 3, 1)) is None

    # January belongs to the previous season
    january = get_current_nfl_week(now=datetime(2026, 1, 2))
    assert (january.week, january.season) == (18, 2025)


def test_can_submit_only_current_week():
    now = datetime(2025, 9, 10, 12, 0)

    assert can_submit_bet_for_week(2, 2025, now=now).can_submit
    assert can_submit_bet_for_week(3, 2025, now=now).reason == (
        "Week 3 is in the future. Current week is 2"
    )
    assert can_submit_bet_for_week(2, 2024, now=now).reason == (
        "NFL season is not currently active"
    )


def test_status_description():
    now = datetime(2025, 9, 10)

    assert get_week_status_description(2, 2025, now=now) == (
        "Week 2 is currently active - you can submit bets!"
    )
    assert get_week_status_description(1, 2025, now=now) == (
        "Week 1 has already passed. Current week is 2"
    )


def test_available_weeks():
    weeks = get_available_weeks(2025, now=datetime(2025, 9, 10))

    assert [w.week for w in weeks] == list(range(1, 19))
    assert [w.is_active for w in weeks].count(True) == 1


def test_format_nfl_week_date():
    assert format_nfl_week_date(date(2025, 9, 4)) == "Thursday, Sep 4, 2025"
