"""
NFL calendar helpers.

Maps dates to regular-season weeks, decides which week currently accepts
bets and keeps the per-game schedule that times settlement.
"""

from .games import (
    WeekSchedule,
    are_all_games_completed,
    game_to_dict,
    get_games_for_day,
    get_last_game_start_time,
    get_processing_time,
    get_week_processing_status,
    get_week_schedule,
    has_games_to_settle,
    load_bundled_schedule,
    mark_game_completed,
    mark_started_games_completed,
    should_process_bets_for_week,
    update_schedule,
)
from .nfl_weeks import (
    BetWindowCheck,
    NFLWeekInfo,
    can_submit_bet_for_week,
    format_nfl_week_date,
    get_available_weeks,
    get_current_nfl_week,
    get_nfl_week_info,
    get_season_kickoff,
    get_week_status_description,
)

__all__ = [
    "BetWindowCheck",
    "NFLWeekInfo",
    "WeekSchedule",
    "are_all_games_completed",
    "can_submit_bet_for_week",
    "format_nfl_week_date",
    "game_to_dict",
    "get_available_weeks",
    "get_current_nfl_week",
    "get_games_for_day",
    "get_last_game_start_time",
    "get_nfl_week_info",
    "get_processing_time",
    "get_season_kickoff",
    "get_week_processing_status",
    "get_week_schedule",
    "get_week_status_description",
    "has_games_to_settle",
    "load_bundled_schedule",
    "mark_game_completed",
    "mark_started_games_completed",
    "should_process_bets_for_week",
    "update_schedule",
]
